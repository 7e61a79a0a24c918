from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List

import pandas as pd


@dataclass
class ColumnDefinition:
    """Lightweight schema descriptor used by item table editors."""

    field: str
    label: str
    kind: str = "text"  # text | number | select | month | bool
    default: Any = ""
    options: List[str] | None = None
    min_value: float | None = None
    step: float | None = None
    format: str | None = None
    help: str | None = None


@dataclass
class TableModel:
    """Container for a table schema plus default rows."""

    name: str
    columns: List[ColumnDefinition]
    default_rows: List[dict[str, Any]] = field(default_factory=list)

    def create_default_df(self) -> pd.DataFrame:
        if self.default_rows:
            return pd.DataFrame(self.default_rows, columns=[col.field for col in self.columns])
        seed = {col.field: col.default for col in self.columns}
        return pd.DataFrame([seed])


def to_number(value: Any, default: float = 0.0) -> float:
    """Tolerant float conversion: blanks, NaN, infinities and junk become ``default``."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def to_optional_int(value: Any) -> int | None:
    number = to_number(value, default=math.nan)
    if math.isnan(number):
        return None
    return int(number)


def parse_year_month(value: Any) -> tuple[int | None, int | None]:
    """Parse ``YYYY-MM`` (or a bare ``YYYY``) into (year, month); blanks mean unset."""
    text = str(value or "").strip()
    if not text or text.lower() == "nan":
        return None, None
    try:
        if "-" in text:
            year_str, month_str = text.split("-", 1)
            year, month = int(year_str), int(month_str)
        else:
            year, month = int(float(text)), None
    except (TypeError, ValueError):
        return None, None
    if month is not None and not 1 <= month <= 12:
        month = None
    return year, month
