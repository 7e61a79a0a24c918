"""Financial item types.

Every item is one of the category dataclasses below; ``category`` is a class
attribute so a list of items behaves as a tagged union. Parsing helpers turn
API dictionaries or editor DataFrames into items, skipping rows that cannot be
interpreted instead of failing the whole plan.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable, List, Union

import pandas as pd

from .base import ColumnDefinition, TableModel, parse_year_month, to_number, to_optional_int
from .constants import (
    END_ACTION_OPTIONS,
    FREQUENCY_OPTIONS,
    ITEM_CATEGORIES,
    OWNER_OPTIONS,
    RATE_TYPES,
    REPAYMENT_TYPES,
)
from .defaults import default_item_rows


@dataclass
class FinancialItem:
    title: str
    amount: float = 0.0
    type: str = "other"
    frequency: str = "monthly"
    start_year: int | None = None
    start_month: int = 1
    end_year: int | None = None
    end_month: int = 12
    owner: str = "self"
    growth_rate: float | None = None
    is_fixed_to_retirement: bool = False
    amount_base_year: int | None = None
    id: str = ""

    category: ClassVar[str] = ""

    def monthly_base(self) -> float:
        amount = to_number(self.amount)
        if self.frequency == "yearly":
            return amount / 12.0
        return amount


@dataclass
class IncomeItem(FinancialItem):
    category: ClassVar[str] = "income"


@dataclass
class ExpenseItem(FinancialItem):
    category: ClassVar[str] = "expense"


@dataclass
class SavingsItem(FinancialItem):
    """``amount`` is the opening balance."""

    monthly_contribution: float = 0.0
    end_action: str = "liquidate_to_cash"

    category: ClassVar[str] = "savings"


@dataclass
class PensionItem(FinancialItem):
    """National pensions are benefit streams; other types are accounts holding ``amount``."""

    monthly_contribution: float = 0.0
    payout_years: int = 20

    category: ClassVar[str] = "pension"

    @property
    def is_benefit_stream(self) -> bool:
        return self.type == "national"


@dataclass
class RealEstateItem(FinancialItem):
    end_action: str = "liquidate_to_cash"

    category: ClassVar[str] = "real_estate"


@dataclass
class PhysicalAssetItem(FinancialItem):
    end_action: str = "drop"

    category: ClassVar[str] = "physical_asset"


@dataclass
class DebtItem(FinancialItem):
    """``principal`` falls back to ``amount`` when unset.

    A floating-rate debt pays the settings ``base_rate`` plus ``spread`` and
    ignores ``interest_rate``.
    """

    principal: float | None = None
    interest_rate: float | None = None
    repayment_type: str = "level_payment"
    grace_period_months: int = 0
    rate_type: str = "fixed"
    spread: float | None = None

    category: ClassVar[str] = "debt"

    def loan_principal(self) -> float:
        return self.principal if self.principal is not None else self.amount


AnyItem = Union[IncomeItem, ExpenseItem, SavingsItem, PensionItem, RealEstateItem, PhysicalAssetItem, DebtItem]

ITEM_CLASSES: Dict[str, type] = {
    "income": IncomeItem,
    "expense": ExpenseItem,
    "savings": SavingsItem,
    "pension": PensionItem,
    "real_estate": RealEstateItem,
    "physical_asset": PhysicalAssetItem,
    "debt": DebtItem,
}

# Accepted spellings for incoming payloads; first match wins.
_FIELD_ALIASES: Dict[str, tuple[str, ...]] = {
    "title": ("title", "name", "Title", "Name"),
    "category": ("category", "Category"),
    "type": ("type", "Type"),
    "amount": ("amount", "balance", "currentBalance", "Amount"),
    "frequency": ("frequency", "Frequency"),
    "start_year": ("start_year", "startYear"),
    "start_month": ("start_month", "startMonth"),
    "end_year": ("end_year", "endYear"),
    "end_month": ("end_month", "endMonth"),
    "owner": ("owner", "Owner"),
    "growth_rate": ("growth_rate", "growthRate"),
    "is_fixed_to_retirement": ("is_fixed_to_retirement", "isFixedToRetirement", "Fixed To Retirement"),
    "amount_base_year": ("amount_base_year", "amountBaseYear"),
    "id": ("id", "ID"),
    "monthly_contribution": ("monthly_contribution", "monthlyContribution", "Monthly Contribution"),
    "payout_years": ("payout_years", "payoutYears", "Payout Years"),
    "end_action": ("end_action", "endAction", "Action at End"),
    "principal": ("principal", "Principal"),
    "interest_rate": ("interest_rate", "interestRate"),
    "repayment_type": ("repayment_type", "repaymentType", "Repayment Type"),
    "grace_period_months": ("grace_period_months", "gracePeriodMonths", "Grace Months"),
    "rate_type": ("rate_type", "rateType", "Rate Type"),
    "spread": ("spread", "Spread"),
}


def _extract(data: dict, field_name: str, default: Any = None) -> Any:
    for key in _FIELD_ALIASES.get(field_name, (field_name,)):
        if key in data and data[key] is not None and data[key] != "":
            return data[key]
    return default


def _rate(value: Any, percent: bool) -> float | None:
    if value is None:
        return None
    rate = to_number(value, default=math.nan)
    if math.isnan(rate):
        return None
    return rate / 100.0 if percent else rate


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def _choice(value: Any, options: List[str], default: str) -> str:
    text = str(value or "").strip().lower()
    return text if text in options else default


def item_from_dict(data: dict, percent_rates: bool = False) -> AnyItem | None:
    """Build an item from a payload dict; returns None when the row is unusable.

    Rates are decimals unless ``percent_rates`` is set (editor/API convention).
    Period fields may also be given as ``start``/``end`` month strings (``YYYY-MM``).
    """
    title = str(_extract(data, "title", "") or "").strip()
    category = str(_extract(data, "category", "") or "").strip().lower()
    cls = ITEM_CLASSES.get(category)
    if not title or cls is None:
        return None

    start_year = to_optional_int(_extract(data, "start_year"))
    start_month = to_optional_int(_extract(data, "start_month"))
    end_year = to_optional_int(_extract(data, "end_year"))
    end_month = to_optional_int(_extract(data, "end_month"))
    for key, is_start in (("start", True), ("Start Month", True), ("end", False), ("End Month", False)):
        if key not in data:
            continue
        year, month = parse_year_month(data[key])
        if year is None:
            continue
        if is_start:
            start_year, start_month = year, month or 1
        else:
            end_year, end_month = year, month or 12

    kwargs: Dict[str, Any] = {
        "title": title,
        "amount": to_number(_extract(data, "amount")),
        "type": str(_extract(data, "type", "other")).strip().lower() or "other",
        "frequency": _choice(_extract(data, "frequency"), FREQUENCY_OPTIONS, "monthly"),
        "start_year": start_year,
        "start_month": start_month if start_month and 1 <= start_month <= 12 else 1,
        "end_year": end_year,
        "end_month": end_month if end_month and 1 <= end_month <= 12 else 12,
        "owner": _choice(_extract(data, "owner"), OWNER_OPTIONS, "self"),
        "growth_rate": _rate(_extract(data, "growth_rate"), percent_rates),
        "is_fixed_to_retirement": _flag(_extract(data, "is_fixed_to_retirement", False)),
        "amount_base_year": to_optional_int(_extract(data, "amount_base_year")),
        "id": str(_extract(data, "id", "") or ""),
    }
    if cls in (SavingsItem, PensionItem):
        kwargs["monthly_contribution"] = to_number(_extract(data, "monthly_contribution"))
    if cls is PensionItem:
        kwargs["payout_years"] = to_optional_int(_extract(data, "payout_years")) or 20
    if cls in (SavingsItem, RealEstateItem, PhysicalAssetItem):
        default_action = cls.__dataclass_fields__["end_action"].default
        kwargs["end_action"] = _choice(_extract(data, "end_action"), END_ACTION_OPTIONS, default_action)
    if cls is DebtItem:
        principal = _extract(data, "principal")
        kwargs["principal"] = to_number(principal) if principal is not None else None
        kwargs["interest_rate"] = _rate(_extract(data, "interest_rate"), percent_rates)
        kwargs["repayment_type"] = _choice(_extract(data, "repayment_type"), REPAYMENT_TYPES, "level_payment")
        kwargs["grace_period_months"] = max(0, to_optional_int(_extract(data, "grace_period_months")) or 0)
        kwargs["rate_type"] = _choice(_extract(data, "rate_type"), RATE_TYPES, "fixed")
        kwargs["spread"] = _rate(_extract(data, "spread"), percent_rates)
    return cls(**kwargs)


def records_to_items(rows: Iterable[dict] | None, percent_rates: bool = False) -> List[AnyItem]:
    items: List[AnyItem] = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        item = item_from_dict(row, percent_rates=percent_rates)
        if item is not None:
            items.append(item)
    return items


class ItemTableModel(TableModel):
    """Schema + defaults for the financial item editor table."""

    def __init__(self) -> None:
        columns = [
            ColumnDefinition("Title", "Title"),
            ColumnDefinition("Category", "Category", kind="select", default="expense", options=ITEM_CATEGORIES),
            ColumnDefinition("Type", "Type", default="other"),
            ColumnDefinition("Amount", "Amount", kind="number", default=0.0, min_value=0.0, step=10.0, format="%.0f",
                             help="Flow per period, or opening balance/value for assets"),
            ColumnDefinition("Frequency", "Frequency", kind="select", default="monthly", options=FREQUENCY_OPTIONS),
            ColumnDefinition("Start Month", "Start Month", kind="month", default=""),
            ColumnDefinition("End Month", "End Month (empty=open)", kind="month", default=""),
            ColumnDefinition("Owner", "Owner", kind="select", default="self", options=OWNER_OPTIONS),
            ColumnDefinition("Growth Rate (%)", "Growth Rate (%)", kind="number", default=None, step=0.1,
                             help="Empty uses the global rate for the category"),
            ColumnDefinition("Fixed To Retirement", "Ends At Retirement", kind="bool", default=False),
            ColumnDefinition("Interest Rate (%)", "Interest Rate (%)", kind="number", default=None, step=0.1),
            ColumnDefinition("Repayment Type", "Repayment Type", kind="select", default="level_payment",
                             options=REPAYMENT_TYPES),
            ColumnDefinition("Grace Months", "Grace Months", kind="number", default=0, min_value=0.0, step=1.0,
                             help="Interest-only months before a grace loan amortizes"),
            ColumnDefinition("Rate Type", "Rate Type", kind="select", default="fixed", options=RATE_TYPES),
            ColumnDefinition("Spread (%)", "Spread (%)", kind="number", default=None, step=0.1,
                             help="Added to the base rate for floating-rate debts"),
            ColumnDefinition("Monthly Contribution", "Monthly Contribution", kind="number", default=0.0, min_value=0.0),
            ColumnDefinition("Payout Years", "Payout Years", kind="number", default=20, min_value=1.0, step=1.0),
            ColumnDefinition("Action at End", "Action at End", kind="select", default="", options=END_ACTION_OPTIONS),
        ]
        super().__init__("items", columns, default_item_rows())


_PERCENT_COLUMNS = {
    "Growth Rate (%)": "growth_rate",
    "Interest Rate (%)": "interest_rate",
    "Spread (%)": "spread",
}


def dataframe_to_items(df: pd.DataFrame) -> List[AnyItem]:
    """Convert an editor DataFrame (percent rate columns) into items."""
    rows = []
    for row in df.to_dict("records"):
        clean = {key: value for key, value in row.items() if not (isinstance(value, float) and math.isnan(value))}
        for column, field_name in _PERCENT_COLUMNS.items():
            if column in clean:
                clean[field_name] = clean.pop(column)
        rows.append(clean)
    return records_to_items(rows, percent_rates=True)
