"""Monthly proration of annually quoted rates.

Projections are reported per year but computed per month: an item's activity
window is counted to the month, and growth compounds monthly from the item's
own start so items that begin mid-horizon carry no retroactive growth.
"""
from __future__ import annotations

from ..data_model.constants import OPEN_END_YEAR


def monthly_rate(annual_rate: float) -> float:
    """Exact monthly compounding rate: ``(1 + annual) ** (1/12) - 1``."""
    if annual_rate <= -1.0:
        return -1.0
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def months_elapsed(start_year: int, start_month: int, year: int, month: int) -> int:
    return (year - start_year) * 12 + (month - start_month)


def active_months(
    start_year: int,
    start_month: int,
    end_year: int | None,
    end_month: int | None,
    target_year: int,
) -> int:
    """Number of months of ``target_year`` inside the window; open ends run forever.

    >>> active_months(2025, 6, 2030, 12, 2025)
    7
    >>> active_months(2025, 6, 2030, 6, 2030)
    6
    """
    effective_end_year = OPEN_END_YEAR if end_year is None else end_year
    effective_end_month = 12 if end_month is None else end_month
    if target_year < start_year or target_year > effective_end_year:
        return 0
    first = start_month if target_year == start_year else 1
    last = effective_end_month if target_year == effective_end_year else 12
    return max(0, last - first + 1)


def first_active_month(start_year: int, start_month: int, target_year: int) -> int:
    return start_month if target_year == start_year else 1


def yearly_amount(
    monthly_base: float,
    annual_growth: float,
    start_year: int,
    start_month: int,
    end_year: int | None,
    end_month: int | None,
    target_year: int,
    growth_origin: tuple[int, int] | None = None,
) -> float:
    """Sum of the active months of ``target_year``, each grown since the item start.

    ``growth_origin`` moves the compounding origin (e.g. the year an amount is
    quoted in); it never changes which months are active.
    """
    months = active_months(start_year, start_month, end_year, end_month, target_year)
    if months <= 0:
        return 0.0
    rate = monthly_rate(annual_growth)
    origin_year, origin_month = growth_origin or (start_year, start_month)
    first = first_active_month(start_year, start_month, target_year)
    total = 0.0
    for offset in range(months):
        elapsed = months_elapsed(origin_year, origin_month, target_year, first + offset)
        total += monthly_base * (1.0 + rate) ** elapsed
    return total
