from __future__ import annotations

from typing import Dict, List

ITEM_CATEGORIES = ["income", "expense", "savings", "debt", "pension", "real_estate", "physical_asset"]
FREQUENCY_OPTIONS = ["monthly", "yearly", "once"]
OWNER_OPTIONS = ["self", "spouse", "joint", "common"]
REPAYMENT_TYPES = ["bullet", "level_payment", "equal_principal", "grace"]
RATE_TYPES = ["fixed", "floating"]
END_ACTION_OPTIONS = ["keep", "liquidate_to_cash", "drop"]

INCOME_TYPES = ["labor", "business", "bonus", "rental", "dividend", "interest", "other"]
EXPENSE_TYPES = ["living", "housing", "education", "medical", "insurance", "other"]
SAVINGS_TYPES = ["checking", "deposit", "savings", "investment", "stock", "fund", "etf", "isa"]
PENSION_TYPES = ["national", "retirement", "personal"]

# Savings types that compound at the investment return instead of the deposit rate.
INVESTMENT_SAVINGS_TYPES = {"investment", "stock", "fund", "etf", "isa"}
# Income types that follow wage growth; everything else follows inflation.
WAGE_INCOME_TYPES = {"labor", "business", "bonus"}

DEFAULT_PAYOUT_YEARS = 20
OPEN_END_YEAR = 9999

# Education stages keyed by starting age, amounts per year (or lump sum when
# one_time) in 10k KRW, today's money.
EDUCATION_EXPENSE_BY_AGE: Dict[int, dict] = {
    0: {"label": "infant care", "end_age": 2, "normal": 360, "premium": 600},
    3: {"label": "toddler care", "end_age": 3, "normal": 480, "premium": 720},
    4: {"label": "preschool", "end_age": 6, "normal": 600, "premium": 2400},
    7: {"label": "elementary school", "end_age": 12, "normal": 480, "premium": 1200},
    13: {"label": "middle school", "end_age": 15, "normal": 720, "premium": 1440},
    16: {"label": "high school", "end_age": 18, "normal": 1200, "premium": 2400},
    19: {"label": "university", "end_age": 22, "normal": 2400, "premium": 6000},
    30: {"label": "wedding support", "one_time": True, "normal": 15000, "premium": 25000},
}

# Out-of-pocket medical cost per year by starting age, 10k KRW, today's money.
MEDICAL_EXPENSE_BY_AGE: Dict[int, int] = {
    20: 60,
    30: 120,
    40: 180,
    50: 300,
    60: 420,
    65: 540,
    70: 720,
    75: 1020,
    80: 1560,
    85: 2160,
    90: 2760,
    95: 3360,
    100: 3600,
}

EDUCATION_TIERS: List[str] = ["normal", "premium"]
