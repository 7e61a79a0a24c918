"""Retirement readiness scores.

Each sub-score is a piecewise-linear map of one ratio onto [0, 100]:

* income: savings rate ``(income - expense) / income``
* expense: expense-to-income ratio
* asset: net worth progress toward the target, relative to the progress
  expected at the current age for someone who started saving at 25
* debt: debt-to-asset ratio
* pension: monthly pension income over monthly expense

The overall score weights them 35/20/15/15/15 (asset, income, expense, debt,
pension).
"""
from __future__ import annotations

from typing import List, Tuple

from ..data_model import Scores, ScoringInputs, SimulationProfile, SimulationResult
from ..data_model.base import to_number

SCORE_WEIGHTS = {"asset": 0.35, "income": 0.20, "expense": 0.15, "debt": 0.15, "pension": 0.15}
BASELINE_START_AGE = 25

GRADE_BANDS: List[Tuple[float, str]] = [
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
    (30, "D"),
]


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def income_score(monthly_income: float, monthly_expense: float) -> float:
    rate = (monthly_income - monthly_expense) / monthly_income if monthly_income > 0 else 0.0
    if rate >= 0.3:
        return 100.0
    if rate >= 0.2:
        return 80 + (rate - 0.2) * 200
    if rate >= 0.1:
        return 60 + (rate - 0.1) * 200
    if rate >= 0:
        return rate * 600
    return 0.0


def expense_score(monthly_income: float, monthly_expense: float) -> float:
    # no income reads as spending all of it
    ratio = monthly_expense / monthly_income if monthly_income > 0 else 1.0
    if ratio <= 0.7:
        return 100.0
    if ratio <= 0.8:
        return 80 + (0.8 - ratio) * 200
    if ratio <= 0.9:
        return 60 + (0.9 - ratio) * 200
    if ratio <= 1.0:
        return 40 + (1.0 - ratio) * 200
    return max(0.0, 40 - (ratio - 1.0) * 100)


def asset_score(net_worth: float, target: float, current_age: int, retirement_age: int) -> float:
    progress = net_worth / target if target > 0 else 0.0
    years_left = retirement_age - current_age
    working_span = retirement_age - BASELINE_START_AGE
    if years_left <= 0:
        expected = 1.0
    elif working_span == 0:
        expected = 0.0
    else:
        expected = 1.0 - years_left / working_span
    relative = progress / expected if expected > 0 else progress
    if relative >= 1.0:
        return 100.0
    if relative >= 0.8:
        return 80 + (relative - 0.8) * 100
    if relative >= 0.5:
        return 50 + (relative - 0.5) * 100
    return relative * 100


def debt_score(total_debts: float, total_assets: float) -> float:
    if total_assets > 0:
        ratio = total_debts / total_assets
    else:
        ratio = 1.0 if total_debts > 0 else 0.0
    if ratio <= 0.2:
        return 100.0
    if ratio <= 0.4:
        return 80 + (0.4 - ratio) * 100
    if ratio <= 0.6:
        return 60 + (0.6 - ratio) * 100
    if ratio <= 0.8:
        return 40 + (0.8 - ratio) * 100
    if ratio <= 1.0:
        return 20 + (1.0 - ratio) * 100
    return max(0.0, 20 - (ratio - 1.0) * 50)


def pension_score(monthly_pension: float, monthly_expense: float) -> float:
    coverage = monthly_pension / monthly_expense if monthly_expense > 0 else 0.0
    if coverage >= 0.5:
        return 100.0
    if coverage >= 0.4:
        return 80 + (coverage - 0.4) * 200
    if coverage >= 0.3:
        return 60 + (coverage - 0.3) * 200
    if coverage >= 0.2:
        return 40 + (coverage - 0.2) * 200
    return coverage * 200


def calculate_scores(inputs: ScoringInputs) -> Scores:
    income = to_number(inputs.monthly_income)
    expense = to_number(inputs.monthly_expense)
    parts = {
        "income": _clamp(income_score(income, expense)),
        "expense": _clamp(expense_score(income, expense)),
        "asset": _clamp(
            asset_score(
                to_number(inputs.net_worth),
                to_number(inputs.target_retirement_fund),
                int(to_number(inputs.current_age)),
                int(to_number(inputs.retirement_age)),
            )
        ),
        "debt": _clamp(debt_score(to_number(inputs.total_debts), to_number(inputs.total_assets))),
        "pension": _clamp(pension_score(to_number(inputs.monthly_pension), expense)),
    }
    overall = _clamp(round(sum(parts[name] * weight for name, weight in SCORE_WEIGHTS.items())))
    return Scores(overall=overall, **parts)


def score_grade(score: float) -> str:
    for threshold, grade in GRADE_BANDS:
        if score >= threshold:
            return grade
    return "F"


def scoring_inputs_from_result(
    result: SimulationResult,
    profile: SimulationProfile,
    monthly_pension: float | None = None,
) -> ScoringInputs:
    """Current-year flows and balances, plus the pension income of the retirement year."""
    first = result.snapshots[0]
    if monthly_pension is None:
        retirement = result.snapshot_for(result.retirement_year) or result.snapshots[-1]
        pension_income = sum(entry.amount for entry in retirement.income_breakdown if entry.type == "pension")
        monthly_pension = pension_income / 12.0
    return ScoringInputs(
        monthly_income=first.total_income / 12.0,
        monthly_expense=first.total_expense / 12.0,
        total_assets=first.total_assets,
        total_debts=first.total_debts,
        net_worth=first.net_worth,
        target_retirement_fund=result.summary.fi_target,
        current_age=result.start_year - profile.birth_year,
        retirement_age=profile.retirement_age,
        monthly_pension=monthly_pension,
    )


def score_simulation(
    result: SimulationResult,
    profile: SimulationProfile,
    monthly_pension: float | None = None,
) -> Scores:
    return calculate_scores(scoring_inputs_from_result(result, profile, monthly_pension))
