import itertools

import pytest

from retireplan.data_model import GlobalSettings, IncomeItem, ExpenseItem, ScoringInputs, SimulationProfile
from retireplan.engine.scoring import (
    asset_score,
    calculate_scores,
    debt_score,
    expense_score,
    income_score,
    pension_score,
    score_grade,
    score_simulation,
)
from retireplan.engine.simulator import run_simulation


def test_piecewise_breakpoints():
    assert income_score(1000, 700) == 100
    assert income_score(1000, 850) == pytest.approx(70)
    assert income_score(1000, 1200) == 0
    assert expense_score(1000, 850) == pytest.approx(70)
    assert expense_score(1000, 1000) == pytest.approx(40)
    assert debt_score(50, 100) == pytest.approx(70)
    assert debt_score(100, 100) == pytest.approx(20)
    assert pension_score(30, 100) == pytest.approx(60)
    assert pension_score(60, 100) == 100


def test_asset_score_compares_against_expected_progress():
    assert asset_score(50, 100, current_age=45, retirement_age=65) == 100
    assert asset_score(20, 100, current_age=45, retirement_age=65) == pytest.approx(40)
    assert asset_score(10, 100, current_age=20, retirement_age=65) == pytest.approx(10)
    assert asset_score(10, 100, current_age=30, retirement_age=20) == pytest.approx(10)


def test_zero_denominators_use_fixed_ratios():
    assert income_score(0, 100) == 0
    assert expense_score(0, 100) == pytest.approx(40)
    assert expense_score(0, 0) == pytest.approx(40)
    assert debt_score(500, 0) == pytest.approx(20)
    assert debt_score(0, 0) == 100
    assert pension_score(100, 0) == 0
    assert asset_score(1_000, 0, current_age=45, retirement_age=65) == 0


def test_no_expenses_and_no_target_scores_half():
    scores = calculate_scores(
        ScoringInputs(
            monthly_income=100,
            monthly_expense=0,
            total_assets=0,
            total_debts=0,
            net_worth=0,
            target_retirement_fund=0,
            current_age=45,
            retirement_age=65,
            monthly_pension=0,
        )
    )

    assert scores.income == 100
    assert scores.expense == 100
    assert scores.asset == 0
    assert scores.pension == 0
    assert scores.overall == 50


def test_no_income_with_unbacked_debt():
    scores = calculate_scores(
        ScoringInputs(
            monthly_income=0,
            monthly_expense=100,
            total_assets=0,
            total_debts=500,
            net_worth=-500,
            target_retirement_fund=1_000,
            current_age=45,
            retirement_age=65,
            monthly_pension=0,
        )
    )

    assert scores.expense == pytest.approx(40)
    assert scores.debt == pytest.approx(20)
    assert scores.overall == 9


def test_overall_uses_fixed_weights():
    scores = calculate_scores(
        ScoringInputs(
            monthly_income=1000,
            monthly_expense=850,
            total_assets=100,
            total_debts=50,
            net_worth=50,
            target_retirement_fund=100,
            current_age=45,
            retirement_age=65,
            monthly_pension=255,
        )
    )

    assert scores.asset == 100
    assert scores.income == pytest.approx(70)
    assert scores.pension == pytest.approx(60)
    assert scores.overall == 79


def test_scores_stay_within_bounds():
    values = [-1_000.0, 0.0, 1.0, 500.0, 10_000.0, float("nan")]
    ages = [(20, 60), (45, 65), (70, 60), (30, 25)]
    for income, expense, assets, debts, pension in itertools.product(values, repeat=5):
        for current_age, retirement_age in ages:
            scores = calculate_scores(
                ScoringInputs(
                    monthly_income=income,
                    monthly_expense=expense,
                    total_assets=assets,
                    total_debts=debts,
                    net_worth=assets - debts if assets == assets and debts == debts else 0.0,
                    target_retirement_fund=assets,
                    current_age=current_age,
                    retirement_age=retirement_age,
                    monthly_pension=pension,
                )
            )
            for value in scores.to_dict().values():
                assert 0 <= value <= 100


@pytest.mark.parametrize(
    "score, grade",
    [(95, "A+"), (90, "A+"), (85, "A"), (72, "B+"), (61, "B"), (55, "C+"), (45, "C"), (35, "D"), (10, "F")],
)
def test_score_grade(score, grade):
    assert score_grade(score) == grade


def test_score_simulation_reads_first_year():
    profile = SimulationProfile(birth_year=1985, retirement_age=60)
    items = [
        IncomeItem(title="Salary", amount=500, growth_rate=0.0),
        ExpenseItem(title="Living", amount=300, growth_rate=0.0),
    ]
    result = run_simulation(items, profile, GlobalSettings(), 2025, horizon_years=5)

    scores = score_simulation(result, profile)

    assert scores.income == pytest.approx(100)
    assert scores.expense == pytest.approx(100)
    assert scores.pension == 0
    assert 0 <= scores.overall <= 100
