import pytest

from retireplan.engine.loans import (
    DebtService,
    LoanSchedule,
    annual_pension_withdrawal,
    monthly_payment,
    remaining_balance_at_year_end,
    yearly_interest_and_principal,
)

MORTGAGE = dict(principal=12_000_000, annual_rate=0.06, start_year=2025, start_month=1, end_year=2055, end_month=1)


def test_level_payment_matches_annuity_formula():
    payment = monthly_payment(12_000_000, 0.06, 360, "level_payment")

    assert abs(payment - 71_946) <= 1


def test_level_payment_balance_reaches_zero_at_maturity():
    assert remaining_balance_at_year_end(**MORTGAGE, target_year=2054) > 0
    assert remaining_balance_at_year_end(**MORTGAGE, target_year=2055) == pytest.approx(0.0, abs=1e-6)
    assert remaining_balance_at_year_end(**MORTGAGE, target_year=2060) == 0.0


def test_level_payment_principal_sums_to_loan():
    schedule = LoanSchedule(12_000_000, 0.06, 2025, 1, 2055, 1, "level_payment")

    paid = sum(schedule.yearly_interest_and_principal(year).principal_payment for year in range(2025, 2056))

    assert paid == pytest.approx(12_000_000, abs=31)


def test_balance_before_start_is_full_principal():
    assert remaining_balance_at_year_end(**MORTGAGE, target_year=2020) == 12_000_000
    service = yearly_interest_and_principal(**MORTGAGE, target_year=2020)
    assert service.interest == 0
    assert service.principal_payment == 0


def test_equal_principal_interest_declines():
    schedule = LoanSchedule(1_200_000, 0.06, 2025, 1, 2035, 1, "equal_principal")

    first = schedule.yearly_interest_and_principal(2026)
    second = schedule.yearly_interest_and_principal(2027)

    assert first.principal_payment == 120_000
    assert second.principal_payment == 120_000
    assert first.interest > second.interest
    assert schedule.balance_at_year_end(2035) == pytest.approx(0.0, abs=1e-6)


def test_bullet_loan_pays_interest_then_principal_at_maturity():
    schedule = LoanSchedule(1_000_000, 0.06, 2025, 1, 2035, 1, "bullet")

    assert schedule.yearly_interest_and_principal(2025).interest == 55_000
    assert schedule.yearly_interest_and_principal(2026).interest == 60_000
    assert schedule.yearly_interest_and_principal(2026).principal_payment == 0
    assert schedule.balance_at_year_end(2030) == 1_000_000

    final = schedule.yearly_interest_and_principal(2035)
    assert final.interest == 5_000
    assert final.principal_payment == 1_000_000
    assert schedule.balance_at_year_end(2035) == 0.0


def test_zero_rate_amortizes_linearly():
    assert monthly_payment(1200, 0.0, 12) == pytest.approx(100.0)

    schedule = LoanSchedule(1200, 0.0, 2025, 1, 2026, 1, "level_payment")

    assert schedule.yearly_interest_and_principal(2025).principal_payment == 1100
    assert schedule.yearly_interest_and_principal(2026).principal_payment == 100
    assert schedule.yearly_interest_and_principal(2026).interest == 0


def test_zero_month_term_produces_no_payments():
    schedule = LoanSchedule(50_000, 0.05, 2025, 6, 2025, 6, "level_payment")

    service = schedule.yearly_interest_and_principal(2025)

    assert service.interest == 0
    assert service.principal_payment == 0
    assert schedule.balance_at_year_end(2024) == 50_000


def test_open_ended_loan_is_interest_only():
    schedule = LoanSchedule(100_000, 0.12, 2025, 1, None, None, "level_payment")

    assert schedule.yearly_interest_and_principal(2030).interest == 12_000
    assert schedule.yearly_interest_and_principal(2030).principal_payment == 0
    assert schedule.balance_at_year_end(2030) == 100_000


def test_unknown_repayment_type_falls_back_to_level_payment():
    assert monthly_payment(12_000_000, 0.06, 360, "mystery") == pytest.approx(
        monthly_payment(12_000_000, 0.06, 360, "level_payment")
    )


def test_pension_withdrawal_drains_balance():
    assert annual_pension_withdrawal(1000, 10, 0.0) == pytest.approx(100.0)

    balance = 100_000.0
    payout = annual_pension_withdrawal(balance, 20, 0.04)
    for _ in range(20):
        balance = balance * 1.04 - payout

    assert balance == pytest.approx(0.0, abs=1e-6)
    assert annual_pension_withdrawal(0, 20, 0.04) == 0.0


def test_grace_loan_pays_interest_only_then_amortizes():
    schedule = LoanSchedule(1_200_000, 0.06, 2025, 1, 2035, 1, "grace", grace_period_months=24)

    assert schedule.yearly_interest_and_principal(2025) == DebtService(66_000, 0)
    assert schedule.yearly_interest_and_principal(2026) == DebtService(72_000, 0)
    assert schedule.balance_at_year_end(2026) == 1_200_000
    assert schedule.yearly_interest_and_principal(2027).principal_payment > 0
    assert schedule.balance_at_year_end(2035) == pytest.approx(0.0, abs=1e-6)

    paid = sum(schedule.yearly_interest_and_principal(year).principal_payment for year in range(2025, 2036))
    assert paid == pytest.approx(1_200_000, abs=11)


def test_grace_payment_amortizes_over_remaining_months():
    assert monthly_payment(1_200_000, 0.06, 120, "grace", grace_period_months=24) == pytest.approx(
        monthly_payment(1_200_000, 0.06, 96, "level_payment")
    )


def test_grace_period_leaves_one_amortizing_payment():
    schedule = LoanSchedule(120_000, 0.0, 2025, 1, 2026, 1, "grace", grace_period_months=500)

    assert schedule.grace_months == 11
    assert schedule.yearly_interest_and_principal(2025).principal_payment == 0
    assert schedule.yearly_interest_and_principal(2026).principal_payment == 120_000


def test_grace_months_ignored_for_other_policies():
    plain = LoanSchedule(1_200_000, 0.06, 2025, 1, 2035, 1, "level_payment")
    with_grace = LoanSchedule(1_200_000, 0.06, 2025, 1, 2035, 1, "level_payment", grace_period_months=24)

    assert with_grace.grace_months == 0
    assert with_grace.yearly_interest_and_principal(2026) == plain.yearly_interest_and_principal(2026)
