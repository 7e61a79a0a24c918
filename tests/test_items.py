import math

import pytest

from retireplan.data_model import (
    DebtItem,
    GlobalSettings,
    IncomeItem,
    ItemTableModel,
    PensionItem,
    SavingsItem,
    SimulationProfile,
    dataframe_to_items,
    item_from_dict,
    records_to_items,
)
from retireplan.data_model.base import parse_year_month, to_number


def test_default_table_parses_into_items():
    df = ItemTableModel().create_default_df()

    items = dataframe_to_items(df)

    assert [item.category for item in items] == [
        "income", "expense", "savings", "savings", "pension", "real_estate", "debt",
    ]
    salary = items[0]
    assert isinstance(salary, IncomeItem)
    assert salary.is_fixed_to_retirement is True
    fund = items[3]
    assert isinstance(fund, SavingsItem)
    assert fund.monthly_contribution == 50
    pension = items[4]
    assert isinstance(pension, PensionItem)
    assert pension.payout_years == 20
    mortgage = items[-1]
    assert isinstance(mortgage, DebtItem)
    assert mortgage.interest_rate == pytest.approx(0.04)
    assert (mortgage.end_year, mortgage.end_month) == (2050, 12)
    assert mortgage.loan_principal() == 30_000


def test_rows_without_title_or_category_are_skipped():
    rows = [
        {"title": "", "category": "income", "amount": 10},
        {"title": "Mystery", "category": "crypto", "amount": 10},
        "not a row",
        {"title": "Rent", "category": "expense", "amount": "1,200"},
    ]

    items = records_to_items(rows)

    assert len(items) == 1
    assert items[0].amount == 1200


def test_item_from_dict_accepts_camel_case_and_percents():
    item = item_from_dict(
        {
            "name": "Brokerage",
            "category": "savings",
            "type": "ETF",
            "currentBalance": 5000,
            "growthRate": "7",
            "start": "2030-05",
            "endAction": "drop",
        },
        percent_rates=True,
    )

    assert isinstance(item, SavingsItem)
    assert item.type == "etf"
    assert item.growth_rate == pytest.approx(0.07)
    assert (item.start_year, item.start_month) == (2030, 5)
    assert item.end_action == "drop"


def test_invalid_choices_fall_back_to_defaults():
    item = item_from_dict({"title": "Loan", "category": "debt", "repaymentType": "weird", "frequency": "daily"})

    assert item.repayment_type == "level_payment"
    assert item.frequency == "monthly"
    assert item.interest_rate is None


def test_yearly_frequency_spreads_over_months():
    item = IncomeItem(title="Bonus", amount=1200, frequency="yearly")

    assert item.monthly_base() == 100


def test_to_number_is_tolerant():
    assert to_number("1,234.5") == 1234.5
    assert to_number(None) == 0.0
    assert to_number(math.nan) == 0.0
    assert to_number(float("inf"), default=-1) == -1
    assert to_number("abc") == 0.0


def test_parse_year_month():
    assert parse_year_month("2031-07") == (2031, 7)
    assert parse_year_month("2031") == (2031, None)
    assert parse_year_month("2031-13") == (2031, None)
    assert parse_year_month("") == (None, None)
    assert parse_year_month("soon") == (None, None)


def test_settings_from_dict_reads_percent_keys():
    settings = GlobalSettings.from_dict({"inflationRate": 3, "investmentReturnRate": "6.5", "fiMultiple": 30})

    assert settings.inflation == pytest.approx(0.03)
    assert settings.investment_return == pytest.approx(0.065)
    assert settings.fi_multiple == 30
    assert settings.savings_interest == GlobalSettings().savings_interest


def test_settings_presets():
    pessimistic = GlobalSettings.from_dict({"scenario": "pessimistic", "inflationRate": 5})

    assert pessimistic.inflation == pytest.approx(0.05)
    assert pessimistic.investment_return == pytest.approx(0.02)
    assert pessimistic.pension_return == pytest.approx(0.02)
    with pytest.raises(ValueError):
        GlobalSettings.from_preset("bogus")


def test_profile_derived_years():
    profile = SimulationProfile(birth_year=1990, retirement_age=60, life_expectancy=90,
                                spouse_birth_year=1993, spouse_retirement_age=58, spouse_life_expectancy=95,
                                spouse_birth_month=4)

    assert profile.retirement_year == 2050
    assert profile.spouse_retirement_year == 2051
    assert profile.end_year == 1993 + 95
    assert profile.last_working_month("self") == (2049, 12)
    assert profile.last_working_month("spouse") == (2051, 3)
    assert profile.last_working_month("joint") == (2049, 12)


def test_debt_reads_grace_and_floating_rate_fields():
    item = item_from_dict(
        {
            "title": "Jeonse Loan",
            "category": "debt",
            "amount": 20_000,
            "repaymentType": "grace",
            "gracePeriodMonths": "12",
            "rateType": "floating",
            "spread": "1.5",
        },
        percent_rates=True,
    )

    assert isinstance(item, DebtItem)
    assert item.repayment_type == "grace"
    assert item.grace_period_months == 12
    assert item.rate_type == "floating"
    assert item.spread == pytest.approx(0.015)


def test_unknown_rate_type_is_fixed():
    item = item_from_dict({"title": "Loan", "category": "debt", "rateType": "teaser"})

    assert item.rate_type == "fixed"
    assert item.grace_period_months == 0
    assert item.spread is None


def test_base_rate_follows_preset_and_overrides():
    assert GlobalSettings.from_dict({"scenario": "optimistic"}).base_rate == pytest.approx(0.025)
    assert GlobalSettings.from_dict({"scenario": "pessimistic"}).base_rate == pytest.approx(0.05)
    assert GlobalSettings.from_dict({"baseRate": 4}).base_rate == pytest.approx(0.04)
    assert GlobalSettings().base_rate == pytest.approx(0.035)
