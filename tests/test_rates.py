import pytest

from retireplan.engine.rates import active_months, monthly_rate, yearly_amount


@pytest.mark.parametrize("annual", [0.0, 0.01, 0.025, 0.05, 0.12, -0.03])
def test_monthly_rate_compounds_back_to_annual(annual):
    assert (1 + monthly_rate(annual)) ** 12 == pytest.approx(1 + annual, rel=1e-9)


def test_monthly_rate_total_loss_does_not_go_complex():
    assert monthly_rate(-1.5) == -1.0


def test_active_months_counts_partial_years():
    assert active_months(2025, 6, 2030, 12, 2025) == 7
    assert active_months(2025, 6, 2030, 6, 2030) == 6
    assert active_months(2025, 6, 2030, 6, 2027) == 12
    assert active_months(2025, 6, 2030, 6, 2024) == 0
    assert active_months(2025, 6, 2030, 6, 2031) == 0


def test_active_months_open_end_runs_forever():
    assert active_months(2025, 3, None, None, 2100) == 12


def test_inverted_window_yields_zero():
    assert active_months(2025, 5, 2025, 3, 2025) == 0
    assert yearly_amount(100.0, 0.05, 2025, 5, 2025, 3, 2025) == 0.0


def test_prorating_sums_to_undiscounted_total_without_growth():
    total = sum(yearly_amount(100.0, 0.0, 2025, 3, 2027, 10, year) for year in range(2024, 2029))

    assert total == pytest.approx(100.0 * (10 + 12 + 10))


def test_growth_counts_from_item_start_not_projection_start():
    assert yearly_amount(100.0, 0.12, 2030, 12, 2030, 12, 2030) == pytest.approx(100.0)

    second_year = yearly_amount(100.0, 0.12, 2030, 1, None, None, 2031)

    assert second_year == pytest.approx(sum(100.0 * 1.12 ** ((12 + k) / 12) for k in range(12)))


def test_growth_origin_moves_compounding_base():
    amount = yearly_amount(100.0, 0.1, 2025, 1, None, None, 2025, growth_origin=(2024, 1))

    assert amount == pytest.approx(sum(100.0 * 1.1 ** ((12 + k) / 12) for k in range(12)))
