from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from ..data_model import (
    AnyItem,
    BreakdownEntry,
    DebtItem,
    ExpenseItem,
    FinancialItem,
    GlobalSettings,
    IncomeItem,
    PensionItem,
    PhysicalAssetItem,
    PlanConfig,
    RealEstateItem,
    SavingsItem,
    SimulationProfile,
    SimulationResult,
    SimulationSummary,
    YearlySnapshot,
)
from ..data_model.base import to_number
from ..data_model.constants import INVESTMENT_SAVINGS_TYPES, WAGE_INCOME_TYPES
from .loans import LoanSchedule, annual_pension_withdrawal
from .rates import active_months, monthly_rate, yearly_amount

logger = logging.getLogger(__name__)

CASH_RESERVE_TITLE = "Cash Reserve"


def default_growth_rate(item: AnyItem, settings: GlobalSettings) -> float:
    """The item's own rate, or the global rate for its category and type."""
    if item.growth_rate is not None:
        return item.growth_rate
    if isinstance(item, IncomeItem):
        return settings.income_growth if item.type in WAGE_INCOME_TYPES else settings.inflation
    if isinstance(item, ExpenseItem):
        return settings.inflation
    if isinstance(item, SavingsItem):
        return settings.investment_return if item.type in INVESTMENT_SAVINGS_TYPES else settings.savings_interest
    if isinstance(item, PensionItem):
        return settings.inflation if item.is_benefit_stream else settings.pension_return
    if isinstance(item, RealEstateItem):
        return settings.real_estate_appreciation
    if isinstance(item, DebtItem):
        return settings.debt_interest
    if isinstance(item, PhysicalAssetItem):
        return 0.0
    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def effective_debt_rate(item: DebtItem, settings: GlobalSettings) -> float:
    """Floating debts pay ``base_rate + spread``; fixed debts their own rate or the global debt rate."""
    if item.rate_type == "floating":
        return settings.base_rate + to_number(item.spread)
    return item.interest_rate if item.interest_rate is not None else settings.debt_interest


def _next_month(year: int, month: int) -> tuple:
    return (year + 1, 1) if month >= 12 else (year, month + 1)


def _resolve_window(item: AnyItem, profile: SimulationProfile, start_year: int) -> tuple | None:
    """(start_year, start_month, end_year, end_month) or None when the window is inverted."""
    if item.start_year is not None:
        sy, sm = item.start_year, item.start_month or 1
    elif isinstance(item, PensionItem) and item.is_benefit_stream:
        sy, sm = _next_month(*profile.last_working_month(item.owner))
    else:
        sy, sm = start_year, 1
    ey, em = item.end_year, item.end_month or 12
    if item.is_fixed_to_retirement:
        ey, em = profile.last_working_month(item.owner)
    if ey is not None and (ey, em) < (sy, sm):
        return None
    return sy, sm, ey, em


def _build_flow_state(item: AnyItem, window: tuple, settings: GlobalSettings) -> dict:
    origin = (item.amount_base_year, 1) if item.amount_base_year else None
    return {
        "item": item,
        "window": window,
        "amount": to_number(item.amount),
        "monthly": to_number(item.monthly_base()),
        "growth": default_growth_rate(item, settings),
        "origin": origin,
        "once": item.frequency == "once",
    }


def _flow_for_year(state: dict, year: int) -> float:
    sy, sm, ey, em = state["window"]
    if state["once"]:
        return state["amount"] if year == sy else 0.0
    return yearly_amount(state["monthly"], state["growth"], sy, sm, ey, em, year, state["origin"])


def _build_account_state(item: AnyItem, window: tuple, settings: GlobalSettings, profile: SimulationProfile) -> dict:
    sy, sm, ey, em = window
    annual_rate = default_growth_rate(item, settings)
    is_pension = isinstance(item, PensionItem)
    contribution = to_number(getattr(item, "monthly_contribution", 0.0))
    last_working = profile.last_working_month(item.owner)
    contribution_end = last_working if ey is None else min((ey, em), last_working)
    return {
        "item": item,
        "kind": item.category,
        "value": 0.0,
        "initial_value": max(0.0, to_number(item.amount)),
        "annual_rate": annual_rate,
        "rate_m": monthly_rate(annual_rate),
        "start": (sy, sm),
        # pension accounts are drained by their payout, not by an end date
        "end": None if is_pension or ey is None else (ey, em),
        "active": False,
        "completed": False,
        "liquid": isinstance(item, SavingsItem),
        "contribution": max(0.0, contribution),
        "contribution_end": contribution_end,
        "payout_year": profile.owner_retirement_year(item.owner) if is_pension else None,
        "payout": None,
    }


def _ensure_cash_reserve(settings: GlobalSettings) -> dict:
    reserve = SavingsItem(title=CASH_RESERVE_TITLE, type="checking", amount=0.0, end_action="keep")
    rate = settings.savings_interest
    return {
        "item": reserve,
        "kind": "cash",
        "value": 0.0,
        "initial_value": 0.0,
        "annual_rate": rate,
        "rate_m": monthly_rate(rate),
        "start": (0, 1),
        "end": None,
        "active": True,
        "completed": False,
        "liquid": True,
        "contribution": 0.0,
        "contribution_end": None,
        "payout_year": None,
        "payout": None,
    }


def _apply_end_action(state: dict, cash_state: dict, events: List[str]) -> None:
    action = getattr(state["item"], "end_action", "keep")
    if action == "liquidate_to_cash":
        cash_state["value"] += state["value"]
        if state["kind"] == "real_estate":
            events.append(f"real_estate_sale:{state['item'].title}")
        state["value"] = 0.0
        state["active"] = False
        state["completed"] = True
    elif action == "drop":
        state["value"] = 0.0
        state["active"] = False
        state["completed"] = True
    else:
        state["rate_m"] = 0.0


def _advance_months(account_states: List[dict], cash_state: dict, year: int, events: List[str]) -> None:
    for month in range(1, 13):
        current = (year, month)
        cash_state["value"] *= 1 + cash_state["rate_m"]
        for state in account_states:
            if state["completed"]:
                continue
            if not state["active"]:
                if current < state["start"]:
                    continue
                if state["end"] is not None and current > state["end"]:
                    # window closed before the projection began
                    state["completed"] = True
                    continue
                state["value"] = state["initial_value"]
                state["active"] = True
            state["value"] *= 1 + state["rate_m"]
            if state["end"] is not None and current == state["end"]:
                _apply_end_action(state, cash_state, events)


def _planned_contribution(state: dict, year: int) -> float:
    if state["contribution"] <= 0 or not state["active"] or state["completed"]:
        return 0.0
    sy, sm = state["start"]
    ey, em = state["contribution_end"]
    return state["contribution"] * active_months(sy, sm, ey, em, year)


def _cover_deficit(amount: float, liquid_states: Sequence[dict]) -> float:
    """Withdraw ``amount`` from liquid balances in order; returns what stayed uncovered."""
    remaining = amount
    for state in liquid_states:
        if remaining <= 0:
            break
        available = max(0.0, state["value"])
        drawn = min(available, remaining)
        state["value"] -= drawn
        remaining -= drawn
    return max(0.0, remaining)


def _entries(states: Iterable[dict]) -> tuple:
    return tuple(
        BreakdownEntry(state["item"].title, state["value"], state["item"].type)
        for state in states
        if state["value"]
    )


def _life_events(year: int, profile: SimulationProfile) -> List[str]:
    events = []
    if year == profile.retirement_year:
        events.append("retirement")
    if profile.spouse_retirement_year is not None and year == profile.spouse_retirement_year:
        events.append("spouse_retirement")
    if year == profile.birth_year + profile.life_expectancy:
        events.append("life_expectancy")
    if profile.spouse_birth_year is not None:
        spouse_expectancy = profile.spouse_life_expectancy or profile.life_expectancy
        if year == profile.spouse_birth_year + spouse_expectancy:
            events.append("spouse_life_expectancy")
    return events


def _build_summary(
    snapshots: Sequence[YearlySnapshot],
    retirement_year: int,
    fi_target: float,
    bankruptcy_year: int | None,
    start_year: int,
) -> SimulationSummary:
    peak = snapshots[0]
    for snapshot in snapshots:
        if snapshot.net_worth > peak.net_worth:
            peak = snapshot
    # a retirement year outside the projected range reports the current year
    at_retirement = next((snapshot for snapshot in snapshots if snapshot.year == retirement_year), snapshots[0])
    years_to_fi = None
    if fi_target > 0:
        for snapshot in snapshots:
            if snapshot.financial_assets + snapshot.pension_assets >= fi_target:
                years_to_fi = snapshot.year - start_year
                break
    return SimulationSummary(
        current_net_worth=snapshots[0].net_worth,
        retirement_net_worth=at_retirement.net_worth,
        peak_net_worth=peak.net_worth,
        peak_net_worth_year=peak.year,
        bankruptcy_year=bankruptcy_year,
        years_to_fi=years_to_fi,
        fi_target=fi_target,
    )


def run_simulation(
    items: Iterable[AnyItem],
    profile: SimulationProfile,
    settings: GlobalSettings,
    start_year: int,
    horizon_years: int | None = None,
) -> SimulationResult:
    """Project ``items`` year by year from ``start_year``.

    With ``horizon_years`` the projection covers that many calendar years
    (at least one); otherwise it runs through ``profile.end_year``. Values in
    each snapshot are year-end balances and full-year flows.
    """
    if horizon_years is not None:
        end_year = start_year + max(1, int(horizon_years)) - 1
    else:
        end_year = max(start_year, profile.end_year)

    flow_states: List[dict] = []
    account_states: List[dict] = []
    loans: List[tuple] = []
    for item in items:
        if not isinstance(item, FinancialItem) or not item.category:
            logger.warning("Skipping unsupported item %r", item)
            continue
        window = _resolve_window(item, profile, start_year)
        if window is None:
            logger.debug("Skipping %s item %r: end precedes start", item.category, item.title)
            continue
        if isinstance(item, (IncomeItem, ExpenseItem)):
            flow_states.append(_build_flow_state(item, window, settings))
        elif isinstance(item, PensionItem) and item.is_benefit_stream:
            flow_states.append(_build_flow_state(item, window, settings))
        elif isinstance(item, DebtItem):
            sy, sm, ey, em = window
            schedule = LoanSchedule(
                to_number(item.loan_principal()),
                effective_debt_rate(item, settings),
                sy, sm, ey, em,
                item.repayment_type,
                item.grace_period_months,
            )
            loans.append((item, schedule))
        else:
            account_states.append(_build_account_state(item, window, settings, profile))

    cash_state = _ensure_cash_reserve(settings)
    liquid_states = [cash_state] + [state for state in account_states if state["liquid"]]
    all_accounts = [cash_state] + account_states
    logger.debug(
        "Simulating %d flows, %d accounts, %d loans over %d-%d",
        len(flow_states), len(account_states), len(loans), start_year, end_year,
    )

    snapshots: List[YearlySnapshot] = []
    fi_target = 0.0
    fi_reached = False
    bankruptcy_year = None

    for year in range(start_year, end_year + 1):
        events = _life_events(year, profile)
        _advance_months(account_states, cash_state, year, events)

        income_entries: List[BreakdownEntry] = []
        expense_entries: List[BreakdownEntry] = []
        for state in flow_states:
            amount = _flow_for_year(state, year)
            if not amount:
                continue
            item = state["item"]
            entry_type = "pension" if isinstance(item, PensionItem) else item.type
            entry = BreakdownEntry(item.title, amount, entry_type)
            if isinstance(item, ExpenseItem):
                expense_entries.append(entry)
            else:
                income_entries.append(entry)

        for state in account_states:
            if state["payout_year"] is None or not state["active"] or year < state["payout_year"]:
                continue
            if state["payout"] is None:
                years = state["item"].payout_years
                state["payout"] = annual_pension_withdrawal(state["value"], years, state["annual_rate"])
            drawn = min(state["payout"], state["value"])
            if drawn > 0:
                state["value"] -= drawn
                income_entries.append(BreakdownEntry(state["item"].title, drawn, "pension"))

        living_expense = sum(entry.amount for entry in expense_entries)
        for item, schedule in loans:
            if not schedule.is_started(year):
                continue
            service = schedule.yearly_interest_and_principal(year)
            if service.interest:
                expense_entries.append(BreakdownEntry(f"{item.title} interest", service.interest, "debt_interest"))
            if service.principal_payment:
                expense_entries.append(
                    BreakdownEntry(f"{item.title} principal", service.principal_payment, "debt_principal")
                )
            if schedule.matures_in(year):
                events.append(f"debt_payoff:{item.title}")

        total_income = sum(entry.amount for entry in income_entries)
        total_expense = sum(entry.amount for entry in expense_entries)
        net_flow = total_income - total_expense

        planned = [(state, _planned_contribution(state, year)) for state in account_states]
        planned_total = sum(amount for _, amount in planned)
        funded = min(planned_total, net_flow) if net_flow > 0 else 0.0
        if funded > 0:
            ratio = funded / planned_total
            for state, amount in planned:
                state["value"] += amount * ratio

        shortfall = 0.0
        remainder = net_flow - funded
        if remainder >= 0:
            cash_state["value"] += remainder
        else:
            shortfall = _cover_deficit(-remainder, liquid_states)
        if shortfall > 0 and year >= profile.retirement_year and bankruptcy_year is None:
            bankruptcy_year = year
            events.append("depletion")

        by_kind = {kind: [s for s in all_accounts if s["kind"] == kind and s["active"]] for kind in
                   ("cash", "savings", "pension", "real_estate", "physical_asset")}
        financial_assets = sum(s["value"] for s in by_kind["cash"] + by_kind["savings"])
        pension_assets = sum(s["value"] for s in by_kind["pension"])
        started_loans = [(item, schedule) for item, schedule in loans if schedule.is_started(year)]
        debt_entries = tuple(
            BreakdownEntry(item.title, schedule.balance_at_year_end(year), item.repayment_type)
            for item, schedule in started_loans
            if schedule.balance_at_year_end(year)
        )

        if year == start_year:
            fi_target = settings.fi_multiple * living_expense
        if not fi_reached and fi_target > 0 and financial_assets + pension_assets >= fi_target:
            fi_reached = True
            events.append("fi_reached")

        snapshots.append(
            YearlySnapshot(
                year=year,
                age=year - profile.birth_year,
                financial_assets=financial_assets,
                real_estate_value=sum(s["value"] for s in by_kind["real_estate"]),
                pension_assets=pension_assets,
                physical_asset_value=sum(s["value"] for s in by_kind["physical_asset"]),
                total_debts=sum(entry.amount for entry in debt_entries),
                total_income=total_income,
                total_expense=total_expense,
                cash_balance=cash_state["value"],
                unfunded_shortfall=shortfall,
                income_breakdown=tuple(income_entries),
                expense_breakdown=tuple(expense_entries),
                savings_breakdown=_entries(by_kind["cash"] + by_kind["savings"]),
                debt_breakdown=debt_entries,
                pension_breakdown=_entries(by_kind["pension"]),
                real_estate_breakdown=_entries(by_kind["real_estate"]),
                physical_asset_breakdown=_entries(by_kind["physical_asset"]),
                events=tuple(events),
            )
        )

    summary = _build_summary(snapshots, profile.retirement_year, fi_target, bankruptcy_year, start_year)
    logger.debug("Simulation finished: %d snapshots, bankruptcy_year=%s", len(snapshots), bankruptcy_year)
    return SimulationResult(
        snapshots=tuple(snapshots),
        start_year=start_year,
        end_year=end_year,
        retirement_year=profile.retirement_year,
        summary=summary,
    )


def run_plan(plan: PlanConfig, extra_items: Sequence[AnyItem] = ()) -> SimulationResult:
    """Run ``plan`` with ``extra_items`` (e.g. virtual expenses) appended to its items."""
    return run_simulation(
        list(plan.items) + list(extra_items),
        plan.profile,
        plan.settings,
        plan.start_year,
        plan.horizon_years,
    )
