"""Loan amortization under the four supported repayment policies.

A loan is drawn in its start month and repaid in the months that follow,
so a loan from 2025-01 to 2055-01 makes 360 payments, the last one in the
maturity month. Loan interest uses the nominal monthly rate ``annual / 12``.
A grace loan pays interest only for its first ``grace_period_months`` payments
and then amortizes the full principal with level payments.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .rates import active_months, months_elapsed

BULLET = "bullet"
LEVEL_PAYMENT = "level_payment"
EQUAL_PRINCIPAL = "equal_principal"
GRACE = "grace"

REPAYMENT_ALIASES: Dict[str, str] = {
    "bullet": BULLET,
    "interest_only": BULLET,
    "level_payment": LEVEL_PAYMENT,
    "amortizing": LEVEL_PAYMENT,
    "annuity": LEVEL_PAYMENT,
    "equal_principal": EQUAL_PRINCIPAL,
    "grace": GRACE,
    "deferred": GRACE,
}


def normalize_repayment_type(value: str | None) -> str:
    return REPAYMENT_ALIASES.get(str(value or "").strip().lower(), LEVEL_PAYMENT)


def level_payment(principal: float, rate_m: float, months: int) -> float:
    """Annuity payment ``P * r(1+r)^n / ((1+r)^n - 1)``; linear when ``r == 0``."""
    if months <= 0:
        return 0.0
    if rate_m == 0:
        return principal / months
    factor = (1.0 + rate_m) ** months
    return principal * rate_m * factor / (factor - 1.0)


@dataclass(frozen=True)
class DebtService:
    interest: float
    principal_payment: float

    @property
    def total(self) -> float:
        return self.interest + self.principal_payment


class LoanSchedule:
    """Month-by-month schedule of one loan, computed once and queried per year."""

    def __init__(
        self,
        principal: float,
        annual_rate: float,
        start_year: int,
        start_month: int,
        end_year: int | None,
        end_month: int | None,
        repayment_type: str = LEVEL_PAYMENT,
        grace_period_months: int = 0,
    ) -> None:
        self.principal = max(0.0, principal)
        self.rate_m = max(0.0, annual_rate) / 12.0
        self.start_year = start_year
        self.start_month = start_month
        self.end_year = end_year
        self.end_month = end_month if end_month is not None else 12
        self.repayment_type = normalize_repayment_type(repayment_type)
        # first payment falls one month after the drawdown
        self.first_year, self.first_month = divmod(start_year * 12 + start_month, 12)
        self.first_month += 1
        self.open_ended = end_year is None
        self.term_months = 0 if self.open_ended else months_elapsed(start_year, start_month, end_year, self.end_month)
        # at least one amortizing payment remains after the grace period
        self.grace_months = 0
        if self.repayment_type == GRACE and self.term_months > 0:
            self.grace_months = min(max(0, int(grace_period_months or 0)), self.term_months - 1)
        self._interest: Dict[int, float] = {}
        self._principal: Dict[int, float] = {}
        self._balance: Dict[int, float] = {}
        if not self.open_ended and self.term_months > 0:
            self._build()

    def _build(self) -> None:
        n = self.term_months
        balance = self.principal
        payment = level_payment(self.principal, self.rate_m, n - self.grace_months)
        equal_part = self.principal / n
        year, month = self.first_year, self.first_month
        for k in range(1, n + 1):
            interest = balance * self.rate_m
            if self.repayment_type == BULLET:
                principal_part = balance if k == n else 0.0
            elif k <= self.grace_months:
                principal_part = 0.0
            elif self.repayment_type == EQUAL_PRINCIPAL:
                principal_part = min(balance, equal_part)
            else:
                principal_part = min(balance, payment - interest)
            if k == n:
                principal_part = balance
            balance -= principal_part
            self._interest[year] = self._interest.get(year, 0.0) + interest
            self._principal[year] = self._principal.get(year, 0.0) + principal_part
            self._balance[year] = max(0.0, balance)
            month += 1
            if month > 12:
                year, month = year + 1, 1

    @property
    def is_degenerate(self) -> bool:
        return not self.open_ended and self.term_months <= 0

    def payment_months(self, year: int) -> int:
        if self.is_degenerate:
            return 0
        return active_months(self.first_year, self.first_month, self.end_year, self.end_month, year)

    def yearly_interest_and_principal(self, year: int) -> DebtService:
        if self.payment_months(year) <= 0:
            return DebtService(0, 0)
        if self.open_ended:
            interest = self.principal * self.rate_m * self.payment_months(year)
            return DebtService(round(interest), 0)
        return DebtService(round(self._interest.get(year, 0.0)), round(self._principal.get(year, 0.0)))

    def balance_at_year_end(self, year: int) -> float:
        if year < self.start_year:
            return self.principal
        if self.open_ended:
            return self.principal
        if self.is_degenerate or year > self.end_year:
            return 0.0
        if year in self._balance:
            return self._balance[year]
        # drawn but no payment yet (December start)
        return self.principal

    def is_started(self, year: int) -> bool:
        return year >= self.start_year

    def matures_in(self, year: int) -> bool:
        return not self.open_ended and not self.is_degenerate and year == self.end_year


def yearly_interest_and_principal(
    principal: float,
    annual_rate: float,
    start_year: int,
    start_month: int,
    end_year: int | None,
    end_month: int | None,
    target_year: int,
    repayment_type: str = LEVEL_PAYMENT,
    grace_period_months: int = 0,
) -> DebtService:
    schedule = LoanSchedule(
        principal, annual_rate, start_year, start_month, end_year, end_month, repayment_type, grace_period_months
    )
    return schedule.yearly_interest_and_principal(target_year)


def remaining_balance_at_year_end(
    principal: float,
    annual_rate: float,
    start_year: int,
    start_month: int,
    end_year: int | None,
    end_month: int | None,
    target_year: int,
    repayment_type: str = LEVEL_PAYMENT,
    grace_period_months: int = 0,
) -> float:
    schedule = LoanSchedule(
        principal, annual_rate, start_year, start_month, end_year, end_month, repayment_type, grace_period_months
    )
    return schedule.balance_at_year_end(target_year)


def monthly_payment(
    principal: float,
    annual_rate: float,
    months: int,
    repayment_type: str = LEVEL_PAYMENT,
    grace_period_months: int = 0,
) -> float:
    """First-month payment of a loan, for display; the post-grace payment for grace loans."""
    if principal <= 0 or months <= 0:
        return 0.0
    rate_m = max(0.0, annual_rate) / 12.0
    kind = normalize_repayment_type(repayment_type)
    if kind == BULLET:
        return principal * rate_m
    if kind == EQUAL_PRINCIPAL:
        return principal / months + principal * rate_m
    if kind == GRACE:
        grace = min(max(0, int(grace_period_months or 0)), months - 1)
        return level_payment(principal, rate_m, months - grace)
    return level_payment(principal, rate_m, months)


def annual_pension_withdrawal(balance: float, years: int, annual_rate: float) -> float:
    """Fixed yearly payout that drains ``balance`` over ``years`` at ``annual_rate``."""
    if balance <= 0 or years <= 0:
        return 0.0
    if annual_rate == 0:
        return balance / years
    factor = (1.0 + annual_rate) ** years
    return balance * annual_rate * factor / (factor - 1.0)
