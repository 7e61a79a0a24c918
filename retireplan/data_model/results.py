from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class BreakdownEntry:
    title: str
    amount: float
    type: str = ""


@dataclass(frozen=True)
class YearlySnapshot:
    year: int
    age: int
    financial_assets: float
    real_estate_value: float
    pension_assets: float
    physical_asset_value: float
    total_debts: float
    total_income: float
    total_expense: float
    cash_balance: float = 0.0
    unfunded_shortfall: float = 0.0
    income_breakdown: Tuple[BreakdownEntry, ...] = ()
    expense_breakdown: Tuple[BreakdownEntry, ...] = ()
    savings_breakdown: Tuple[BreakdownEntry, ...] = ()
    debt_breakdown: Tuple[BreakdownEntry, ...] = ()
    pension_breakdown: Tuple[BreakdownEntry, ...] = ()
    real_estate_breakdown: Tuple[BreakdownEntry, ...] = ()
    physical_asset_breakdown: Tuple[BreakdownEntry, ...] = ()
    events: Tuple[str, ...] = ()

    @property
    def total_assets(self) -> float:
        return self.financial_assets + self.real_estate_value + self.pension_assets + self.physical_asset_value

    @property
    def net_worth(self) -> float:
        return self.total_assets - self.total_debts

    @property
    def net_cash_flow(self) -> float:
        return self.total_income - self.total_expense

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_assets"] = self.total_assets
        data["net_worth"] = self.net_worth
        data["net_cash_flow"] = self.net_cash_flow
        return data


@dataclass(frozen=True)
class SimulationSummary:
    current_net_worth: float
    retirement_net_worth: float
    peak_net_worth: float
    peak_net_worth_year: int
    bankruptcy_year: int | None
    years_to_fi: int | None
    fi_target: float


@dataclass(frozen=True)
class SimulationResult:
    snapshots: Tuple[YearlySnapshot, ...]
    start_year: int
    end_year: int
    retirement_year: int
    summary: SimulationSummary

    def snapshot_for(self, year: int) -> YearlySnapshot | None:
        index = year - self.start_year
        if 0 <= index < len(self.snapshots):
            return self.snapshots[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_year": self.start_year,
            "end_year": self.end_year,
            "retirement_year": self.retirement_year,
            "summary": asdict(self.summary),
            "snapshots": [snapshot.to_dict() for snapshot in self.snapshots],
        }


@dataclass(frozen=True)
class Scores:
    overall: float
    income: float
    expense: float
    asset: float
    debt: float
    pension: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ScoringInputs:
    monthly_income: float
    monthly_expense: float
    total_assets: float
    total_debts: float
    net_worth: float
    target_retirement_fund: float
    current_age: int
    retirement_age: int
    monthly_pension: float = 0.0
