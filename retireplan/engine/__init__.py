from .aggregate import aggregate_period, build_chart_payload, calculate_end_year, snapshots_to_frame
from .export import ExportOptions, export_simulation, write_export
from .loans import (
    LoanSchedule,
    annual_pension_withdrawal,
    monthly_payment,
    remaining_balance_at_year_end,
    yearly_interest_and_principal,
)
from .rates import active_months, monthly_rate, yearly_amount
from .scoring import calculate_scores, score_grade, score_simulation
from .simulator import run_plan, run_simulation
from .virtual_expenses import Child, VirtualExpenseParams, generate_virtual_expenses

__all__ = [
    "Child",
    "ExportOptions",
    "LoanSchedule",
    "VirtualExpenseParams",
    "active_months",
    "aggregate_period",
    "annual_pension_withdrawal",
    "build_chart_payload",
    "calculate_end_year",
    "calculate_scores",
    "export_simulation",
    "generate_virtual_expenses",
    "monthly_payment",
    "monthly_rate",
    "remaining_balance_at_year_end",
    "run_plan",
    "run_simulation",
    "score_grade",
    "score_simulation",
    "snapshots_to_frame",
    "write_export",
    "yearly_amount",
    "yearly_interest_and_principal",
]
