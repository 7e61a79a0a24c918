from .constants import (
    EDUCATION_EXPENSE_BY_AGE,
    END_ACTION_OPTIONS,
    ITEM_CATEGORIES,
    MEDICAL_EXPENSE_BY_AGE,
    REPAYMENT_TYPES,
)
from .items import (
    AnyItem,
    DebtItem,
    ExpenseItem,
    FinancialItem,
    IncomeItem,
    ItemTableModel,
    PensionItem,
    PhysicalAssetItem,
    RealEstateItem,
    SavingsItem,
    dataframe_to_items,
    item_from_dict,
    records_to_items,
)
from .plan import SCENARIO_PRESETS, GlobalSettings, PlanConfig, SimulationProfile
from .results import (
    BreakdownEntry,
    Scores,
    ScoringInputs,
    SimulationResult,
    SimulationSummary,
    YearlySnapshot,
)

__all__ = [
    "EDUCATION_EXPENSE_BY_AGE",
    "END_ACTION_OPTIONS",
    "ITEM_CATEGORIES",
    "MEDICAL_EXPENSE_BY_AGE",
    "REPAYMENT_TYPES",
    "SCENARIO_PRESETS",
    "AnyItem",
    "BreakdownEntry",
    "DebtItem",
    "ExpenseItem",
    "FinancialItem",
    "GlobalSettings",
    "IncomeItem",
    "ItemTableModel",
    "PensionItem",
    "PhysicalAssetItem",
    "PlanConfig",
    "RealEstateItem",
    "SavingsItem",
    "Scores",
    "ScoringInputs",
    "SimulationProfile",
    "SimulationResult",
    "SimulationSummary",
    "YearlySnapshot",
    "dataframe_to_items",
    "item_from_dict",
    "records_to_items",
]
