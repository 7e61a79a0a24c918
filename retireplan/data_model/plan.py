# data_model/plan.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from .base import to_number
from .items import AnyItem

SCENARIO_PRESETS: Dict[str, Dict[str, float]] = {
    "optimistic": {
        "inflation": 0.020,
        "income_growth": 0.050,
        "investment_return": 0.080,
        "real_estate_appreciation": 0.040,
        "base_rate": 0.025,
    },
    "average": {
        "inflation": 0.025,
        "income_growth": 0.030,
        "investment_return": 0.050,
        "real_estate_appreciation": 0.025,
        "base_rate": 0.035,
    },
    "pessimistic": {
        "inflation": 0.040,
        "income_growth": 0.010,
        "investment_return": 0.020,
        "real_estate_appreciation": 0.005,
        "base_rate": 0.050,
    },
}

_SETTINGS_KEYS: Dict[str, tuple[str, ...]] = {
    "inflation": ("inflation", "inflationRate", "inflation_rate"),
    "income_growth": ("income_growth", "incomeGrowthRate", "income_growth_rate"),
    "savings_interest": ("savings_interest", "savingsGrowthRate", "savingsInterestRate", "savings_interest_rate"),
    "investment_return": ("investment_return", "investmentReturnRate", "investment_return_rate"),
    "pension_return": ("pension_return", "pensionReturnRate", "pension_return_rate"),
    "real_estate_appreciation": ("real_estate_appreciation", "realEstateGrowthRate", "real_estate_growth_rate"),
    "debt_interest": ("debt_interest", "debtInterestRate", "debt_interest_rate"),
    "base_rate": ("base_rate", "baseRate"),
}


@dataclass(frozen=True)
class GlobalSettings:
    """Annual rates as decimals; each one is the fallback ``growth_rate`` for its category."""

    inflation: float = 0.025
    income_growth: float = 0.033
    savings_interest: float = 0.025
    investment_return: float = 0.05
    pension_return: float = 0.05
    real_estate_appreciation: float = 0.024
    debt_interest: float = 0.035
    # reference rate that floating-rate debts add their spread to
    base_rate: float = 0.035
    fi_multiple: float = 25.0

    @classmethod
    def from_preset(cls, name: str, **overrides: float) -> "GlobalSettings":
        if name not in SCENARIO_PRESETS:
            raise ValueError(f"Unknown scenario preset: {name}")
        rates = dict(SCENARIO_PRESETS[name])
        rates["pension_return"] = rates["investment_return"]
        rates.update(overrides)
        return cls(**rates)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, percent: bool = True) -> "GlobalSettings":
        """Read API-style settings; rates are percents unless ``percent`` is False.

        A ``scenario`` key selects a preset that explicit rates then override.
        """
        data = data or {}
        scenario = data.get("scenario") or data.get("scenarioMode")
        base = cls.from_preset(scenario) if scenario in SCENARIO_PRESETS else cls()
        overrides: Dict[str, float] = {}
        for field_name, keys in _SETTINGS_KEYS.items():
            for key in keys:
                if data.get(key) is None or data.get(key) == "":
                    continue
                value = to_number(data[key], default=getattr(base, field_name) * (100.0 if percent else 1.0))
                overrides[field_name] = value / 100.0 if percent else value
                break
        multiple = data.get("fi_multiple", data.get("fiMultiple"))
        if multiple is not None:
            overrides["fi_multiple"] = to_number(multiple, default=base.fi_multiple)
        return replace(base, **overrides)


@dataclass(frozen=True)
class SimulationProfile:
    birth_year: int
    retirement_age: int
    life_expectancy: int = 100
    spouse_birth_year: int | None = None
    spouse_retirement_age: int | None = None
    spouse_life_expectancy: int | None = None
    birth_month: int = 1
    spouse_birth_month: int = 1

    @property
    def retirement_year(self) -> int:
        return self.birth_year + self.retirement_age

    @property
    def spouse_retirement_year(self) -> int | None:
        if self.spouse_birth_year is None or self.spouse_retirement_age is None:
            return None
        return self.spouse_birth_year + self.spouse_retirement_age

    @property
    def end_year(self) -> int:
        birth = max(self.birth_year, self.spouse_birth_year or self.birth_year)
        expectancy = max(self.life_expectancy, self.spouse_life_expectancy or self.life_expectancy)
        return birth + expectancy

    def owner_birth_year(self, owner: str) -> int:
        if owner == "spouse" and self.spouse_birth_year:
            return self.spouse_birth_year
        return self.birth_year

    def owner_retirement_year(self, owner: str) -> int:
        if owner == "spouse" and self.spouse_retirement_year is not None:
            return self.spouse_retirement_year
        return self.retirement_year

    def last_working_month(self, owner: str) -> tuple[int, int]:
        """(year, month) just before the owner's retirement birthday."""
        if owner == "spouse" and self.spouse_retirement_year is not None:
            year, birth_month = self.spouse_retirement_year, self.spouse_birth_month
        else:
            year, birth_month = self.retirement_year, self.birth_month
        if birth_month <= 1:
            return year - 1, 12
        return year, birth_month - 1


@dataclass
class PlanConfig:
    name: str
    profile: SimulationProfile
    start_year: int
    settings: GlobalSettings = field(default_factory=GlobalSettings)
    items: List[AnyItem] = field(default_factory=list)
    horizon_years: int | None = None
