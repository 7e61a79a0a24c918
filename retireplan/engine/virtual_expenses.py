"""Education and medical expense curves synthesized per run.

The generated items are ordinary ``ExpenseItem`` objects whose ids start with
``virtual-``; they are handed to the simulator together with the real items and
never stored anywhere.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..data_model.constants import EDUCATION_EXPENSE_BY_AGE, EDUCATION_TIERS, MEDICAL_EXPENSE_BY_AGE
from ..data_model.items import ExpenseItem

logger = logging.getLogger(__name__)

VIRTUAL_ID_PREFIX = "virtual-"


@dataclass
class Child:
    birth_year: int
    name: str = ""


@dataclass
class VirtualExpenseParams:
    birth_year: int
    life_expectancy: int
    current_year: int
    spouse_birth_year: int | None = None
    spouse_life_expectancy: int | None = None
    children: List[Child] = field(default_factory=list)
    tier: str = "normal"
    include_education: bool = True
    include_medical: bool = True


def is_virtual(item) -> bool:
    return str(getattr(item, "id", "")).startswith(VIRTUAL_ID_PREFIX)


def _education_items(child: Child, index: int, tier: str, current_year: int) -> List[ExpenseItem]:
    label = child.name or f"Child {index + 1}"
    items: List[ExpenseItem] = []
    for stage_index, (start_age, band) in enumerate(sorted(EDUCATION_EXPENSE_BY_AGE.items())):
        amount = band[tier]
        start_year = child.birth_year + start_age
        item_id = f"{VIRTUAL_ID_PREFIX}edu-{index}-{stage_index}"
        if band.get("one_time"):
            if start_year < current_year:
                continue
            items.append(
                ExpenseItem(
                    title=f"{label} {band['label']}",
                    amount=amount,
                    type="education",
                    frequency="once",
                    start_year=start_year,
                    start_month=1,
                    end_year=start_year,
                    end_month=1,
                    owner="common",
                    amount_base_year=current_year,
                    id=item_id,
                )
            )
            continue
        end_year = child.birth_year + band["end_age"]
        if end_year < current_year:
            continue
        items.append(
            ExpenseItem(
                title=f"{label} {band['label']}",
                amount=amount,
                type="education",
                frequency="yearly",
                start_year=max(start_year, current_year),
                start_month=1,
                end_year=end_year,
                end_month=12,
                owner="common",
                amount_base_year=current_year,
                id=item_id,
            )
        )
    return items


def _medical_items(owner: str, birth_year: int, life_expectancy: int, current_year: int) -> List[ExpenseItem]:
    bands = sorted(MEDICAL_EXPENSE_BY_AGE.items())
    last_year = birth_year + life_expectancy - 1
    items: List[ExpenseItem] = []
    for band_index, (start_age, annual_cost) in enumerate(bands):
        start_year = birth_year + start_age
        if band_index + 1 < len(bands):
            end_year = min(last_year, birth_year + bands[band_index + 1][0] - 1)
        else:
            end_year = last_year
        if start_year > end_year or end_year < current_year:
            continue
        items.append(
            ExpenseItem(
                title=f"Medical ({owner}, age {start_age}+)",
                amount=annual_cost,
                type="medical",
                frequency="yearly",
                start_year=max(start_year, current_year),
                start_month=1,
                end_year=end_year,
                end_month=12,
                owner=owner,
                amount_base_year=current_year,
                id=f"{VIRTUAL_ID_PREFIX}med-{owner}-{band_index}",
            )
        )
    return items


def generate_virtual_expenses(params: VirtualExpenseParams) -> List[ExpenseItem]:
    tier = params.tier if params.tier in EDUCATION_TIERS else "normal"
    items: List[ExpenseItem] = []
    if params.include_education:
        for index, child in enumerate(params.children):
            items.extend(_education_items(child, index, tier, params.current_year))
    if params.include_medical:
        items.extend(_medical_items("self", params.birth_year, params.life_expectancy, params.current_year))
        if params.spouse_birth_year is not None:
            spouse_expectancy = params.spouse_life_expectancy or params.life_expectancy
            items.extend(_medical_items("spouse", params.spouse_birth_year, spouse_expectancy, params.current_year))
    logger.debug("Generated %d virtual expense items", len(items))
    return items
