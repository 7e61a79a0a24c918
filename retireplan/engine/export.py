# engine/export.py
from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from typing import Any, Dict, List

from ..data_model import BreakdownEntry, Scores, SimulationProfile, SimulationResult, YearlySnapshot

SUPPORTED_LOCALES = ("ko", "en")

LABELS: Dict[str, Dict[str, str]] = {
    "ko": {
        "basic_info": "기본정보",
        "plan_name": "플랜이름",
        "exported_at": "내보낸시각",
        "birth_year": "출생연도",
        "retirement_age": "은퇴나이",
        "life_expectancy": "기대수명",
        "spouse_birth_year": "배우자출생연도",
        "spouse_retirement_age": "배우자은퇴나이",
        "start_year": "시작연도",
        "end_year": "종료연도",
        "retirement_year": "은퇴연도",
        "summary": "요약",
        "current_net_worth": "현재순자산",
        "retirement_net_worth": "은퇴시순자산",
        "peak_net_worth": "최고순자산",
        "peak_net_worth_year": "최고순자산연도",
        "bankruptcy_year": "자산고갈연도",
        "years_to_fi": "경제적자유까지년수",
        "fi_target": "경제적자유목표액",
        "scores": "준비도점수",
        "overall": "종합",
        "income": "소득",
        "expense": "지출",
        "asset": "자산",
        "debt": "부채",
        "pension": "연금",
        "yearly": "연도별데이터",
        "year": "연도",
        "age": "나이",
        "net_worth": "순자산",
        "total_assets": "총자산",
        "financial_assets": "금융자산",
        "real_estate_value": "부동산",
        "pension_assets": "연금자산",
        "physical_asset_value": "실물자산",
        "total_debts": "총부채",
        "total_income": "총수입",
        "total_expense": "총지출",
        "net_cash_flow": "순현금흐름",
        "events": "이벤트",
        "asset_details": "자산상세",
        "debt_details": "부채상세",
        "cash_flow_details": "현금흐름상세",
        "savings": "저축",
        "real_estate": "부동산",
        "physical_assets": "실물자산",
        "title": "항목",
        "amount": "금액",
        "type": "유형",
    },
    "en": {
        "basic_info": "Basic Info",
        "plan_name": "Plan Name",
        "exported_at": "Exported At",
        "birth_year": "Birth Year",
        "retirement_age": "Retirement Age",
        "life_expectancy": "Life Expectancy",
        "spouse_birth_year": "Spouse Birth Year",
        "spouse_retirement_age": "Spouse Retirement Age",
        "start_year": "Start Year",
        "end_year": "End Year",
        "retirement_year": "Retirement Year",
        "summary": "Summary",
        "current_net_worth": "Current Net Worth",
        "retirement_net_worth": "Net Worth At Retirement",
        "peak_net_worth": "Peak Net Worth",
        "peak_net_worth_year": "Peak Net Worth Year",
        "bankruptcy_year": "Depletion Year",
        "years_to_fi": "Years To FI",
        "fi_target": "FI Target",
        "scores": "Readiness Scores",
        "overall": "Overall",
        "income": "Income",
        "expense": "Expense",
        "asset": "Asset",
        "debt": "Debt",
        "pension": "Pension",
        "yearly": "Yearly",
        "year": "Year",
        "age": "Age",
        "net_worth": "Net Worth",
        "total_assets": "Total Assets",
        "financial_assets": "Financial Assets",
        "real_estate_value": "Real Estate",
        "pension_assets": "Pension Assets",
        "physical_asset_value": "Physical Assets",
        "total_debts": "Total Debts",
        "total_income": "Total Income",
        "total_expense": "Total Expense",
        "net_cash_flow": "Net Cash Flow",
        "events": "Events",
        "asset_details": "Asset Details",
        "debt_details": "Debt Details",
        "cash_flow_details": "Cash Flow Details",
        "savings": "Savings",
        "real_estate": "Real Estate",
        "physical_assets": "Physical Assets",
        "title": "Title",
        "amount": "Amount",
        "type": "Type",
    },
}

EVENT_LABELS: Dict[str, Dict[str, str]] = {
    "ko": {
        "retirement": "은퇴",
        "spouse_retirement": "배우자 은퇴",
        "life_expectancy": "기대수명 도달",
        "spouse_life_expectancy": "배우자 기대수명 도달",
        "debt_payoff": "대출 상환 완료",
        "real_estate_sale": "부동산 매각",
        "depletion": "자산 고갈",
        "fi_reached": "경제적 자유 달성",
    },
    "en": {
        "retirement": "Retirement",
        "spouse_retirement": "Spouse retirement",
        "life_expectancy": "Life expectancy reached",
        "spouse_life_expectancy": "Spouse life expectancy reached",
        "debt_payoff": "Debt paid off",
        "real_estate_sale": "Real estate sold",
        "depletion": "Assets depleted",
        "fi_reached": "Financial independence reached",
    },
}


@dataclass
class ExportOptions:
    plan_name: str = ""
    exported_at: str | None = None
    profile: SimulationProfile | None = None
    scores: Scores | None = None
    include_details: bool = True


def sanitize_json_compat(value: Any):
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(value, dict):
        return {key: sanitize_json_compat(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_json_compat(item) for item in value]
    return value


def _money(value: float) -> int | None:
    if math.isnan(value) or math.isinf(value):
        return None
    return int(round(value))


def localize_event(event: str, locale: str) -> str:
    """``debt_payoff:Mortgage`` becomes e.g. ``Debt paid off: Mortgage``."""
    code, _, subject = event.partition(":")
    label = EVENT_LABELS[locale].get(code, code)
    return f"{label}: {subject}" if subject else label


def _entries(entries: tuple, labels: Dict[str, str]) -> List[Dict[str, Any]]:
    return [
        {labels["title"]: entry.title, labels["amount"]: _money(entry.amount), labels["type"]: entry.type}
        for entry in entries
        if isinstance(entry, BreakdownEntry)
    ]


def _year_row(snapshot: YearlySnapshot, labels: Dict[str, str], locale: str, include_details: bool) -> Dict[str, Any]:
    row: Dict[str, Any] = {labels["year"]: snapshot.year, labels["age"]: snapshot.age}
    for field_name in (
        "net_worth",
        "total_assets",
        "financial_assets",
        "real_estate_value",
        "pension_assets",
        "physical_asset_value",
        "total_debts",
        "total_income",
        "total_expense",
        "net_cash_flow",
    ):
        row[labels[field_name]] = _money(getattr(snapshot, field_name))
    row[labels["events"]] = [localize_event(event, locale) for event in snapshot.events]
    if include_details:
        row[labels["asset_details"]] = {
            labels["savings"]: _entries(snapshot.savings_breakdown, labels),
            labels["real_estate"]: _entries(snapshot.real_estate_breakdown, labels),
            labels["pension"]: _entries(snapshot.pension_breakdown, labels),
            labels["physical_assets"]: _entries(snapshot.physical_asset_breakdown, labels),
        }
        row[labels["debt_details"]] = _entries(snapshot.debt_breakdown, labels)
        row[labels["cash_flow_details"]] = {
            labels["income"]: _entries(snapshot.income_breakdown, labels),
            labels["expense"]: _entries(snapshot.expense_breakdown, labels),
        }
    return row


def export_simulation(
    result: SimulationResult,
    options: ExportOptions | None = None,
    locale: str = "ko",
) -> Dict[str, Any]:
    """Flatten ``result`` into a JSON-ready document keyed in ``locale``."""
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"Unsupported locale: {locale}")
    options = options or ExportOptions()
    labels = LABELS[locale]

    basic: Dict[str, Any] = {
        labels["plan_name"]: options.plan_name,
        labels["start_year"]: result.start_year,
        labels["end_year"]: result.end_year,
        labels["retirement_year"]: result.retirement_year,
    }
    if options.exported_at:
        basic[labels["exported_at"]] = options.exported_at
    profile = options.profile
    if profile is not None:
        basic[labels["birth_year"]] = profile.birth_year
        basic[labels["retirement_age"]] = profile.retirement_age
        basic[labels["life_expectancy"]] = profile.life_expectancy
        if profile.spouse_birth_year is not None:
            basic[labels["spouse_birth_year"]] = profile.spouse_birth_year
            basic[labels["spouse_retirement_age"]] = profile.spouse_retirement_age

    summary = result.summary
    document: Dict[str, Any] = {
        labels["basic_info"]: basic,
        labels["summary"]: {
            labels["current_net_worth"]: _money(summary.current_net_worth),
            labels["retirement_net_worth"]: _money(summary.retirement_net_worth),
            labels["peak_net_worth"]: _money(summary.peak_net_worth),
            labels["peak_net_worth_year"]: summary.peak_net_worth_year,
            labels["bankruptcy_year"]: summary.bankruptcy_year,
            labels["years_to_fi"]: summary.years_to_fi,
            labels["fi_target"]: _money(summary.fi_target),
        },
    }
    if options.scores is not None:
        document[labels["scores"]] = {labels[key]: value for key, value in options.scores.to_dict().items()}
    document[labels["yearly"]] = [
        _year_row(snapshot, labels, locale, options.include_details) for snapshot in result.snapshots
    ]
    return sanitize_json_compat(document)


def ensure_export_dir(path: str) -> None:
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder, exist_ok=True)


def write_export(
    path: str,
    result: SimulationResult,
    options: ExportOptions | None = None,
    locale: str = "ko",
) -> Dict[str, Any]:
    document = export_simulation(result, options, locale)
    ensure_export_dir(path)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(document, f, ensure_ascii=False, allow_nan=False, indent=2)
    os.replace(tmp_path, path)
    return document
