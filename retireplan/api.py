"""REST backend for retirement projections."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List

from flask import Flask, jsonify, request

from retireplan.data_model import (
    ITEM_CATEGORIES,
    SCENARIO_PRESETS,
    GlobalSettings,
    ItemTableModel,
    PlanConfig,
    SimulationProfile,
    records_to_items,
)
from retireplan.data_model.constants import EDUCATION_TIERS
from retireplan.engine.aggregate import PERIOD_SPANS, build_chart_payload, calculate_end_year
from retireplan.engine.export import SUPPORTED_LOCALES, ExportOptions, export_simulation, sanitize_json_compat
from retireplan.engine.scoring import score_grade, score_simulation
from retireplan.engine.simulator import run_plan
from retireplan.engine.virtual_expenses import Child, VirtualExpenseParams, generate_virtual_expenses

logger = logging.getLogger(__name__)

app = Flask(__name__)

ITEM_MODEL = ItemTableModel()


class PayloadError(ValueError):
    """Raised for request bodies that cannot describe a plan."""


def _is_nan(value: Any) -> bool:
    try:
        return not math.isfinite(value)
    except (TypeError, ValueError):
        return False


def _sanitize_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    clean_rows: List[Dict[str, Any]] = []
    for row in records:
        clean_rows.append({key: (None if _is_nan(value) else value) for key, value in row.items()})
    return clean_rows


def _model_payload(model: ItemTableModel) -> Dict[str, Any]:
    columns: List[Dict[str, Any]] = []
    month_fields: List[str] = []
    for col in model.columns:
        columns.append(
            {
                "field": col.field,
                "label": col.label,
                "kind": col.kind,
                "default": col.default,
                "options": col.options or [],
                "min": col.min_value,
                "step": col.step,
                "format": col.format,
                "help": col.help,
            }
        )
        if col.kind == "month":
            month_fields.append(col.field)
    defaults = _sanitize_records(model.create_default_df().to_dict("records"))
    return {
        "name": model.name,
        "columns": columns,
        "defaults": defaults,
        "monthFields": month_fields,
    }


def _extract_payload_value(payload: dict, *keys: str, default=None):
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _optional_int(payload: dict, *keys: str) -> int | None:
    value = _extract_payload_value(payload, *keys)
    if value is None or value == "":
        return None
    return int(value)


def parse_profile(payload: dict) -> SimulationProfile:
    data = payload.get("profile") or payload
    try:
        birth_year = int(_extract_payload_value(data, "birthYear", "birth_year"))
        retirement_age = int(_extract_payload_value(data, "retirementAge", "retirement_age", default=60))
        life_expectancy = int(_extract_payload_value(data, "lifeExpectancy", "life_expectancy", default=100))
        birth_month = int(_extract_payload_value(data, "birthMonth", "birth_month", default=1))
        spouse_birth_month = int(_extract_payload_value(data, "spouseBirthMonth", "spouse_birth_month", default=1))
        spouse_birth_year = _optional_int(data, "spouseBirthYear", "spouse_birth_year")
        spouse_retirement_age = _optional_int(data, "spouseRetirementAge", "spouse_retirement_age")
        spouse_life_expectancy = _optional_int(data, "spouseLifeExpectancy", "spouse_life_expectancy")
    except (TypeError, ValueError) as exc:
        raise PayloadError("Invalid profile parameters.") from exc
    return SimulationProfile(
        birth_year=birth_year,
        retirement_age=retirement_age,
        life_expectancy=life_expectancy,
        spouse_birth_year=spouse_birth_year,
        spouse_retirement_age=spouse_retirement_age,
        spouse_life_expectancy=spouse_life_expectancy,
        birth_month=birth_month if 1 <= birth_month <= 12 else 1,
        spouse_birth_month=spouse_birth_month if 1 <= spouse_birth_month <= 12 else 1,
    )


def parse_settings(payload: dict) -> GlobalSettings:
    data = payload.get("settings") or {}
    scenario = data.get("scenario") or data.get("scenarioMode")
    if scenario and scenario not in SCENARIO_PRESETS:
        raise PayloadError(f"Unknown scenario preset: {scenario}")
    return GlobalSettings.from_dict(data, percent=True)


def parse_children(payload: dict) -> List[Child]:
    children: List[Child] = []
    for row in payload.get("children") or []:
        if not isinstance(row, dict):
            continue
        try:
            birth_year = int(_extract_payload_value(row, "birthYear", "birth_year"))
        except (TypeError, ValueError):
            logger.debug("Skipping child without a birth year: %r", row)
            continue
        children.append(Child(birth_year=birth_year, name=str(row.get("name", "") or "")))
    return children


def build_plan(payload: dict) -> tuple[PlanConfig, list]:
    """Plan plus the virtual expense items requested for this run."""
    profile = parse_profile(payload)
    settings = parse_settings(payload)
    current_year = datetime.now().year
    try:
        start_year = int(_extract_payload_value(payload, "startYear", "start_year", default=current_year))
        horizon = _optional_int(payload, "horizonYears", "horizon_years", "years")
    except (TypeError, ValueError) as exc:
        raise PayloadError("Invalid plan parameters.") from exc

    rows = payload.get("items") or payload.get("financialItems") or []
    if not isinstance(rows, list):
        raise PayloadError("Items must be a list.")
    items = records_to_items(rows, percent_rates=True)
    plan = PlanConfig(
        name=str(_extract_payload_value(payload, "name", "planName", default="MyPlan")).strip() or "MyPlan",
        profile=profile,
        start_year=start_year,
        settings=settings,
        items=items,
        horizon_years=horizon,
    )

    options = payload.get("virtualExpenses") or {}
    if not isinstance(options, dict):
        raise PayloadError("virtualExpenses must be an object.")
    tier = str(options.get("tier", "normal"))
    params = VirtualExpenseParams(
        birth_year=profile.birth_year,
        life_expectancy=profile.life_expectancy,
        current_year=start_year,
        spouse_birth_year=profile.spouse_birth_year,
        spouse_life_expectancy=profile.spouse_life_expectancy,
        children=parse_children(payload),
        tier=tier if tier in EDUCATION_TIERS else "normal",
        include_education=bool(options.get("education", False)),
        include_medical=bool(options.get("medical", False)),
    )
    virtual_items = generate_virtual_expenses(params)
    logger.info(
        "Plan %r: %d items (%d skipped), %d virtual expenses",
        plan.name, len(items), len(rows) - len(items), len(virtual_items),
    )
    return plan, virtual_items


@app.after_request
def apply_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@app.errorhandler(PayloadError)
def handle_payload_error(exc: PayloadError):
    return jsonify({"error": str(exc)}), 400


@app.get("/api/health")
def healthcheck():
    return jsonify({"status": "ok"})


@app.get("/api/schema")
def get_schema():
    defaults = GlobalSettings()
    payload = {
        "planDefaults": {
            "name": "MyPlan",
            "startYear": datetime.now().year,
            "retirementAge": 60,
            "lifeExpectancy": 100,
            "settings": {
                "inflationRate": defaults.inflation * 100,
                "incomeGrowthRate": defaults.income_growth * 100,
                "savingsGrowthRate": defaults.savings_interest * 100,
                "investmentReturnRate": defaults.investment_return * 100,
                "pensionReturnRate": defaults.pension_return * 100,
                "realEstateGrowthRate": defaults.real_estate_appreciation * 100,
                "debtInterestRate": defaults.debt_interest * 100,
                "baseRate": defaults.base_rate * 100,
                "fiMultiple": defaults.fi_multiple,
            },
        },
        "items": _model_payload(ITEM_MODEL),
        "categories": ITEM_CATEGORIES,
        "presets": {
            name: {key: value * 100 for key, value in rates.items()} for name, rates in SCENARIO_PRESETS.items()
        },
        "educationTiers": EDUCATION_TIERS,
        "locales": list(SUPPORTED_LOCALES),
        "freqOptions": [{"label": label, "value": label} for label in PERIOD_SPANS],
    }
    return jsonify(payload)


@app.post("/api/simulations")
def create_simulation():
    payload = request.get_json(silent=True) or {}
    plan, virtual_items = build_plan(payload)
    freq = str(_extract_payload_value(payload, "freq", "chartFreq", default="Y")).upper()
    if freq not in PERIOD_SPANS:
        return jsonify({"error": f"Unsupported period: {freq}"}), 400

    result = run_plan(plan, virtual_items)
    scores = score_simulation(result, plan.profile)
    profile = plan.profile
    chart_end = calculate_end_year(profile.birth_year, profile.spouse_birth_year, profile.life_expectancy)
    chart = build_chart_payload(
        result,
        show_debt=bool(payload.get("showDebt", True)),
        end_year=min(chart_end, result.end_year),
        freq=freq,
    )
    return jsonify(
        sanitize_json_compat(
            {
                "name": plan.name,
                "result": result.to_dict(),
                "scores": scores.to_dict(),
                "grade": score_grade(scores.overall),
                "chart": chart,
            }
        )
    )


@app.post("/api/simulations/export")
def export_simulation_endpoint():
    payload = request.get_json(silent=True) or {}
    locale = str(request.args.get("locale") or payload.get("locale") or "ko").lower()
    if locale not in SUPPORTED_LOCALES:
        return jsonify({"error": f"Unsupported locale: {locale}"}), 400
    plan, virtual_items = build_plan(payload)
    result = run_plan(plan, virtual_items)
    options = ExportOptions(
        plan_name=plan.name,
        exported_at=datetime.now().isoformat(timespec="seconds"),
        profile=plan.profile,
        scores=score_simulation(result, plan.profile),
    )
    return jsonify(export_simulation(result, options, locale))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=False, port=8000)
