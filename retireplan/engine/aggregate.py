from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from ..data_model import SimulationResult

REQUIRED_COLUMNS = {"Scenario", "YearIndex", "Year"}

PERIOD_SPANS = {"Y": 1, "5Y": 5, "10Y": 10}

# Stacked asset series, in drawing order.
ASSET_SERIES = [
    ("FinancialAssets", "Financial assets", "#4e79a7"),
    ("RealEstate", "Real estate", "#f28e2b"),
    ("PensionAssets", "Pension", "#59a14f"),
    ("PhysicalAssets", "Physical assets", "#b07aa1"),
]
DEBT_SERIES = ("TotalDebts", "Debts", "#e15759")
NET_WORTH_SERIES = ("NetWorth", "Net worth", "#222222")


def snapshots_to_frame(result: SimulationResult, scenario: str = "base") -> pd.DataFrame:
    """One row per simulated year."""
    records = []
    for index, snapshot in enumerate(result.snapshots):
        records.append(
            {
                "Scenario": scenario,
                "YearIndex": index,
                "Year": snapshot.year,
                "Age": snapshot.age,
                "FinancialAssets": snapshot.financial_assets,
                "CashBalance": snapshot.cash_balance,
                "RealEstate": snapshot.real_estate_value,
                "PensionAssets": snapshot.pension_assets,
                "PhysicalAssets": snapshot.physical_asset_value,
                "TotalAssets": snapshot.total_assets,
                "TotalDebts": snapshot.total_debts,
                "NetWorth": snapshot.net_worth,
                "TotalIncome": snapshot.total_income,
                "TotalExpense": snapshot.total_expense,
                "NetCashflow": snapshot.net_cash_flow,
                "Shortfall": snapshot.unfunded_shortfall,
                "Events": ", ".join(snapshot.events),
            }
        )
    return pd.DataFrame(records)


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    missing = REQUIRED_COLUMNS.difference(df.columns)
    if missing:
        raise KeyError(f"Missing required columns: {', '.join(sorted(missing))}")
    return df.sort_values(["Scenario", "YearIndex"]).copy()


def aggregate_period(df: pd.DataFrame, freq: str = "Y") -> pd.DataFrame:
    """Reduce yearly rows to Y/5Y/10Y buckets, keeping the last year of each bucket."""
    if df.empty:
        return df

    freq = (freq or "Y").upper()
    if freq not in PERIOD_SPANS:
        raise ValueError(f"Unsupported period: {freq}")
    df = _prepare(df)
    span = PERIOD_SPANS[freq]

    df["PeriodValue"] = df["YearIndex"] // span
    df["Period"] = df["Year"].astype(str)
    if span == 1:
        return df
    return df.groupby(["Scenario", "PeriodValue"], as_index=False).last()


def calculate_end_year(birth_year: int, spouse_birth_year: int | None = None, life_expectancy: int = 100) -> int:
    """Last chart year: the younger partner reaching ``life_expectancy``."""
    return max(birth_year, spouse_birth_year or birth_year) + life_expectancy


def build_chart_payload(
    result: SimulationResult,
    show_debt: bool = True,
    end_year: int | None = None,
    freq: str = "Y",
) -> Dict[str, Any]:
    """Labels and stacked datasets for the net-worth chart, cut at ``end_year``."""
    df = snapshots_to_frame(result)
    if end_year is not None:
        df = df[df["Year"] <= end_year]
    df = aggregate_period(df, freq)

    datasets: List[Dict[str, Any]] = []
    for column, label, color in ASSET_SERIES:
        datasets.append(
            {"key": column, "label": label, "color": color, "stack": "balance", "data": df[column].tolist()}
        )
    if show_debt:
        column, label, color = DEBT_SERIES
        datasets.append(
            {"key": column, "label": label, "color": color, "stack": "balance", "data": (-df[column]).tolist()}
        )
    column, label, color = NET_WORTH_SERIES
    datasets.append({"key": column, "label": label, "color": color, "type": "line", "data": df[column].tolist()})

    return {
        "labels": df["Period"].tolist() if "Period" in df.columns else [],
        "ages": df["Age"].tolist(),
        "datasets": datasets,
        "retirementYear": result.retirement_year,
        "summary": asdict(result.summary),
    }
