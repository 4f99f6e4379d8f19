"""Core logic for assembling forecasts and financial profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from analytics.discretionary import detect_discretionary_patterns
from analytics.normalisation import clean_records, normalise_transactions
from analytics.recurring import analyse_recurring
from analytics.scheduling import forecast_window, schedule_discretionary, schedule_recurring
from analytics.splits import merge_split_payments
from analytics.validation import merge_predictions
from analytics.variable_income import detect_variable_income, project_variable_income
from config.settings import Settings, get_settings
from core.models import (
    DiscretionaryPattern,
    FinancialProfile,
    Forecast,
    MonthlyMedians,
    RecurringSeries,
    VariableIncomePattern,
)

__all__ = [
    "PatternAnalysis",
    "analyse_history",
    "build_financial_profile",
    "compute_monthly_medians",
    "generate_forecast",
    "resolve_today",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternAnalysis:
    """Everything detected from one transaction history on one analysis day."""

    today: pd.Timestamp
    clean: pd.DataFrame
    recurring_series: list[RecurringSeries]
    discretionary_patterns: list[DiscretionaryPattern]
    variable_income: VariableIncomePattern | None


def resolve_today(today: Optional[date | pd.Timestamp]) -> pd.Timestamp:
    """Return the analysis day, defaulting to the local calendar date."""

    if today is None:
        return pd.Timestamp(date.today())
    return pd.Timestamp(today).normalize()


def analyse_history(
    transactions: Iterable[Mapping[str, Any]],
    today: Optional[date | pd.Timestamp] = None,
    *,
    settings: Settings | None = None,
) -> PatternAnalysis:
    """Run the detection stages (normalise, merge splits, detect patterns)."""

    settings = settings or get_settings()
    today = resolve_today(today)

    clean = normalise_transactions(transactions)
    merged = merge_split_payments(clean, settings=settings)
    detection = analyse_recurring(merged, today, settings=settings)
    claimed = detection.merchants | detection.cancelled_merchants

    discretionary = detect_discretionary_patterns(merged, today, claimed, settings=settings)
    variable_income = detect_variable_income(merged, today, claimed, settings=settings)

    return PatternAnalysis(
        today=today,
        clean=merged,
        recurring_series=detection.series,
        discretionary_patterns=discretionary,
        variable_income=variable_income,
    )


def generate_forecast(
    transactions: Iterable[Mapping[str, Any]],
    today: Optional[date | pd.Timestamp] = None,
    *,
    settings: Settings | None = None,
) -> Forecast:
    """Produce the 90-day forecast for a raw transaction history.

    The result depends only on ``transactions`` and the analysis day, so two
    calls on the same day with the same history return identical forecasts.
    An empty or fully filtered history yields an empty forecast.
    """

    settings = settings or get_settings()
    analysis = analyse_history(transactions, today, settings=settings)

    recurring = schedule_recurring(analysis.recurring_series, analysis.today, settings=settings)
    discretionary = schedule_discretionary(analysis.discretionary_patterns, analysis.today, settings=settings)
    variable = project_variable_income(analysis.variable_income, analysis.today, settings=settings)

    forecast = merge_predictions(recurring, discretionary, variable, today=analysis.today, settings=settings)
    logger.info(
        "Forecast for %s: %d predictions (%d recurring series, %d discretionary patterns, variable income %s)",
        analysis.today.strftime("%Y-%m-%d"),
        len(forecast["predicted_transactions"]),
        len(analysis.recurring_series),
        len(analysis.discretionary_patterns),
        "yes" if analysis.variable_income else "no",
    )
    return forecast


def build_financial_profile(
    transactions: Iterable[Mapping[str, Any]],
    today: Optional[date | pd.Timestamp] = None,
    *,
    settings: Settings | None = None,
) -> FinancialProfile:
    """Summarise detected patterns for text-generation collaborators."""

    settings = settings or get_settings()
    analysis = analyse_history(transactions, today, settings=settings)
    window_start, window_end = forecast_window(analysis.today, settings)
    clean = analysis.clean

    if clean.empty:
        history_span = 0
        recent = []
    else:
        history_span = int((clean["date"].max() - clean["date"].min()).days)
        limit = settings.recent_transactions_limit
        recent = clean_records(clean.tail(limit)) if limit else []

    return {
        "analysis_date": analysis.today.strftime("%Y-%m-%d"),
        "forecast_start": window_start.strftime("%Y-%m-%d"),
        "forecast_end": window_end.strftime("%Y-%m-%d"),
        "history_span_days": history_span,
        "total_transactions_analyzed": int(len(clean)),
        "recurring_series": analysis.recurring_series,
        "discretionary_patterns": analysis.discretionary_patterns,
        "variable_income": analysis.variable_income,
        "monthly_medians": compute_monthly_medians(clean),
        "recent_transactions": recent,
    }


def compute_monthly_medians(clean: pd.DataFrame) -> MonthlyMedians:
    """Median monthly income and expenses, ignoring transfers and partial edge months."""

    empty: MonthlyMedians = {"total_income": 0.0, "total_expenses": 0.0, "net_cash_flow": 0.0}
    flows = clean[clean["category"] != "Transfer"] if not clean.empty else clean
    if flows.empty:
        return empty

    months = flows["date"].dt.to_period("M")
    income = flows["amount"].clip(lower=0).groupby(months).sum()
    expenses = (-flows["amount"]).clip(lower=0).groupby(months).sum()
    if len(income) > 2:
        income = income.iloc[1:-1]
        expenses = expenses.iloc[1:-1]

    total_income = round(float(np.median(income.to_numpy(dtype=float))), 2)
    total_expenses = round(float(np.median(expenses.to_numpy(dtype=float))), 2)
    return {
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_cash_flow": round(total_income - total_expenses, 2),
    }
