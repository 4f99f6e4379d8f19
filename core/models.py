"""Shared data model definitions for the forecasting pipeline."""

from __future__ import annotations

from typing import Literal, TypedDict

Cadence = Literal["weekly", "biweekly", "monthly", "quarterly"]
Confidence = Literal["high", "medium", "low"]
FlowType = Literal["expense", "income"]

DAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

CLEAN_COLUMNS: tuple[str, ...] = ("date", "merchant", "amount", "category", "day_of_week")


class CleanTransaction(TypedDict):
    date: str
    merchant: str
    amount: float
    category: str
    day_of_week: str


class RecurringSeries(TypedDict):
    """A merchant and direction that repeats on a detectable cadence.

    ``anchor_day`` is a weekday index (0 = Monday) for weekly and biweekly
    series and a day of month for monthly and quarterly ones.
    """

    merchant: str
    category: str
    type: FlowType
    cadence: Cadence
    anchor_day: int
    typical_amount: float
    recent_amount: float
    amount_trend: float
    amount_is_fixed: bool
    is_subscription: bool
    last_occurrence: str
    count: int
    gap_days: float
    consistency: float
    confidence: Confidence


class DiscretionaryPattern(TypedDict):
    """Category-level spending statistics used for sampling."""

    category: str
    avg_weekly_count: float
    avg_amount: float
    recent_avg_amount: float
    amount_std_dev: float
    typical_merchants: list[str]
    day_of_week_weights: list[float]
    occurrences: int


class VariableIncomePattern(TypedDict):
    merchant: str
    category: str
    median_amount: float
    weekly_rate: float
    occurrences: int
    last_occurrence: str


class PredictedTransaction(TypedDict):
    date: str
    day_of_week: str
    merchant: str
    amount: float
    category: str
    type: FlowType
    confidence_score: Confidence


class Forecast(TypedDict):
    forecast_period_days: int
    predicted_transactions: list[PredictedTransaction]


class MonthlyMedians(TypedDict):
    total_income: float
    total_expenses: float
    net_cash_flow: float


class FinancialProfile(TypedDict):
    analysis_date: str
    forecast_start: str
    forecast_end: str
    history_span_days: int
    total_transactions_analyzed: int
    recurring_series: list[RecurringSeries]
    discretionary_patterns: list[DiscretionaryPattern]
    variable_income: VariableIncomePattern | None
    monthly_medians: MonthlyMedians
    recent_transactions: list[CleanTransaction]


__all__ = [
    "Cadence",
    "Confidence",
    "FlowType",
    "DAY_NAMES",
    "CLEAN_COLUMNS",
    "CleanTransaction",
    "RecurringSeries",
    "DiscretionaryPattern",
    "VariableIncomePattern",
    "PredictedTransaction",
    "Forecast",
    "MonthlyMedians",
    "FinancialProfile",
]
