"""Detection and scheduling stages of the transaction forecaster."""

from analytics.discretionary import detect_discretionary_patterns
from analytics.normalisation import clean_records, normalise_transactions
from analytics.recurring import RecurringDetection, analyse_recurring, detect_recurring_series
from analytics.scheduling import forecast_window, schedule_discretionary, schedule_recurring
from analytics.splits import merge_split_payments
from analytics.validation import merge_predictions, validate_forecast
from analytics.variable_income import detect_variable_income, project_variable_income

__all__ = [
    "normalise_transactions",
    "clean_records",
    "merge_split_payments",
    "RecurringDetection",
    "analyse_recurring",
    "detect_recurring_series",
    "detect_discretionary_patterns",
    "detect_variable_income",
    "forecast_window",
    "schedule_recurring",
    "schedule_discretionary",
    "project_variable_income",
    "merge_predictions",
    "validate_forecast",
]
