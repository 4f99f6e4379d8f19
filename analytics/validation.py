"""Merge projected transactions and enforce forecast invariants."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import pandas as pd

from analytics.normalisation import parse_amount, parse_date
from analytics.scheduling import forecast_window, make_prediction
from analytics.stats import cents_key
from config.settings import Settings, get_settings
from core.models import Confidence, Forecast, PredictedTransaction

__all__ = [
    "merge_predictions",
    "validate_forecast",
]

logger = logging.getLogger(__name__)


def merge_predictions(
    *groups: Iterable[Mapping[str, Any]],
    today: pd.Timestamp,
    settings: Settings | None = None,
) -> Forecast:
    """Concatenate scheduler outputs and validate the combined forecast."""

    settings = settings or get_settings()
    combined: list[Mapping[str, Any]] = []
    for group in groups:
        combined.extend(group)
    return validate_forecast(
        {"forecast_period_days": settings.forecast_days, "predicted_transactions": combined},
        today,
        settings=settings,
    )


def validate_forecast(
    raw: Mapping[str, Any] | None,
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
) -> Forecast:
    """Sanitise a forecast from any source to the output invariants.

    Entries without a usable date, merchant or non-zero amount are dropped.
    Dates are clamped into ``[tomorrow, today + 91]``, ``day_of_week`` and
    ``type`` are recomputed, unknown confidence becomes ``"medium"``, and
    duplicates on ``(date, merchant, cents)`` are removed after sorting.
    """

    settings = settings or get_settings()
    window_start, window_end = forecast_window(today, settings)
    raw = raw if isinstance(raw, Mapping) else {}
    entries = raw.get("predicted_transactions") or []
    if not isinstance(entries, (list, tuple)):
        entries = []

    cleaned: list[PredictedTransaction] = []
    for entry in entries:
        prediction = _coerce_entry(entry, window_start, window_end)
        if prediction is not None:
            cleaned.append(prediction)

    cleaned.sort(key=lambda row: row["date"])

    seen: set[tuple[str, str, int]] = set()
    deduped: list[PredictedTransaction] = []
    for prediction in cleaned:
        key = (prediction["date"], prediction["merchant"], cents_key(prediction["amount"]))
        if key in seen:
            continue
        seen.add(key)
        deduped.append(prediction)

    dropped = len(entries) - len(deduped)
    if dropped:
        logger.debug("Validator dropped %d of %d predicted transactions", dropped, len(entries))

    period = raw.get("forecast_period_days")
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        period = settings.forecast_days

    return {"forecast_period_days": period, "predicted_transactions": deduped}


def _coerce_entry(
    entry: Any,
    window_start: pd.Timestamp,
    window_end: pd.Timestamp,
) -> PredictedTransaction | None:
    if not isinstance(entry, Mapping):
        return None

    merchant = str(entry.get("merchant") or "").strip()
    day = parse_date(entry.get("date"))
    amount = parse_amount(entry.get("amount"))
    if not merchant or day is None or amount is None:
        return None

    day = min(max(day, window_start), window_end)
    category = str(entry.get("category") or "Other")
    confidence = _as_confidence(entry.get("confidence_score"))
    prediction = make_prediction(day, merchant, amount, category, confidence)
    if prediction["amount"] == 0:
        return None
    return prediction


def _as_confidence(value: Any) -> Confidence:
    """Known confidence tag, defaulting to ``"medium"``."""

    if value == "high":
        return "high"
    if value == "low":
        return "low"
    return "medium"

