"""Category-level statistics for spending that does not recur on a cadence."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Collection

import numpy as np
import pandas as pd

from analytics.categorisation import matches_any
from analytics.stats import recency_weighted_mean
from config.settings import Settings, get_settings
from core.models import DiscretionaryPattern

__all__ = ["detect_discretionary_patterns"]

logger = logging.getLogger(__name__)

_MIN_OCCURRENCES = 3
_MAX_MERCHANTS = 8
_HOLIDAY_MONTHS = frozenset({11, 12})
_MIN_NON_HOLIDAY_POINTS = 10
_EXCLUDED_CATEGORIES = frozenset({"Transfer", "Income", "Travel"})


def detect_discretionary_patterns(
    clean: pd.DataFrame,
    today: pd.Timestamp,
    excluded_merchants: Collection[str] = (),
    *,
    settings: Settings | None = None,
) -> list[DiscretionaryPattern]:
    """Summarise non-recurring spend per category over the trailing window.

    Frequency and weekday weights leave out November and December when the
    window holds enough other data, so holiday shopping does not inflate
    the rest of the year. Amount statistics use every point in the window.
    """

    if clean.empty:
        return []

    settings = settings or get_settings()
    today = pd.Timestamp(today).normalize()
    history_start = pd.Timestamp(clean["date"].min()).normalize()
    window_start = max(today - pd.Timedelta(days=settings.discretionary_lookback_days - 1), history_start)

    excluded = set(excluded_merchants)
    spend = clean[
        (clean["amount"] < 0)
        & (~clean["category"].isin(_EXCLUDED_CATEGORIES))
        & (~clean["merchant"].isin(excluded))
        & (clean["date"] >= window_start)
        & (clean["date"] <= today)
    ]
    if spend.empty:
        return []

    never_recurring = spend["merchant"].map(lambda name: matches_any(str(name), settings.never_recurring_patterns))
    spend = spend[~never_recurring.astype(bool)]

    window_days = pd.date_range(window_start, today, freq="D")
    patterns: list[DiscretionaryPattern] = []

    for category, category_df in spend.groupby("category", sort=True):
        category_df = pd.DataFrame(category_df).sort_values("date", kind="mergesort")
        if len(category_df) < _MIN_OCCURRENCES:
            continue

        frequency_df, span_days = _frequency_sample(category_df, window_days)
        weeks = max(span_days / 7.0, 1.0)

        amounts = category_df["amount"].to_numpy(dtype=float)
        merchants = [name for name, _ in Counter(category_df["merchant"].astype(str)).most_common(_MAX_MERCHANTS)]

        patterns.append(
            {
                "category": str(category),
                "avg_weekly_count": round(len(frequency_df) / weeks, 3),
                "avg_amount": round(float(np.median(amounts)), 2),
                "recent_avg_amount": round(recency_weighted_mean(amounts), 2),
                "amount_std_dev": round(float(np.std(amounts)), 2),
                "typical_merchants": merchants,
                "day_of_week_weights": _weekday_weights(frequency_df),
                "occurrences": int(len(category_df)),
            }
        )

    patterns.sort(key=lambda row: -abs(row["avg_amount"] * row["avg_weekly_count"]))
    logger.debug("Detected %d discretionary patterns", len(patterns))
    return patterns


def _frequency_sample(category_df: pd.DataFrame, window_days: pd.DatetimeIndex) -> tuple[pd.DataFrame, int]:
    """Rows and day-span used for frequency, minus the holiday season when possible."""

    holiday_rows = category_df["date"].dt.month.isin(_HOLIDAY_MONTHS)
    non_holiday = category_df[~holiday_rows]
    if holiday_rows.any() and len(non_holiday) >= _MIN_NON_HOLIDAY_POINTS:
        span = int((~window_days.month.isin(_HOLIDAY_MONTHS)).sum())
        return non_holiday, max(span, 1)
    return category_df, max(len(window_days), 1)


def _weekday_weights(frame: pd.DataFrame) -> list[float]:
    counts = np.bincount(frame["date"].dt.weekday.to_numpy(dtype=int), minlength=7).astype(float)
    total = counts.sum()
    if total <= 0:
        return [1.0 / 7] * 7
    return [float(value) for value in counts / total]
