"""Project detected patterns forward into dated predicted transactions."""

from __future__ import annotations

import calendar
import logging
from typing import Iterable

import pandas as pd

from analytics.recurring import CADENCE_DAYS, STALENESS_FACTOR
from analytics.sampling import LinearCongruentialGenerator, seed_for_date
from analytics.stats import round_half_up
from config.settings import Settings, get_settings
from core.models import Confidence, DiscretionaryPattern, PredictedTransaction, RecurringSeries

__all__ = [
    "MAX_TREND_ADJUSTMENT",
    "forecast_window",
    "make_prediction",
    "occurrence_dates",
    "schedule_recurring",
    "schedule_discretionary",
    "trend_multiplier",
]

logger = logging.getLogger(__name__)

MAX_TREND_ADJUSTMENT = 0.30
_POOL_RESOLUTION = 20
_MONTH_STEPS = {"monthly": 1, "quarterly": 3}


def forecast_window(today: pd.Timestamp, settings: Settings) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Return ``(tomorrow, last allowed day)`` for a forecast made on ``today``."""

    today = pd.Timestamp(today).normalize()
    return today + pd.Timedelta(days=1), today + pd.Timedelta(days=settings.window_end_offset)


def make_prediction(
    day: pd.Timestamp,
    merchant: str,
    amount: float,
    category: str,
    confidence: Confidence,
) -> PredictedTransaction:
    return {
        "date": day.strftime("%Y-%m-%d"),
        "day_of_week": day.day_name(),
        "merchant": merchant,
        "amount": round(amount, 2),
        "category": category,
        "type": "income" if amount > 0 else "expense",
        "confidence_score": confidence,
    }


def schedule_recurring(
    series: Iterable[RecurringSeries],
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
) -> list[PredictedTransaction]:
    """Place every occurrence of each recurring series inside the window.

    ACH-style debits and credits post on the nearest business day
    (Saturday moves back to Friday, Sunday forward to Monday); subscription
    merchants bill cards on the exact date.
    """

    settings = settings or get_settings()
    window_start, window_end = forecast_window(today, settings)
    predictions: list[PredictedTransaction] = []

    for entry in series:
        sign = 1.0 if entry["type"] == "income" else -1.0
        dates = occurrence_dates(entry, window_start, window_end)
        for position, day in enumerate(dates, start=1):
            if entry["amount_is_fixed"]:
                magnitude = float(entry["typical_amount"])
            else:
                magnitude = float(entry["recent_amount"]) * trend_multiplier(entry, position)
            if round(magnitude, 2) == 0:
                continue

            day = _place_in_window(day, window_start, window_end, business_days=not entry["is_subscription"])
            predictions.append(
                make_prediction(day, entry["merchant"], sign * magnitude, entry["category"], entry["confidence"])
            )

    logger.debug("Scheduled %d recurring occurrences", len(predictions))
    return predictions


def occurrence_dates(
    entry: RecurringSeries,
    window_start: pd.Timestamp,
    window_end: pd.Timestamp,
) -> list[pd.Timestamp]:
    """Unshifted occurrence dates of ``entry`` that fall inside the window.

    Iterates enough periods past ``last_occurrence`` to cover a series that
    is just inside the staleness threshold.
    """

    cadence = entry["cadence"]
    period = CADENCE_DAYS[cadence]
    last = pd.Timestamp(entry["last_occurrence"]).normalize()
    horizon_days = STALENESS_FACTOR * period + (window_end - window_start).days + 1
    max_steps = int(horizon_days / period) + 2

    dates: list[pd.Timestamp] = []
    for step in range(1, max_steps + 1):
        if cadence in _MONTH_STEPS:
            candidate = _anchored_month(last, step * _MONTH_STEPS[cadence], entry["anchor_day"])
            if (candidate - last).days < period // 2:
                continue
        else:
            candidate = _snap_to_weekday(last + pd.Timedelta(days=step * period), entry["anchor_day"])

        if candidate > window_end:
            break
        if candidate >= window_start:
            dates.append(candidate)
    return dates


def trend_multiplier(entry: RecurringSeries, position: int) -> float:
    """Compounded trend factor for the ``position``-th projected occurrence.

    The observed trend is spread over the months of history it was measured
    on, then compounded per month ahead. The total stays within
    ``MAX_TREND_ADJUSTMENT`` of the base amount.
    """

    trend = float(entry.get("amount_trend", 0.0) or 0.0)
    if trend == 0:
        return 1.0

    period = CADENCE_DAYS[entry["cadence"]]
    history_months = max((entry["count"] - 1) * period / 30.0, 1.0)
    monthly_rate = max(trend / history_months, -0.99)
    months_ahead = position * period / 30.0
    factor = (1.0 + monthly_rate) ** months_ahead
    return min(max(factor, 1.0 - MAX_TREND_ADJUSTMENT), 1.0 + MAX_TREND_ADJUSTMENT)


def schedule_discretionary(
    patterns: Iterable[DiscretionaryPattern],
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
    rng: LinearCongruentialGenerator | None = None,
) -> list[PredictedTransaction]:
    """Sample dated spend for each category pattern.

    The generator is seeded from ``today`` so a forecast is stable within a
    day. Days are drawn from a pool in which each forecast day appears in
    proportion to its weekday weight; merchants rotate through the
    category's ranked list.
    """

    settings = settings or get_settings()
    rng = rng or LinearCongruentialGenerator(seed_for_date(today))
    window_start, _ = forecast_window(today, settings)
    days = [window_start + pd.Timedelta(days=offset) for offset in range(settings.forecast_days)]
    predictions: list[PredictedTransaction] = []

    for pattern in patterns:
        expected = int(round_half_up(pattern["avg_weekly_count"] * settings.forecast_days / 7))
        expected = min(expected, len(days))
        if expected <= 0:
            continue

        weights = pattern["day_of_week_weights"]
        pool: list[int] = []
        for index, day in enumerate(days):
            pool.extend([index] * int(round_half_up(weights[day.weekday()] * _POOL_RESOLUTION)))
        if not pool:
            continue

        chosen: set[int] = set()
        attempts = 0
        budget = expected * 10 + 20
        while len(chosen) < expected and attempts < budget:
            chosen.add(pool[rng.choice_index(len(pool))])
            attempts += 1

        merchants = pattern["typical_merchants"] or [pattern["category"]]
        base = float(pattern["recent_avg_amount"])
        spread = float(pattern["amount_std_dev"]) / 2
        confidence: Confidence = "medium" if pattern["avg_weekly_count"] >= 1 else "low"

        for order, index in enumerate(sorted(chosen)):
            amount = base + rng.approx_normal() * spread
            amount = min(amount, -0.01) if base < 0 else max(amount, 0.01)
            predictions.append(
                make_prediction(days[index], merchants[order % len(merchants)], amount, pattern["category"], confidence)
            )

    logger.debug("Sampled %d discretionary occurrences", len(predictions))
    return predictions


def _anchored_month(last: pd.Timestamp, months_ahead: int, anchor_day: int) -> pd.Timestamp:
    month_index = last.year * 12 + (last.month - 1) + months_ahead
    year, month = divmod(month_index, 12)
    month += 1
    day = min(max(int(anchor_day), 1), calendar.monthrange(year, month)[1])
    return pd.Timestamp(year=year, month=month, day=day)


def _snap_to_weekday(day: pd.Timestamp, weekday: int) -> pd.Timestamp:
    delta = (int(weekday) - day.weekday()) % 7
    if delta > 3:
        delta -= 7
    return day + pd.Timedelta(days=delta)


def _place_in_window(
    day: pd.Timestamp,
    window_start: pd.Timestamp,
    window_end: pd.Timestamp,
    *,
    business_days: bool,
) -> pd.Timestamp:
    """Clamp ``day`` to the window, keeping business-day postings off weekends.

    A weekend day pinned to the window start moves forward to Monday, and one
    pinned to the window end moves back to Friday.
    """

    if business_days:
        day = _shift_off_weekend(day)
    day = min(max(day, window_start), window_end)
    if not business_days or day.weekday() < 5:
        return day

    shifted = _shift_off_weekend(day)
    if shifted < window_start:
        shifted = day + pd.Timedelta(days=7 - day.weekday())
    elif shifted > window_end:
        shifted = day - pd.Timedelta(days=day.weekday() - 4)
    return shifted if window_start <= shifted <= window_end else day


def _shift_off_weekend(day: pd.Timestamp) -> pd.Timestamp:
    if day.weekday() == 5:
        return day - pd.Timedelta(days=1)
    if day.weekday() == 6:
        return day + pd.Timedelta(days=1)
    return day
