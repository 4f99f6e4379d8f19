"""Recurring payment detection over the clean transaction frame."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from analytics.categorisation import matches_any
from analytics.stats import coefficient_of_variation, recency_weighted_mean, recent_mode, remove_outliers
from config.patterns import EVENT_DRIVEN_CATEGORIES
from config.settings import Settings, get_settings
from core.models import Cadence, Confidence, RecurringSeries

__all__ = [
    "CADENCE_DAYS",
    "STALENESS_FACTOR",
    "RecurringDetection",
    "analyse_recurring",
    "detect_recurring_series",
    "resolve_cadence",
    "score_confidence",
]

logger = logging.getLogger(__name__)

# Inclusive median-gap band and the gap standard-deviation ceiling per cadence.
_CADENCE_BANDS: tuple[tuple[Cadence, float, float, float], ...] = (
    ("weekly", 4, 10, 4),
    ("biweekly", 11, 18, 6),
    ("monthly", 22, 40, 10),
    ("quarterly", 75, 110, 20),
)

CADENCE_DAYS: dict[str, int] = {
    "weekly": 7,
    "biweekly": 14,
    "monthly": 30,
    "quarterly": 91,
}

STALENESS_FACTOR = 2.5
_FIXED_AMOUNT_CV = 0.08
_TREND_TAIL = 3


@dataclass(frozen=True)
class RecurringDetection:
    """Active series plus merchants whose cadence stopped (presumed cancelled)."""

    series: list[RecurringSeries]
    cancelled_merchants: frozenset[str]

    @property
    def merchants(self) -> frozenset[str]:
        return frozenset(entry["merchant"] for entry in self.series)


def analyse_recurring(
    clean: pd.DataFrame,
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
) -> RecurringDetection:
    """Identify merchants that charge or pay on a regular cadence.

    Parameters
    ----------
    clean:
        Clean transaction frame with ``date``, ``merchant``, ``amount`` and
        ``category`` columns (internal sign convention).
    today:
        Analysis date used for freshness and staleness.
    settings:
        Pipeline settings; the never-recurring and subscription tables are
        read from here.

    Returns
    -------
    RecurringDetection
        Active series (one per merchant and direction, largest typical
        amount first) and the merchants whose only cadence went stale.
    """

    if clean.empty:
        return RecurringDetection(series=[], cancelled_merchants=frozenset())

    settings = settings or get_settings()
    today = pd.Timestamp(today).normalize()
    series: list[RecurringSeries] = []
    stale: set[str] = set()

    for merchant, merchant_df in clean.groupby("merchant", sort=False):
        merchant = str(merchant)
        if matches_any(merchant, settings.never_recurring_patterns):
            continue

        is_subscription = matches_any(merchant, settings.subscription_patterns)
        merchant_df = pd.DataFrame(merchant_df).sort_values("date", kind="mergesort")
        groups = (
            ("expense", merchant_df[merchant_df["amount"] < 0]),
            ("income", merchant_df[merchant_df["amount"] > 0]),
        )

        for flow_type, group_df in groups:
            if group_df.empty:
                continue
            entry = _fit_series(merchant, flow_type, group_df, is_subscription)
            if entry is None:
                continue

            days_since_last = int((today - pd.Timestamp(entry["last_occurrence"])).days)
            if days_since_last > STALENESS_FACTOR * CADENCE_DAYS[entry["cadence"]]:
                logger.debug("Dropping stale %s series for %s", entry["cadence"], merchant)
                stale.add(merchant)
                continue

            entry["confidence"] = score_confidence(entry["consistency"], days_since_last, entry["cadence"])
            series.append(entry)

    series.sort(key=lambda row: -abs(row["typical_amount"]))
    active = {entry["merchant"] for entry in series}
    logger.debug("Detected %d recurring series, %d stale merchants", len(series), len(stale - active))
    return RecurringDetection(series=series, cancelled_merchants=frozenset(stale - active))


def detect_recurring_series(
    clean: pd.DataFrame,
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
) -> list[RecurringSeries]:
    """Return only the active recurring series."""

    return analyse_recurring(clean, today, settings=settings).series


def resolve_cadence(gaps: Iterable[float]) -> tuple[Cadence, float, float] | None:
    """Return ``(cadence, median_gap, gap_std)`` when the gaps fit a cadence."""

    values = np.asarray(list(gaps), dtype=float)
    if values.size == 0:
        return None

    median_gap = float(np.median(values))
    if np.isnan(median_gap) or median_gap <= 0:
        return None

    gap_std = float(np.std(values))
    for cadence, low, high, ceiling in _CADENCE_BANDS:
        if low <= median_gap <= high:
            if gap_std > ceiling:
                return None
            return cadence, median_gap, gap_std
    return None


def score_confidence(consistency: float, days_since_last: int, cadence: str) -> Confidence:
    """Blend gap consistency (70%) with freshness (30%) into a coarse tag."""

    horizon = STALENESS_FACTOR * CADENCE_DAYS[cadence]
    freshness = max(0.0, 1.0 - max(days_since_last, 0) / horizon)
    composite = 0.7 * consistency + 0.3 * freshness
    if composite > 0.65:
        return "high"
    if composite > 0.4:
        return "medium"
    return "low"


def _minimum_occurrences(category: str, flow_type: str, is_subscription: bool) -> int:
    if is_subscription or category == "Subscriptions" or flow_type == "income":
        return 2
    if category in EVENT_DRIVEN_CATEGORIES:
        return 4
    return 3


def _fit_series(
    merchant: str,
    flow_type: str,
    group_df: pd.DataFrame,
    is_subscription: bool,
) -> RecurringSeries | None:
    dates = pd.DatetimeIndex(group_df["date"])
    category = str(group_df["category"].iloc[-1])
    if len(group_df) < _minimum_occurrences(category, flow_type, is_subscription):
        return None

    gaps = (dates[1:] - dates[:-1]).days.to_numpy(dtype=float)
    fit = resolve_cadence(gaps)
    if fit is None:
        logger.debug("No cadence for %s (%s)", merchant, flow_type)
        return None
    cadence, median_gap, gap_std = fit
    consistency = max(0.0, 1.0 - gap_std / median_gap)

    amounts = remove_outliers(group_df["amount"].abs().to_numpy(dtype=float))
    typical_amount = float(np.median(amounts))
    recent_amount = recency_weighted_mean(amounts)
    is_fixed = coefficient_of_variation(amounts) < _FIXED_AMOUNT_CV

    if cadence in ("weekly", "biweekly"):
        anchor_day = recent_mode(date.weekday() for date in dates)
    else:
        anchor_day = recent_mode(date.day for date in dates)

    return {
        "merchant": merchant,
        "category": category,
        "type": "expense" if flow_type == "expense" else "income",
        "cadence": cadence,
        "anchor_day": int(anchor_day),
        "typical_amount": round(typical_amount, 2),
        "recent_amount": round(recent_amount, 2),
        "amount_trend": round(_amount_trend(amounts), 4),
        "amount_is_fixed": bool(is_fixed),
        "is_subscription": bool(is_subscription),
        "last_occurrence": dates[-1].strftime("%Y-%m-%d"),
        "count": int(len(group_df)),
        "gap_days": round(median_gap, 1),
        "consistency": round(consistency, 3),
        "confidence": "low",
    }


def _amount_trend(amounts: np.ndarray) -> float:
    """Relative change from the earlier average to the last three amounts."""

    if amounts.size <= _TREND_TAIL:
        return 0.0
    earlier = float(np.mean(amounts[:-_TREND_TAIL]))
    latest = float(np.mean(amounts[-_TREND_TAIL:]))
    if earlier == 0:
        return 0.0
    return (latest - earlier) / earlier
