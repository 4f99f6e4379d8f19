"""Detection and projection of irregular income (gig, hourly, freelance)."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Collection

import numpy as np
import pandas as pd

from analytics.sampling import LinearCongruentialGenerator, seed_for_date
from analytics.scheduling import forecast_window, make_prediction
from analytics.stats import round_half_up
from config.settings import Settings, get_settings
from core.models import PredictedTransaction, VariableIncomePattern

__all__ = [
    "detect_variable_income",
    "project_variable_income",
]

logger = logging.getLogger(__name__)

_MIN_DEPOSITS = 3
_DATE_JITTER_DAYS = 2
_AMOUNT_JITTER = 0.25
_SEED_OFFSET = 7919


def detect_variable_income(
    clean: pd.DataFrame,
    today: pd.Timestamp,
    excluded_merchants: Collection[str] = (),
    *,
    settings: Settings | None = None,
) -> VariableIncomePattern | None:
    """Return the irregular-income pattern for the trailing window, if any.

    Deposits already explained by a recurring series and transfers between
    accounts are ignored. The most frequent payer labels the pattern.
    """

    if clean.empty:
        return None

    settings = settings or get_settings()
    today = pd.Timestamp(today).normalize()
    lookback = settings.variable_income_lookback_days
    window_start = today - pd.Timedelta(days=lookback)

    deposits = clean[
        (clean["amount"] > 0)
        & (clean["category"] != "Transfer")
        & (~clean["merchant"].isin(set(excluded_merchants)))
        & (clean["date"] > window_start)
        & (clean["date"] <= today)
    ]
    if len(deposits) < _MIN_DEPOSITS:
        return None

    median_amount = float(np.median(deposits["amount"].to_numpy(dtype=float)))
    weekly_rate = len(deposits) / (lookback / 7.0)
    if median_amount < max(settings.variable_income_min_amount, 0.01) or weekly_rate <= 0:
        logger.debug("Variable income rejected: median %.2f, rate %.2f", median_amount, weekly_rate)
        return None

    payer = Counter(deposits["merchant"].astype(str)).most_common(1)[0][0]
    return {
        "merchant": payer,
        "category": "Income",
        "median_amount": round(median_amount, 2),
        "weekly_rate": round(weekly_rate, 3),
        "occurrences": int(len(deposits)),
        "last_occurrence": pd.Timestamp(deposits["date"].max()).strftime("%Y-%m-%d"),
    }


def project_variable_income(
    pattern: VariableIncomePattern | None,
    today: pd.Timestamp,
    *,
    settings: Settings | None = None,
    rng: LinearCongruentialGenerator | None = None,
) -> list[PredictedTransaction]:
    """Spread expected deposits evenly over the window with small jitter."""

    if pattern is None:
        return []

    settings = settings or get_settings()
    rng = rng or LinearCongruentialGenerator(seed_for_date(today) + _SEED_OFFSET)
    window_start, _ = forecast_window(today, settings)
    days = settings.forecast_days

    expected = int(round_half_up(pattern["weekly_rate"] * days / 7))
    if expected <= 0:
        return []

    spacing = days / expected
    median_amount = float(pattern["median_amount"])
    predictions: list[PredictedTransaction] = []
    for index in range(expected):
        offset = int((index + 0.5) * spacing) + rng.randint(-_DATE_JITTER_DAYS, _DATE_JITTER_DAYS)
        offset = min(max(offset, 0), days - 1)
        amount = median_amount * (1 + (rng.random() * 2 - 1) * _AMOUNT_JITTER)
        predictions.append(
            make_prediction(
                window_start + pd.Timedelta(days=offset),
                pattern["merchant"],
                amount,
                pattern["category"],
                "low",
            )
        )
    return predictions
