"""Collapse split payments into single logical transactions."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from analytics.categorisation import matches_any
from analytics.normalisation import empty_clean_frame
from analytics.stats import cents_key
from config.settings import Settings, get_settings
from core.models import CLEAN_COLUMNS

__all__ = ["merge_split_payments"]

logger = logging.getLogger(__name__)


def merge_split_payments(clean: pd.DataFrame, *, settings: Settings | None = None) -> pd.DataFrame:
    """Merge same-merchant charges that look like one payment split in parts.

    A charge joins the open cluster when it lands within
    ``split_max_gap_days`` of the previous member, keeps the cluster span
    under ``split_max_span_days``, shares its sign, and does not repeat an
    amount already in the cluster. Repeated amounts usually mean two real
    charges (two seats of the same plan), except for large non-subscription
    charges such as rent split evenly across two cards. Income is never
    merged, and a credit landing between two parts (a refund) passes
    through without closing the cluster. Merged rows keep the earliest date
    and sum the amounts.
    """

    if clean.empty:
        return empty_clean_frame()

    settings = settings or get_settings()
    merged_rows: list[dict[str, Any]] = []
    merges = 0

    for merchant, group_df in clean.groupby("merchant", sort=False):
        group_df = pd.DataFrame(group_df).sort_values("date", kind="mergesort")
        subscription = matches_any(str(merchant), settings.subscription_patterns)
        cluster: list[dict[str, Any]] = []

        for row in group_df.to_dict(orient="records"):
            if float(row["amount"]) > 0:
                merged_rows.append(dict(row))
                continue
            if cluster and _joins_cluster(cluster, row, subscription, settings):
                cluster.append(row)
                continue
            if cluster:
                merged_rows.append(_collapse(cluster))
                merges += len(cluster) - 1
            cluster = [row]

        if cluster:
            merged_rows.append(_collapse(cluster))
            merges += len(cluster) - 1

    if merges:
        logger.debug("Merged %d split payment rows", merges)

    frame = pd.DataFrame(merged_rows, columns=list(CLEAN_COLUMNS))
    return frame.sort_values("date", kind="mergesort").reset_index(drop=True)


def _joins_cluster(
    cluster: list[dict[str, Any]],
    row: dict[str, Any],
    subscription: bool,
    settings: Settings,
) -> bool:
    amount = float(row["amount"])
    gap = (row["date"] - cluster[-1]["date"]).days
    span = (row["date"] - cluster[0]["date"]).days
    if gap > settings.split_max_gap_days or span > settings.split_max_span_days:
        return False

    # within a cent counts as the same amount
    repeats = any(abs(cents_key(float(member["amount"])) - cents_key(amount)) <= 1 for member in cluster)
    if repeats:
        return not subscription and abs(amount) >= settings.split_identical_min_amount
    return True


def _collapse(cluster: list[dict[str, Any]]) -> dict[str, Any]:
    first = cluster[0]
    if len(cluster) == 1:
        return dict(first)
    total = sum(float(member["amount"]) for member in cluster)
    return {
        "date": first["date"],
        "merchant": first["merchant"],
        "amount": round(total, 2),
        "category": first["category"],
        "day_of_week": pd.Timestamp(first["date"]).day_name(),
    }
