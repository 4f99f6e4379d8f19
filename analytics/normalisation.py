"""Convert raw feed transactions into the clean, internally-signed frame."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

import pandas as pd

from analytics.categorisation import category_tags, clean_merchant_name, infer_category, matches_any
from analytics.stats import cents_key
from config.patterns import INCOME_TRANSFER_PATTERNS, NOISE_MERCHANT_PATTERNS, PAYDOWN_PATTERNS
from core.models import CLEAN_COLUMNS, CleanTransaction

__all__ = [
    "normalise_transactions",
    "empty_clean_frame",
    "clean_records",
    "parse_amount",
    "parse_date",
]

logger = logging.getLogger(__name__)


def empty_clean_frame() -> pd.DataFrame:
    frame = pd.DataFrame({column: pd.Series(dtype=object) for column in CLEAN_COLUMNS})
    frame["date"] = pd.to_datetime(frame["date"])
    frame["amount"] = frame["amount"].astype(float)
    return frame


def normalise_transactions(raw_transactions: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Return clean transactions sorted by date.

    Feed amounts are positive for expenses; the returned ``amount`` column is
    negative for expenses and positive for income. Pending rows, noise
    merchants, balance paydowns and cross-account duplicates are removed.
    Records that cannot be parsed are skipped rather than raising.
    """

    rows: list[dict[str, Any]] = []
    seen: set[tuple[pd.Timestamp, str, int]] = set()
    skipped = 0

    for record in raw_transactions or []:
        row = _normalise_record(record)
        if row is None:
            skipped += 1
            continue

        key = (row["date"], row["merchant"], cents_key(row["amount"]))
        if key in seen:
            skipped += 1
            continue
        seen.add(key)
        rows.append(row)

    if not rows:
        logger.debug("No usable transactions after normalisation (%d skipped)", skipped)
        return empty_clean_frame()

    frame = pd.DataFrame(rows, columns=list(CLEAN_COLUMNS))
    frame = frame.sort_values("date", kind="mergesort").reset_index(drop=True)
    logger.debug("Normalised %d transactions (%d skipped)", len(frame), skipped)
    return frame


def clean_records(frame: pd.DataFrame) -> list[CleanTransaction]:
    """Export clean rows as JSON-ready records."""

    records: list[CleanTransaction] = []
    for row in frame.itertuples(index=False):
        records.append(
            {
                "date": pd.Timestamp(row.date).strftime("%Y-%m-%d"),
                "merchant": str(row.merchant),
                "amount": round(float(row.amount), 2),
                "category": str(row.category),
                "day_of_week": str(row.day_of_week),
            }
        )
    return records


def _normalise_record(record: Mapping[str, Any]) -> dict[str, Any] | None:
    if not isinstance(record, Mapping) or record.get("pending"):
        return None

    date = parse_date(record.get("date"))
    feed_amount = parse_amount(record.get("amount"))
    if date is None or feed_amount is None:
        return None

    merchant_name = str(record.get("merchant_name") or "").strip()
    name = str(record.get("name") or "").strip()
    raw_name = merchant_name or name or str(record.get("merchant") or "").strip()
    if matches_any(merchant_name, NOISE_MERCHANT_PATTERNS) or matches_any(name, NOISE_MERCHANT_PATTERNS):
        return None

    merchant = clean_merchant_name(raw_name)
    if matches_any(merchant, NOISE_MERCHANT_PATTERNS):
        return None

    amount = -feed_amount
    raw_category = record.get("category")
    tags = category_tags(raw_category)
    category = infer_category(raw_category, raw_name)

    if category == "Transfer":
        vocabulary = " ".join([*tags, merchant_name, name])
        if amount > 0 and matches_any(vocabulary, INCOME_TRANSFER_PATTERNS):
            category = "Income"
        elif amount < 0 and _is_feed_transfer(tags) and matches_any(vocabulary, PAYDOWN_PATTERNS):
            return None

    return {
        "date": date,
        "merchant": merchant,
        "amount": amount,
        "category": category,
        "day_of_week": date.day_name(),
    }


def _is_feed_transfer(tags: list[str]) -> bool:
    return any("transfer" in tag.lower() or "payment" in tag.lower() for tag in tags)


def parse_date(value: Any) -> pd.Timestamp | None:
    if value is None or value == "":
        return None
    try:
        parsed = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.normalize()


def parse_amount(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount == 0:
        return None
    return amount
