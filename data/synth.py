"""Synthetic Plaid-style transaction history for demos and tests.

Amounts follow the aggregator convention: positive values are money leaving
the account and negative values are deposits. Histories include the rows a
real feed carries alongside genuine spending (pending authorisations, card
payments, transfers between the user's own accounts and cross-account
duplicates) so the normaliser has something to filter.
"""

from __future__ import annotations

import calendar
import itertools
import json
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

T = TypeVar("T")

FIELDS: Tuple[str, ...] = (
    "transaction_id",
    "date",
    "amount",
    "name",
    "merchant_name",
    "category",
    "pending",
)


@dataclass(frozen=True)
class FeedMerchant:
    """How a merchant appears in an aggregator feed."""

    name: str
    merchant_name: str
    category: Tuple[str, ...]


PAYROLL = FeedMerchant("ACME CORP PAYROLL DIRECT DEP", "", ("Transfer", "Payroll"))
RENT = FeedMerchant("BILT RENT PAYMENT", "Bilt", ("Payment", "Rent"))

UTILITIES: Sequence[Tuple[FeedMerchant, float, int]] = (
    (FeedMerchant("DOMINION ENERGY BILL PAY", "Dominion Energy", ("Service", "Utilities")), 118.0, 12),
    (FeedMerchant("COMCAST XFINITY BILL", "Xfinity", ("Service", "Telecommunication Services")), 80.0, 20),
)

SUBSCRIPTIONS: Sequence[Tuple[FeedMerchant, float, int]] = (
    (FeedMerchant("NETFLIX.COM", "Netflix", ("Service", "Subscription")), 15.49, 3),
    (FeedMerchant("SPOTIFY USA", "Spotify", ("Service", "Subscription")), 11.99, 17),
    (FeedMerchant("GITHUB INC", "GitHub", ("Service", "Subscription")), 4.0, 26),
)

GROCERIES: Sequence[FeedMerchant] = (
    FeedMerchant("TRADER JOE S #552", "Trader Joe's", ("Shops", "Supermarkets and Groceries")),
    FeedMerchant("SAFEWAY #1204", "Safeway", ("Shops", "Supermarkets and Groceries")),
    FeedMerchant("WHOLE FOODS MARKET", "Whole Foods", ("Shops", "Supermarkets and Groceries")),
)

DINING: Sequence[FeedMerchant] = (
    FeedMerchant("STARBUCKS STORE 0921", "Starbucks", ("Food and Drink", "Restaurants", "Coffee Shop")),
    FeedMerchant("CHIPOTLE 1187", "Chipotle", ("Food and Drink", "Restaurants")),
    FeedMerchant("DOORDASH*PANERA", "DoorDash", ("Food and Drink", "Restaurants")),
)

TRANSPORT: Sequence[FeedMerchant] = (
    FeedMerchant("CHEVRON 0093821", "Chevron", ("Transportation", "Gas Stations")),
    FeedMerchant("LYFT *RIDE SUN 7PM", "Lyft", ("Transportation", "Car Service")),
)

ONE_OFFS: Sequence[Tuple[FeedMerchant, Tuple[float, float]]] = (
    (FeedMerchant("SOUTHWEST AIRLINES", "Southwest Airlines", ("Travel", "Airlines and Aviation Services")), (180.0, 420.0)),
    (FeedMerchant("USPS PO 0412", "USPS", ("Service", "Shipping and Freight")), (8.0, 35.0)),
    (FeedMerchant("AMAZON MKTPL*2K4", "Amazon", ("Shops", "Digital Purchase")), (12.0, 140.0)),
)

CARD_PAYMENT = FeedMerchant("APPLECARD GSBANK PAYMENT THANK YOU", "", ("Payment", "Credit Card"))
SAVINGS_TRANSFER = FeedMerchant("ONLINE TRANSFER TO SAVINGS 4821", "", ("Transfer", "Internal Account Transfer"))


def generate_plaid_history(
    end_date: date | datetime | str | None = None,
    months: int = 6,
    *,
    seed: Optional[int] = None,
    include_noise: bool = True,
) -> List[dict]:
    """Generate ``months`` of feed transactions ending on ``end_date``.

    Salary lands biweekly on Fridays, rent on the first weekday of each month,
    utilities and subscriptions on fixed days, and discretionary spending is
    drawn around realistic weekly rates. The result is sorted by date.
    """

    if months <= 0:
        raise ValueError("months must be a positive integer")

    rng = np.random.default_rng(seed)
    period_end = _normalize_date(end_date) if end_date is not None else date.today()
    period_start = _add_months(period_end, -months) + timedelta(days=1)

    records: List[dict] = []
    txn_counter = itertools.count(1)

    def append_record(txn_date: date, amount: float, merchant: FeedMerchant, *, pending: bool = False) -> None:
        if txn_date < period_start or txn_date > period_end:
            return
        records.append(
            {
                "transaction_id": f"txn_{next(txn_counter):06d}",
                "date": txn_date.isoformat(),
                "amount": round(amount, 2),
                "name": merchant.name,
                "merchant_name": merchant.merchant_name or None,
                "category": list(merchant.category),
                "pending": pending,
            }
        )

    # Biweekly salary on Fridays
    payday = _next_weekday(period_start, 4)
    while payday <= period_end:
        append_record(payday, -abs(rng.normal(2450, 25)), PAYROLL)
        payday += timedelta(days=14)

    month_anchor = period_start.replace(day=1)
    while month_anchor <= period_end:
        year, month = month_anchor.year, month_anchor.month

        append_record(_first_weekday(year, month), 1850.0, RENT)
        for merchant, base_amount, day in UTILITIES:
            append_record(_clamp_day(year, month, day), base_amount * (1 + rng.normal(0, 0.06)), merchant)
        for merchant, amount, day in SUBSCRIPTIONS:
            append_record(_clamp_day(year, month, day), amount, merchant)
        if include_noise:
            append_record(_clamp_day(year, month, 25), round(rng.uniform(400, 900), 2), CARD_PAYMENT)
            append_record(_clamp_day(year, month, 2), 250.0, SAVINGS_TRANSFER)

        month_anchor = _add_months(month_anchor, 1)

    all_days = [d.date() for d in pd.date_range(start=period_start, end=period_end, freq="D")]
    for txn_date in all_days:
        weekend = txn_date.weekday() >= 5
        if rng.random() < (0.35 if weekend else 0.22):
            append_record(txn_date, abs(rng.normal(68, 20)), _rng_choice(GROCERIES, rng))
        if rng.random() < (0.55 if weekend else 0.30):
            append_record(txn_date, abs(rng.normal(16, 7)) + 2, _rng_choice(DINING, rng))
        if rng.random() < 0.12:
            append_record(txn_date, abs(rng.normal(42, 12)) + 3, _rng_choice(TRANSPORT, rng))
        if rng.random() < 0.03:
            merchant, bounds = _rng_choice(ONE_OFFS, rng)
            append_record(txn_date, rng.uniform(*bounds), merchant)

    if include_noise:
        _inject_duplicates(records, rng)
        _inject_pending(records, rng, period_end)

    records.sort(key=lambda record: record["date"])
    return records


def write_history_json(
    path: str,
    *,
    seed: Optional[int] = None,
    **kwargs,
) -> List[dict]:
    """Generate a synthetic history and persist it to ``path`` as JSON.

    Additional keyword arguments are forwarded to
    :func:`generate_plaid_history`.
    """

    records = generate_plaid_history(seed=seed, **kwargs)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(records, handle, indent=2)
    return records


def _normalize_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value).date()
    raise TypeError(f"Unsupported date value: {value!r}")


def _add_months(anchor: date, months: int) -> date:
    month = anchor.month - 1 + months
    year = anchor.year + month // 12
    month = month % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _clamp_day(year: int, month: int, day: int) -> date:
    _, max_day = calendar.monthrange(year, month)
    return date(year, month, max(1, min(day, max_day)))


def _first_weekday(year: int, month: int) -> date:
    candidate = date(year, month, 1)
    while candidate.weekday() >= 5:  # 0=Mon, 5=Sat, 6=Sun
        candidate += timedelta(days=1)
    return candidate


def _next_weekday(start: date, weekday: int) -> date:
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _rng_choice(options: Sequence[T], rng: np.random.Generator) -> T:
    if not options:
        raise ValueError("Cannot choose from an empty sequence")
    return options[int(rng.integers(0, len(options)))]


def _inject_duplicates(records: List[dict], rng: np.random.Generator, fraction: float = 0.02) -> None:
    """Repeat a few rows as if they were also reported by a linked account."""

    if not records:
        return
    dup_count = max(1, int(len(records) * fraction))
    for idx in rng.choice(len(records), size=dup_count, replace=False):
        duplicate = dict(records[int(idx)])
        duplicate["transaction_id"] = f"{duplicate['transaction_id']}_linked"
        records.append(duplicate)


def _inject_pending(records: List[dict], rng: np.random.Generator, period_end: date, count: int = 3) -> None:
    for offset in range(count):
        merchant = _rng_choice(DINING, rng)
        records.append(
            {
                "transaction_id": f"pending_{offset:03d}",
                "date": (period_end - timedelta(days=offset)).isoformat(),
                "amount": round(float(rng.uniform(5, 40)), 2),
                "name": merchant.name,
                "merchant_name": merchant.merchant_name,
                "category": list(merchant.category),
                "pending": True,
            }
        )
