"""Merchant-name cleanup and keyword category inference."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Sequence

from config.patterns import (
    CATEGORIES,
    CATEGORY_KEYWORDS,
    FEED_CATEGORY_HINTS,
    MERCHANT_NOISE_PATTERNS,
    MERCHANT_PATTERNS,
)

__all__ = [
    "category_tags",
    "clean_merchant_name",
    "compile_patterns",
    "infer_category",
    "matches_any",
]

_DEBIT_DELIMITER = re.compile(r"[&@#]{2,}\s*(.+)$")
_TRUNCATED_SUFFIX = re.compile(r",\s*[A-Z]{1,3}$", re.IGNORECASE)
_MERCHANT_TABLE = tuple((re.compile(pattern, re.IGNORECASE), name) for pattern, name in MERCHANT_PATTERNS)
_NOISE_TABLE = tuple(re.compile(pattern, re.IGNORECASE) for pattern in MERCHANT_NOISE_PATTERNS)


@lru_cache(maxsize=64)
def compile_patterns(patterns: tuple[str, ...]) -> tuple[re.Pattern[str], ...]:
    """Compile a pattern table once; tables are tuples so they can be cached."""

    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


def matches_any(text: str, patterns: Sequence[str]) -> bool:
    """Return ``True`` when ``text`` matches any pattern in the table."""

    if not text:
        return False
    return any(regex.search(text) for regex in compile_patterns(tuple(patterns)))


@lru_cache(maxsize=2048)
def clean_merchant_name(raw_name: str) -> str:
    """Turn a raw bank-feed name into a readable merchant label.

    Known merchants resolve through the mapping table; anything else has
    channel prefixes, store numbers and reference numbers stripped and is
    title-cased. Card purchases that embed the merchant after a ``&@#``
    style delimiter use the embedded part.
    """

    if not raw_name or not raw_name.strip():
        return "Unknown"

    name = raw_name.strip()
    delimited = _DEBIT_DELIMITER.search(name)
    if delimited and len(delimited.group(1).strip()) > 2:
        name = _TRUNCATED_SUFFIX.sub("", delimited.group(1).strip()).strip()

    for regex, label in _MERCHANT_TABLE:
        if regex.search(name) or regex.search(raw_name):
            return label

    cleaned = name
    for regex in _NOISE_TABLE:
        cleaned = regex.sub(" ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if not cleaned:
        return raw_name.strip()
    return " ".join(word[:1].upper() + word[1:] for word in cleaned.lower().split(" "))


def category_tags(raw_category: object) -> list[str]:
    """Return feed category tags as a list of non-empty strings."""

    if raw_category is None:
        return []
    if isinstance(raw_category, str):
        values: Iterable[object] = [raw_category]
    elif isinstance(raw_category, (list, tuple)):
        values = raw_category
    else:
        return []
    return [str(value).strip() for value in values if value is not None and str(value).strip()]


def infer_category(raw_category: object, name: str) -> str:
    """Map feed category tags and the merchant name to an internal category.

    Feed tags win when they carry a usable label; otherwise keyword rules
    over the lower-cased name are applied in order. ``"Other"`` is the
    fallback.
    """

    tags = category_tags(raw_category)
    primary = tags[0] if tags else ""
    if primary and primary.lower() not in {"uncategorized", "null", "none"}:
        lowered = primary.lower()
        for fragment, category in FEED_CATEGORY_HINTS:
            if fragment in lowered:
                return category
        joined = " ".join(tags).lower()
        if "payment" in joined and "rent" in joined:
            return "Housing"
        for category in CATEGORIES:
            if category.lower() == lowered:
                return category

    lowered_name = (name or "").lower()
    if not lowered_name:
        return "Other"

    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered_name for keyword in keywords):
            return category
    return "Other"
