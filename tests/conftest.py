"""Shared fixtures for the forecaster test-suite."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
import streamlit as st

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import get_ai_settings, get_settings


@pytest.fixture(autouse=True)
def clear_streamlit_secrets(monkeypatch):
    """Provide an empty secrets mapping so tests don't rely on Streamlit runtime."""

    monkeypatch.setattr(st, "secrets", {}, raising=False)
    get_settings.cache_clear()
    get_ai_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_ai_settings.cache_clear()


@pytest.fixture()
def today() -> pd.Timestamp:
    return pd.Timestamp("2024-06-10")


def feed_row(day: Any, amount: float, name: str, category: Any = None, **extra: Any) -> dict[str, Any]:
    """Build a raw aggregator record (positive amount = money out)."""

    stamp = day if isinstance(day, str) else str(pd.Timestamp(day).date())
    row: dict[str, Any] = {"date": stamp, "amount": amount, "name": name}
    if category is not None:
        row["category"] = category
    row.update(extra)
    return row


def days_before(reference: pd.Timestamp, *offsets: int) -> list[pd.Timestamp]:
    return [reference - pd.Timedelta(days=offset) for offset in offsets]
