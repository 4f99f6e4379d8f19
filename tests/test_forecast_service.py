"""End-to-end behaviour of the forecasting pipeline."""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from analytics.stats import cents_key
from core.forecast_service import analyse_history, build_financial_profile, generate_forecast
from data.synth import generate_plaid_history

from conftest import days_before, feed_row

ANALYSIS_DAY = date(2024, 6, 10)


@pytest.fixture(scope="module")
def history() -> list[dict]:
    return generate_plaid_history(end_date=ANALYSIS_DAY, months=6, seed=7)


@pytest.fixture(scope="module")
def forecast(history):
    return generate_forecast(history, ANALYSIS_DAY)


def test_forecast_is_idempotent_for_same_day(history, forecast):
    assert generate_forecast(list(history), ANALYSIS_DAY) == forecast


def test_forecast_respects_window_and_sorting(forecast):
    rows = forecast["predicted_transactions"]
    dates = [row["date"] for row in rows]

    assert forecast["forecast_period_days"] == 90
    assert rows
    assert dates == sorted(dates)
    assert dates[0] >= "2024-06-11"
    assert dates[-1] <= "2024-09-09"


def test_forecast_rows_are_well_formed(forecast):
    keys = set()
    for row in forecast["predicted_transactions"]:
        assert row["amount"] != 0
        assert row["type"] == ("income" if row["amount"] > 0 else "expense")
        assert row["confidence_score"] in {"high", "medium", "low"}
        key = (row["date"], row["merchant"], cents_key(row["amount"]))
        assert key not in keys
        keys.add(key)


def test_forecast_contains_expected_commitments(forecast):
    rows = forecast["predicted_transactions"]
    netflix = [row for row in rows if row["merchant"] == "Netflix"]
    rent = [row for row in rows if row["merchant"] == "Bilt (Rent)"]
    income = [row for row in rows if row["type"] == "income"]

    assert [row["date"] for row in netflix] == ["2024-07-03", "2024-08-03", "2024-09-03"]
    assert {row["amount"] for row in netflix} == {-15.49}
    assert len(rent) == 3
    assert all(row["day_of_week"] not in {"Saturday", "Sunday"} for row in rent)
    assert income


def test_feed_noise_never_reaches_the_forecast(forecast):
    merchants = {row["merchant"].lower() for row in forecast["predicted_transactions"]}

    assert not any("thank you" in name or "savings" in name for name in merchants)
    assert "southwest airlines" not in merchants
    assert "usps" not in merchants


def test_cancelled_series_is_not_reintroduced():
    today = date(2024, 6, 10)
    raw = [feed_row(day, 25.0, "LAWN CARE PROS") for day in days_before(pd.Timestamp(today), *range(20, 20 + 7 * 8, 7))]

    forecast = generate_forecast(raw, today)

    assert forecast["predicted_transactions"] == []


def test_empty_history_gives_empty_forecast():
    assert generate_forecast([], ANALYSIS_DAY) == {"forecast_period_days": 90, "predicted_transactions": []}


def test_analysis_keeps_recurring_merchants_out_of_discretionary(history):
    analysis = analyse_history(history, ANALYSIS_DAY)
    recurring = {entry["merchant"] for entry in analysis.recurring_series}
    discretionary_merchants = {
        merchant for pattern in analysis.discretionary_patterns for merchant in pattern["typical_merchants"]
    }

    assert {"Netflix", "Spotify", "GitHub"} <= recurring
    assert not recurring & discretionary_merchants


def test_financial_profile(history):
    profile = build_financial_profile(history, ANALYSIS_DAY)

    assert profile["analysis_date"] == "2024-06-10"
    assert profile["forecast_start"] == "2024-06-11"
    assert profile["forecast_end"] == "2024-09-09"
    assert 150 <= profile["history_span_days"] <= 183
    assert profile["total_transactions_analyzed"] > 100
    assert len(profile["recent_transactions"]) == 60
    assert profile["recent_transactions"][-1]["date"] <= "2024-06-10"
    medians = profile["monthly_medians"]
    assert medians["total_income"] > 4000
    assert medians["net_cash_flow"] == pytest.approx(medians["total_income"] - medians["total_expenses"], abs=0.01)


def test_financial_profile_for_empty_history():
    profile = build_financial_profile([], ANALYSIS_DAY)

    assert profile["total_transactions_analyzed"] == 0
    assert profile["recurring_series"] == []
    assert profile["variable_income"] is None
    assert profile["monthly_medians"] == {"total_income": 0.0, "total_expenses": 0.0, "net_cash_flow": 0.0}
