"""Discretionary category statistics and irregular income."""

from __future__ import annotations

import pandas as pd
import pytest

from analytics.discretionary import detect_discretionary_patterns
from analytics.normalisation import normalise_transactions
from analytics.variable_income import detect_variable_income, project_variable_income
from config.settings import Settings

from conftest import days_before, feed_row

DINING = ["Food and Drink", "Restaurants"]


def _dining_history(today: pd.Timestamp) -> list[dict]:
    names = ["CHIPOTLE 1187", "STARBUCKS STORE 0921", "CHIPOTLE 1187"]
    offsets = range(55, -1, -5)
    return [feed_row(day, 20.0, names[index % 3], DINING) for index, day in enumerate(days_before(today, *offsets))]


def test_discretionary_rates_and_amounts(today):
    clean = normalise_transactions(_dining_history(today))

    patterns = detect_discretionary_patterns(clean, today, settings=Settings())

    assert len(patterns) == 1
    pattern = patterns[0]
    assert pattern["category"] == "Food & Drink"
    assert pattern["occurrences"] == 12
    assert pattern["avg_weekly_count"] == pytest.approx(1.5)
    assert pattern["avg_amount"] == -20.0
    assert pattern["recent_avg_amount"] == -20.0
    assert pattern["amount_std_dev"] == 0.0
    assert pattern["typical_merchants"] == ["Chipotle", "Starbucks"]
    assert sum(pattern["day_of_week_weights"]) == pytest.approx(1.0)
    assert len(pattern["day_of_week_weights"]) == 7


def test_discretionary_exclusions(today):
    raw = _dining_history(today)
    raw += [feed_row(day, 310.0, "MARRIOTT HOTELS", ["Travel", "Lodging"]) for day in days_before(today, 3, 30, 60)]
    raw += [feed_row(day, 12.0, "CORNER DELI") for day in days_before(today, 4, 9)]
    clean = normalise_transactions(raw)

    assert detect_discretionary_patterns(clean, today, {"Chipotle", "Starbucks"}, settings=Settings()) == []


def test_discretionary_ignores_rows_after_today(today):
    raw = [feed_row(day, 30.0, "TRADER JOE S #552", ["Shops"]) for day in days_before(today, -5, -10, -15, 2)]

    assert detect_discretionary_patterns(normalise_transactions(raw), today, settings=Settings()) == []


def _holiday_heavy_history(fridays: int) -> list[dict]:
    weekly = pd.date_range("2024-07-19", periods=fridays, freq="7D")
    holidays = pd.date_range("2024-11-01", "2024-12-31", freq="2D")
    return [feed_row(day, 20.0, "CHIPOTLE 1187", DINING) for day in [*weekly, *holidays]]


def test_holiday_season_does_not_inflate_frequency():
    today = pd.Timestamp("2025-01-15")
    clean = normalise_transactions(_holiday_heavy_history(15))

    pattern = detect_discretionary_patterns(clean, today, settings=Settings())[0]

    # 15 Friday rows over the 120 non-holiday days between 2024-07-19 and 2025-01-15
    assert pattern["occurrences"] == 46
    assert pattern["avg_weekly_count"] == pytest.approx(15 / (120 / 7), abs=1e-3)
    assert pattern["day_of_week_weights"] == [0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0]


def test_holiday_season_kept_when_too_few_other_points():
    today = pd.Timestamp("2025-01-15")
    clean = normalise_transactions(_holiday_heavy_history(5))

    pattern = detect_discretionary_patterns(clean, today, settings=Settings())[0]

    assert pattern["occurrences"] == 36
    assert pattern["avg_weekly_count"] == pytest.approx(36 / (181 / 7), abs=1e-3)
    assert pattern["day_of_week_weights"][4] < 1.0
    assert sum(pattern["day_of_week_weights"]) == pytest.approx(1.0)


def _gig_history(today: pd.Timestamp) -> list[dict]:
    offsets = (88, 80, 55, 50, 20, 3)
    amounts = (180.0, 95.0, 240.0, 130.0, 60.0, 210.0)
    return [feed_row(day, -amount, "UBER DRIVER DEPOSIT") for day, amount in zip(days_before(today, *offsets), amounts)]


def test_variable_income_detection(today):
    pattern = detect_variable_income(normalise_transactions(_gig_history(today)), today, settings=Settings())

    assert pattern is not None
    assert pattern["merchant"] == "Uber"
    assert pattern["category"] == "Income"
    assert pattern["median_amount"] == 155.0
    assert pattern["weekly_rate"] == pytest.approx(0.467)
    assert pattern["occurrences"] == 6
    assert pattern["last_occurrence"] == "2024-06-07"


def test_variable_income_projection(today):
    pattern = detect_variable_income(normalise_transactions(_gig_history(today)), today, settings=Settings())

    first = project_variable_income(pattern, today, settings=Settings())
    second = project_variable_income(pattern, today, settings=Settings())

    assert first == second
    assert len(first) == 6
    assert all("2024-06-11" <= row["date"] <= "2024-09-08" for row in first)
    assert all(155.0 * 0.75 <= row["amount"] <= 155.0 * 1.25 for row in first)
    assert {row["confidence_score"] for row in first} == {"low"}
    assert {row["type"] for row in first} == {"income"}


def test_variable_income_requires_volume_and_size(today):
    small = [feed_row(day, -10.0, "CASH DEPOSIT") for day in days_before(today, 5, 20, 40, 60)]
    sparse = _gig_history(today)[:2]
    claimed = _gig_history(today)

    assert detect_variable_income(normalise_transactions(small), today, settings=Settings()) is None
    assert detect_variable_income(normalise_transactions(sparse), today, settings=Settings()) is None
    assert detect_variable_income(normalise_transactions(claimed), today, {"Uber"}, settings=Settings()) is None
    assert project_variable_income(None, today, settings=Settings()) == []
