from __future__ import annotations

from analytics.validation import merge_predictions, validate_forecast
from config.settings import Settings


def _entry(**overrides):
    entry = {
        "date": "2024-07-01",
        "merchant": "Netflix",
        "amount": -15.49,
        "category": "Subscriptions",
        "type": "expense",
        "day_of_week": "Monday",
        "confidence_score": "high",
    }
    entry.update(overrides)
    return entry


def test_invalid_entries_are_dropped(today):
    raw = {
        "forecast_period_days": 90,
        "predicted_transactions": [
            _entry(),
            _entry(merchant="  "),
            _entry(date="soon"),
            _entry(amount="abc"),
            _entry(amount=0),
            _entry(amount=0.001),
            "not-a-mapping",
        ],
    }

    forecast = validate_forecast(raw, today, settings=Settings())

    assert len(forecast["predicted_transactions"]) == 1
    assert forecast["forecast_period_days"] == 90


def test_dates_are_clamped_into_window(today):
    raw = {
        "predicted_transactions": [
            _entry(date="2025-01-01", merchant="Late"),
            _entry(date="2024-01-01", merchant="Early"),
        ]
    }

    forecast = validate_forecast(raw, today, settings=Settings())
    by_merchant = {row["merchant"]: row for row in forecast["predicted_transactions"]}

    assert by_merchant["Early"]["date"] == "2024-06-11"
    assert by_merchant["Early"]["day_of_week"] == "Tuesday"
    assert by_merchant["Late"]["date"] == "2024-09-09"
    assert by_merchant["Late"]["day_of_week"] == "Monday"


def test_type_and_confidence_are_recomputed(today):
    raw = {
        "predicted_transactions": [
            _entry(amount=-5, type="income", confidence_score="certain"),
            _entry(merchant="Refund", amount="12.50", type="expense", confidence_score=None),
            _entry(merchant="Unhashable", confidence_score=["high"]),
        ]
    }

    rows = validate_forecast(raw, today, settings=Settings())["predicted_transactions"]
    by_merchant = {row["merchant"]: row for row in rows}

    assert by_merchant["Netflix"]["type"] == "expense"
    assert by_merchant["Netflix"]["confidence_score"] == "medium"
    assert by_merchant["Refund"]["type"] == "income"
    assert by_merchant["Refund"]["amount"] == 12.5
    assert by_merchant["Unhashable"]["confidence_score"] == "medium"


def test_sorted_and_deduplicated(today):
    raw = {
        "predicted_transactions": [
            _entry(date="2024-08-01"),
            _entry(date="2024-07-01"),
            _entry(date="2024-07-01", amount=-15.491),
            _entry(date="2024-07-01", merchant="Spotify", amount=-11.99),
        ]
    }

    rows = validate_forecast(raw, today, settings=Settings())["predicted_transactions"]

    assert [(row["date"], row["merchant"]) for row in rows] == [
        ("2024-07-01", "Netflix"),
        ("2024-07-01", "Spotify"),
        ("2024-08-01", "Netflix"),
    ]


def test_dedupe_applies_after_clamping(today):
    raw = {
        "predicted_transactions": [
            _entry(date="2024-01-01"),
            _entry(date="2024-02-01"),
        ]
    }

    rows = validate_forecast(raw, today, settings=Settings())["predicted_transactions"]

    assert len(rows) == 1
    assert rows[0]["date"] == "2024-06-11"


def test_malformed_forecast_becomes_empty(today):
    assert validate_forecast(None, today) == {"forecast_period_days": 90, "predicted_transactions": []}
    assert validate_forecast({"forecast_period_days": "ninety", "predicted_transactions": "x"}, today) == {
        "forecast_period_days": 90,
        "predicted_transactions": [],
    }


def test_merge_predictions_concatenates_groups(today):
    forecast = merge_predictions(
        [_entry(date="2024-07-02")],
        [_entry(date="2024-07-01", merchant="Spotify", amount=-11.99)],
        [],
        today=today,
        settings=Settings(),
    )

    assert forecast["forecast_period_days"] == 90
    assert [row["merchant"] for row in forecast["predicted_transactions"]] == ["Spotify", "Netflix"]
