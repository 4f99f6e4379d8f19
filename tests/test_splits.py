from __future__ import annotations

import pandas as pd

from analytics.normalisation import normalise_transactions
from analytics.splits import merge_split_payments
from config.settings import Settings

from conftest import feed_row


def _merged(raw):
    return merge_split_payments(normalise_transactions(raw), settings=Settings())


def test_rent_split_into_equal_halves_merges():
    frame = _merged(
        [
            feed_row("2024-03-01", 500.0, "OAKWOOD APARTMENTS"),
            feed_row("2024-03-06", 500.0, "OAKWOOD APARTMENTS"),
        ]
    )

    assert len(frame) == 1
    assert frame.iloc[0]["amount"] == -1000.0
    assert frame.iloc[0]["date"] == pd.Timestamp("2024-03-01")
    assert frame.iloc[0]["day_of_week"] == "Friday"


def test_identical_small_charges_stay_separate():
    frame = _merged(
        [
            feed_row("2024-03-01", 12.99, "NETFLIX.COM"),
            feed_row("2024-03-06", 12.99, "NETFLIX.COM"),
            feed_row("2024-03-01", 12.99, "CORNER DELI"),
            feed_row("2024-03-04", 12.99, "CORNER DELI"),
        ]
    )

    assert len(frame) == 4
    assert set(frame["amount"]) == {-12.99}


def test_partial_payments_within_gap_are_summed():
    frame = _merged(
        [
            feed_row("2024-04-02", 120.0, "HOME DEPOT #4410"),
            feed_row("2024-04-04", 80.55, "HOME DEPOT #4410"),
            feed_row("2024-04-11", 30.0, "HOME DEPOT #4410"),
        ]
    )

    assert frame["amount"].tolist() == [-200.55, -30.0]
    assert frame["date"].tolist() == [pd.Timestamp("2024-04-02"), pd.Timestamp("2024-04-11")]


def test_cluster_span_is_bounded():
    frame = _merged(
        [
            feed_row("2024-04-01", 10.0, "CORNER DELI"),
            feed_row("2024-04-05", 11.0, "CORNER DELI"),
            feed_row("2024-04-09", 12.0, "CORNER DELI"),
            feed_row("2024-04-13", 13.0, "CORNER DELI"),
        ]
    )

    assert frame["amount"].tolist() == [-33.0, -13.0]


def test_income_is_never_merged():
    frame = _merged(
        [
            feed_row("2024-04-01", -300.0, "CLIENT DEPOSIT"),
            feed_row("2024-04-03", -450.0, "CLIENT DEPOSIT"),
        ]
    )

    assert frame["amount"].tolist() == [300.0, 450.0]


def test_empty_frame_passes_through():
    frame = merge_split_payments(normalise_transactions([]))

    assert frame.empty


def test_refund_between_parts_does_not_break_the_merge():
    frame = _merged(
        [
            feed_row("2024-03-01", 500.0, "OAKWOOD APARTMENTS"),
            feed_row("2024-03-02", -20.0, "OAKWOOD APARTMENTS"),
            feed_row("2024-03-04", 700.0, "OAKWOOD APARTMENTS"),
        ]
    )

    assert frame["amount"].tolist() == [-1200.0, 20.0]
    assert frame["date"].tolist() == [pd.Timestamp("2024-03-01"), pd.Timestamp("2024-03-02")]


def test_amounts_a_cent_apart_count_as_repeats():
    frame = _merged(
        [
            feed_row("2024-03-01", 12.99, "CORNER DELI"),
            feed_row("2024-03-04", 13.00, "CORNER DELI"),
        ]
    )

    assert frame["amount"].tolist() == [-12.99, -13.0]
