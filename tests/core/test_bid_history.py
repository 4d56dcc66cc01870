"""Bid History — verifies the Bid value type and array helpers.

Tests:
    - Projection comes from the last bid (0/None when empty)
    - Helpers never mutate their inputs
    - Reconciliation: positional when in step, first content match when diverged
"""

import pytest

from auction_ledger.core.bid_history import (
    Bid,
    BidProjection,
    append_bids,
    bids_from_json,
    bids_to_json,
    combined_history,
    project_bids,
    reconcile_player_history,
    remove_bid_at,
    remove_first_match,
)

A1 = Bid("a", "Alpha", 25_000, 1)
B2 = Bid("b", "Bravo", 30_000, 2)
A3 = Bid("a", "Alpha", 35_000, 3)


def test_bid_is_frozen():
    with pytest.raises(Exception):
        A1.amount = 1


def test_json_shape():
    assert bids_to_json([A1]) == [
        {"team_id": "a", "team_name": "Alpha", "amount": 25_000, "timestamp": 1},
    ]
    assert bids_from_json(bids_to_json([A1, B2])) == [A1, B2]


def test_missing_column_reads_as_no_bids():
    assert bids_from_json(None) == []


def test_same_content_ignores_team_name():
    assert A1.same_content(Bid("a", "Renamed", 25_000, 1))
    assert not A1.same_content(Bid("a", "Alpha", 25_000, 2))


def test_projection_from_last_bid():
    assert project_bids([A1, B2]) == BidProjection(30_000, "b")
    assert project_bids([]) == BidProjection(0, None)


def test_helpers_return_new_lists():
    history = [A1, B2]
    appended = append_bids(history, [A3])
    removed = remove_bid_at(history, 0)
    assert history == [A1, B2]
    assert appended == [A1, B2, A3]
    assert removed == [B2]


def test_remove_first_match_drops_only_one():
    twin = Bid("a", "Alpha", 25_000, 1)
    assert remove_first_match([A1, B2, twin], A1) == [B2, twin]


def test_reconcile_in_step_is_positional():
    assert reconcile_player_history([A1, B2, A3], [A1, B2, A3], 1) == [A1, A3]


def test_reconcile_diverged_matches_content():
    extra = Bid("c", "Charlie", 20_000, 0)
    player = [extra, A1, B2, A3]
    auction = [A1, B2, A3]
    assert reconcile_player_history(player, auction, 1) == [extra, A1, A3]


def test_reconcile_diverged_without_match_keeps_player_history():
    player = [A1]
    auction = [A1, B2, A3]
    assert reconcile_player_history(player, auction, 2) == [A1]


def test_combined_history_orders_committed_first():
    assert combined_history([A1], [B2], [A3]) == [A1, B2, A3]
