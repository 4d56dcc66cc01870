"""Domain Types — verifies identity types, enum values and auction constants.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and compare equal to stored strings
    - Only SOLD and DRAFTED count as rostered
"""

from auction_ledger.core.domain_types import (
    TeamId, PlayerId,
    OPENING_BID, MIN_RESERVE, HIGH_BID_THRESHOLD, HIGH_BID_DIFFERENCE,
    PlayerStatus, AuctionStatus, PlayerRole, LedgerTopic,
)


def test_identity_types_wrap_str():
    assert TeamId("t1") == "t1"
    assert PlayerId("p1") == "p1"


def test_player_status_has_four_states():
    assert {s.value for s in PlayerStatus} == {"AVAILABLE", "UNSOLD", "DRAFTED", "SOLD"}


def test_rostered_statuses():
    assert PlayerStatus.SOLD.is_rostered
    assert PlayerStatus.DRAFTED.is_rostered
    assert not PlayerStatus.AVAILABLE.is_rostered
    assert not PlayerStatus.UNSOLD.is_rostered


def test_auction_status_compares_to_column_value():
    assert AuctionStatus.LIVE == "LIVE"
    assert AuctionStatus("IDLE") is AuctionStatus.IDLE


def test_player_roles_are_display_labels():
    assert len(PlayerRole) == 6
    assert PlayerRole("All-Rounder (Pace)") is PlayerRole.ALL_ROUNDER_PACE


def test_one_topic_per_aggregate():
    assert {t.value for t in LedgerTopic} == {
        "tournament", "auction_state", "teams", "players",
    }


def test_constants():
    assert OPENING_BID == 20_000
    assert MIN_RESERVE == 20_000
    assert HIGH_BID_THRESHOLD == 100_000
    assert HIGH_BID_DIFFERENCE == 10_000
