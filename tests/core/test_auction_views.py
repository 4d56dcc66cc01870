"""Auction Views — tests for the available/completed pools and roster counts.

Tests cover:
    - available excludes rostered players and the active player
    - AVAILABLE sorts before UNSOLD, then by created_at
    - completed sorts by sold_at, newest first, unsold without a timestamp last
    - random pick draws only from the available pool
    - roster counts come from SOLD/DRAFTED players only
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from auction_ledger.core.auction_views import (
    available_players,
    completed_players,
    pick_random_player,
    roster_counts,
)

T0 = datetime(2025, 3, 1, 18, 0, tzinfo=timezone.utc)


@dataclass
class _Player:
    id: str
    status: str
    created_at: datetime | None = None
    sold_at: datetime | None = None
    sold_to_team_id: str | None = None


def _at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


POOL = [
    _Player("u1", "UNSOLD", _at(0)),
    _Player("a2", "AVAILABLE", _at(2)),
    _Player("a1", "AVAILABLE", _at(1)),
    _Player("s1", "SOLD", _at(3), _at(10), "t1"),
    _Player("d1", "DRAFTED", _at(4), None, "t2"),
    _Player("s2", "SOLD", _at(5), _at(20), "t1"),
]


# ─── available ──────────────────────────────────────────────────

def test_available_orders_available_before_unsold():
    assert [p.id for p in available_players(POOL)] == ["a1", "a2", "u1"]


def test_available_excludes_active_player():
    assert [p.id for p in available_players(POOL, "a1")] == ["a2", "u1"]


def test_available_accepts_naive_timestamps():
    players = [
        _Player("late", "AVAILABLE", datetime(2025, 3, 2)),
        _Player("early", "AVAILABLE", _at(0)),
    ]
    assert [p.id for p in available_players(players)] == ["early", "late"]


def test_available_does_not_mutate_input():
    snapshot = list(POOL)
    available_players(POOL)
    assert POOL == snapshot


# ─── completed ──────────────────────────────────────────────────

def test_completed_newest_sale_first():
    assert [p.id for p in completed_players(POOL)][:2] == ["s2", "s1"]


def test_completed_includes_unsold_and_drafted():
    assert {p.id for p in completed_players(POOL)} == {"s1", "s2", "d1", "u1"}


# ─── random pick ────────────────────────────────────────────────

def test_random_pick_draws_from_available_pool():
    rng = random.Random(7)
    picks = {pick_random_player(POOL, "a2", rng).id for _ in range(50)}
    assert picks <= {"a1", "u1"}


def test_random_pick_empty_pool_is_none():
    rostered = [p for p in POOL if p.status in ("SOLD", "DRAFTED")]
    assert pick_random_player(rostered) is None


# ─── roster counts ──────────────────────────────────────────────

def test_roster_counts_per_team():
    assert roster_counts(POOL) == {"t1": 2, "t2": 1}


def test_roster_counts_ignore_stale_team_on_unsold():
    players = [_Player("x", "UNSOLD", _at(0), None, "t9")]
    assert roster_counts(players) == {}
