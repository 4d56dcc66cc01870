"""Auction Views — read-only projections over player and team snapshots.

Invariants:
    - available = AVAILABLE ∪ UNSOLD minus the active player; AVAILABLE first, then created_at
    - completed = everything not AVAILABLE, most recently closed first
    - Pure: inputs are never mutated, randomness comes from the injected rng
"""

import random
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Sequence, TypeVar

from auction_ledger.core.domain_types import PlayerStatus
from auction_ledger.core.repository_protocols import PlayerLike

P = TypeVar("P", bound=PlayerLike)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _status_rank(status: str) -> int:
    return 1 if status == PlayerStatus.UNSOLD else 0


def _created(player: PlayerLike) -> datetime:
    return _as_aware(player.created_at)


def _as_aware(value: datetime | None) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def available_players(
    players: Iterable[P], current_player_id: str | None = None,
) -> list[P]:
    pool = [
        p for p in players
        if p.status in (PlayerStatus.AVAILABLE, PlayerStatus.UNSOLD)
        and p.id != current_player_id
    ]
    return sorted(pool, key=lambda p: (_status_rank(p.status), _created(p)))


def completed_players(players: Iterable[P]) -> list[P]:
    done = [p for p in players if p.status != PlayerStatus.AVAILABLE]
    return sorted(done, key=lambda p: _as_aware(p.sold_at), reverse=True)


def pick_random_player(
    players: Sequence[P],
    current_player_id: str | None = None,
    rng: random.Random | None = None,
) -> P | None:
    """Uniform pick from the available pool, or None when nobody is left."""
    pool = available_players(players, current_player_id)
    if not pool:
        return None
    return (rng or random).choice(pool)


def roster_counts(players: Iterable[PlayerLike]) -> dict[str, int]:
    """SOLD/DRAFTED players per team id, recomputed from the player documents."""
    return dict(Counter(
        p.sold_to_team_id for p in players
        if PlayerStatus(p.status).is_rostered and p.sold_to_team_id
    ))
