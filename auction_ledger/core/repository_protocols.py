"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - ORM rows and change-feed view models both satisfy the *Like protocols
    - The coordinator talks to the engine only through BidCommitter

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that consume the *Like shapes are never async
"""

from datetime import datetime
from typing import Protocol

from auction_ledger.core.bid_history import Bid


class PlayerLike(Protocol):
    """Structural contract for players passed to the derived views."""
    id: str
    status: str
    created_at: datetime | None
    sold_at: datetime | None
    sold_to_team_id: str | None


class TeamLike(Protocol):
    """Figures the coordinator needs to validate a proposed bid."""
    id: str
    name: str
    remaining_purse: int
    max_bid_amount: int


class AuctionStateLike(Protocol):
    current_player_id: str | None
    current_bid: int
    leading_team_id: str | None
    status: str
    bid_history: list
    version: int


class BidCommitter(Protocol):
    """The slice of the transaction engine the bid coordinator depends on."""
    async def commit_pending_bids(
        self, player_id: str, bids: list[Bid],
    ) -> AuctionStateLike | None: ...
    async def update_live_bid(self, team_id: str, amount: int) -> None: ...
