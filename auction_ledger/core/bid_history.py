"""Bid History — the Bid value type and pure helpers over ordered bid arrays.

Invariants:
    - Bid is immutable once recorded; arrays are never mutated in place
    - Every helper returns a new list (JSON columns only persist on reassignment)
    - The projection (current_bid, leading_team_id) is always derived from the LAST bid
    - Content-matching removal drops only the FIRST bid equal on (team_id, amount, timestamp)

Design Decisions:
    - Frozen dataclass with to_dict/from_dict: bids live as JSON objects inside
      two arrays (auction state + active player) and cross the API boundary as dicts
    - combined_history builds committed ++ pending at read time: discarding pending
      bids is a list replacement with no effect on committed state
"""

from dataclasses import dataclass, asdict
from typing import Iterable, NamedTuple


@dataclass(frozen=True)
class Bid:
    """One bid on the active player. team_name is a snapshot taken at bid time."""
    team_id: str
    team_name: str
    amount: int
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(
            team_id=data["team_id"],
            team_name=data.get("team_name", ""),
            amount=int(data["amount"]),
            timestamp=int(data["timestamp"]),
        )

    def same_content(self, other: "Bid") -> bool:
        """Identity used when the two histories have diverged."""
        return (
            self.team_id == other.team_id
            and self.amount == other.amount
            and self.timestamp == other.timestamp
        )


class BidProjection(NamedTuple):
    current_bid: int
    leading_team_id: str | None


def bids_from_json(raw: list | None) -> list[Bid]:
    """Tolerates a missing/NULL column by treating it as no bids."""
    if not isinstance(raw, list):
        return []
    return [Bid.from_dict(item) for item in raw]


def bids_to_json(bids: Iterable[Bid]) -> list[dict]:
    return [bid.to_dict() for bid in bids]


def latest_bid(bids: list[Bid]) -> Bid | None:
    return bids[-1] if bids else None


def project_bids(bids: list[Bid]) -> BidProjection:
    """current_bid/leading_team_id after the last bid, or 0/None when empty."""
    last = latest_bid(bids)
    if last is None:
        return BidProjection(0, None)
    return BidProjection(last.amount, last.team_id)


def append_bids(history: list[Bid], new_bids: Iterable[Bid]) -> list[Bid]:
    return [*history, *new_bids]


def remove_bid_at(history: list[Bid], index: int) -> list[Bid]:
    """Positional removal. Caller has already checked the index is in range."""
    return [bid for i, bid in enumerate(history) if i != index]


def remove_first_match(history: list[Bid], target: Bid) -> list[Bid]:
    """Drop the first bid equal to target on content; keep everything else in order."""
    remaining: list[Bid] = []
    removed = False
    for bid in history:
        if not removed and bid.same_content(target):
            removed = True
            continue
        remaining.append(bid)
    return remaining


def reconcile_player_history(
    player_bids: list[Bid], auction_bids: list[Bid], index: int,
) -> list[Bid]:
    """Mirror a delete on the player's own array.

    Equal lengths ⇒ the arrays are in step, remove the same position.
    Otherwise they have diverged and the removed bid is located by content.
    """
    if len(player_bids) == len(auction_bids):
        return remove_bid_at(player_bids, index)
    return remove_first_match(player_bids, auction_bids[index])


def combined_history(committed: list[Bid], *pending: list[Bid]) -> list[Bid]:
    """committed ++ each pending list, in order."""
    combined = list(committed)
    for batch in pending:
        combined.extend(batch)
    return combined
