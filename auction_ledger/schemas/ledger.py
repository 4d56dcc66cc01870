"""Ledger Views — immutable snapshots of each aggregate as subscribers see them.

Invariants:
    - Built from ORM rows via from_attributes, detached from any DB session
    - frozen: a published snapshot cannot be edited by one subscriber under another
    - bid_history kept as plain dicts; .bids gives the typed Bid list

Design Decisions:
    - Pydantic over dataclasses: the same models serialize to the REST and SSE boundary
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from auction_ledger.core.bid_history import Bid, bids_from_json


class _View(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


class TournamentView(_View):
    id: str
    name: str
    season: str
    team_purse: int
    team_size: int


class TeamView(_View):
    id: str
    name: str
    captain_name: str
    total_purse: int
    remaining_purse: int
    spent_amount: int
    players_count: int
    max_bid_amount: int


class PlayerView(_View):
    id: str
    name: str
    contact_number: str
    area: str | None = None
    role: str
    base_price: int
    regular_team: str | None = None
    status: str
    sold_to_team_id: str | None = None
    sold_price: int | None = None
    sold_at: datetime | None = None
    created_at: datetime | None = None
    bid_history: list[dict] = []

    @property
    def bids(self) -> list[Bid]:
        return bids_from_json(self.bid_history)


class AuctionStateView(_View):
    id: str
    current_player_id: str | None = None
    current_bid: int = 0
    leading_team_id: str | None = None
    status: str
    bid_history: list[dict] = []
    version: int = 0

    @property
    def bids(self) -> list[Bid]:
        return bids_from_json(self.bid_history)
