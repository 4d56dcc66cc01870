"""Request Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Bid amounts are positive integers; indexes non-negative
    - Tournament team_size ≥ 1, purses ≥ 0
    - Names stripped; blank names rejected

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - Business rules (purse, ordering, state machine) stay in core/, not here
"""

from pydantic import BaseModel, Field, field_validator

from auction_ledger.core.domain_types import PlayerRole


class _Named(BaseModel):
    name: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class TournamentConfig(BaseModel):
    name: str = Field("", max_length=200)
    season: str = Field("", max_length=50)
    team_purse: int = Field(ge=0)
    team_size: int = Field(ge=1)


class TeamCreate(_Named):
    captain_name: str = Field(min_length=1, max_length=200)
    total_purse: int | None = Field(None, gt=0)


class TeamUpdate(_Named):
    captain_name: str = Field(min_length=1, max_length=200)
    total_purse: int = Field(gt=0)


class ResetTeamsRequest(BaseModel):
    total_purse: int | None = Field(None, gt=0)


class PlayerCreate(_Named):
    contact_number: str = Field("", max_length=50)
    area: str | None = Field(None, max_length=100)
    role: PlayerRole
    base_price: int = Field(0, ge=0)
    regular_team: str | None = Field(None, max_length=200)
    assign_to_team_id: str | None = None


class PlayerUpdate(_Named):
    contact_number: str = Field("", max_length=50)
    area: str | None = Field(None, max_length=100)
    role: PlayerRole
    base_price: int = Field(0, ge=0)
    regular_team: str | None = Field(None, max_length=200)


class SelectPlayerRequest(BaseModel):
    player_id: str = Field(min_length=1)


class BidRequest(BaseModel):
    team_id: str = Field(min_length=1)
    amount: int = Field(gt=0)


class PendingBid(BaseModel):
    team_id: str = Field(min_length=1)
    team_name: str = ""
    amount: int = Field(gt=0)
    timestamp: int = Field(ge=0)


class CommitBidsRequest(BaseModel):
    player_id: str = Field(min_length=1)
    bids: list[PendingBid] = []


class AssignPlayerRequest(BaseModel):
    team_id: str = Field(min_length=1)
