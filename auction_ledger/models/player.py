"""Player ORM — an auctionable player and its own copy of the bid history.

Invariants:
    - status ∈ PlayerStatus; SOLD/DRAFTED rows carry sold_to_team_id and sold_price
    - bid_history is reset to [] whenever the player becomes the active player
    - bid_history mirrors AuctionState.bid_history while the player is active

Design Decisions:
    - JSON column for bid_history: list of Bid dicts, reassigned (never mutated
      in place) so the ORM detects the change
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from auction_ledger.db.base import Base
from auction_ledger.core.domain_types import PlayerStatus


class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_number: Mapped[str] = mapped_column(
        String(50), nullable=False, default="",
    )
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    base_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    regular_team: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PlayerStatus.AVAILABLE.value,
    )
    sold_to_team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    sold_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sold_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    bid_history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
