"""AuctionState ORM — the singleton "current auction" aggregate (id "current").

Invariants:
    - Created once (ensure_auction_state), mutated in place forever, never deleted
    - bid_history mirrors the active player's bid_history, cleared together
    - current_bid/leading_team_id always describe the last bid (or a baseline)
    - Every write bumps version; concurrent writers are serialized through it

Design Decisions:
    - Versioned aggregate instead of module-level state: all mutation goes
      through the transaction engine, which reads and writes it in one unit
"""

from sqlalchemy import String, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from auction_ledger.db.base import Base
from auction_ledger.core.domain_types import AUCTION_STATE_DOC_ID, AuctionStatus


class AuctionState(Base):
    __tablename__ = "auction_state"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=AUCTION_STATE_DOC_ID,
    )
    current_player_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    current_bid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    leading_team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=AuctionStatus.IDLE.value,
    )
    bid_history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
