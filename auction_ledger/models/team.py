"""Team ORM — a bidding team and its purse ledger.

Invariants:
    - remaining_purse == total_purse - spent_amount at all times
    - max_bid_amount is a cached derivation, rewritten whenever
      remaining_purse or players_count changes
    - Mutated only inside transaction engine / setup operations

Design Decisions:
    - Integer money: purse amounts are whole currency units, no float drift
    - version_id_col: concurrent purse updates surface as StaleDataError and are retried
"""

import uuid

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from auction_ledger.db.base import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    captain_name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_purse: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_purse: Mapped[int] = mapped_column(Integer, nullable=False)
    spent_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    players_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_bid_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
