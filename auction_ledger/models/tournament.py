"""Tournament ORM — singleton configuration row (id "current").

Invariants:
    - Exactly one row, created idempotently by ensure_tournament
    - team_purse is only the default purse for newly created teams
    - team_size is the roster capacity every max-bid computation uses
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from auction_ledger.db.base import Base
from auction_ledger.core.domain_types import (
    TOURNAMENT_DOC_ID,
    DEFAULT_TEAM_SIZE,
    DEFAULT_TOURNAMENT_NAME,
    DEFAULT_TOURNAMENT_SEASON,
)


class Tournament(Base):
    __tablename__ = "tournament"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=TOURNAMENT_DOC_ID,
    )
    name: Mapped[str] = mapped_column(
        String(200), nullable=False, default=DEFAULT_TOURNAMENT_NAME,
    )
    season: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_TOURNAMENT_SEASON,
    )
    team_purse: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    team_size: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_TEAM_SIZE,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
