"""Ledger Store — atomic read-validate-write units with transparent conflict retry.

Invariants:
    - One attempt = one DB session = one transaction; commit is all-or-nothing
    - A write conflict (stale version or database serialization failure) rolls the
      attempt back and re-runs the whole unit against a fresh snapshot
    - Domain errors raised by the unit abort it immediately (never retried)
    - Retry budget exhausted ⇒ ConcurrencyError
    - Subscribers are notified only after a successful commit, once per touched topic

Design Decisions:
    - Optimistic concurrency via SQLAlchemy version_id_col, no explicit locks
    - Jittered exponential backoff between attempts so colliding writers spread out
    - The change feed is owned by the store: it is the only place that knows a
      commit happened
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from auction_ledger.core.domain_types import (
    AUCTION_STATE_DOC_ID,
    TOURNAMENT_DOC_ID,
    LedgerTopic,
)
from auction_ledger.core.errors import (
    AuctionLedgerError,
    ConcurrencyError,
    ErrorContext,
    ResourceNotFoundError,
)
from auction_ledger.infrastructure.change_feed import ChangeFeed, Subscription
from auction_ledger.infrastructure.database import (
    DatabaseSessionManager,
    is_serialization_failure,
)
from auction_ledger.models import AuctionState, Player, Team, Tournament
from auction_ledger.schemas.ledger import (
    AuctionStateView,
    PlayerView,
    TeamView,
    TournamentView,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerTransaction:
    """One attempt's handle on the ledger: typed reads, writes, touched topics."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.touched: set[LedgerTopic] = set()

    def touch(self, *topics: LedgerTopic) -> None:
        self.touched.update(topics)

    async def tournament(self) -> Tournament | None:
        return await self.db.get(Tournament, TOURNAMENT_DOC_ID)

    async def team_size(self, default: int) -> int:
        tournament = await self.tournament()
        return tournament.team_size if tournament else default

    async def auction_state_or_none(self) -> AuctionState | None:
        return await self.db.get(AuctionState, AUCTION_STATE_DOC_ID)

    async def auction_state(self) -> AuctionState:
        state = await self.auction_state_or_none()
        if state is None:
            raise ResourceNotFoundError("AuctionState", AUCTION_STATE_DOC_ID)
        return state

    async def player(self, player_id: str) -> Player:
        player = await self.db.get(Player, player_id)
        if player is None:
            raise ResourceNotFoundError(
                "Player", player_id, ErrorContext(player_id=player_id),
            )
        return player

    async def team(self, team_id: str) -> Team:
        team = await self.db.get(Team, team_id)
        if team is None:
            raise ResourceNotFoundError(
                "Team", team_id, ErrorContext(team_id=team_id),
            )
        return team

    async def teams(self) -> list[Team]:
        result = await self.db.execute(select(Team).order_by(Team.name))
        return list(result.scalars().all())

    def add(self, row: object, topic: LedgerTopic) -> None:
        self.db.add(row)
        self.touch(topic)

    async def delete(self, row: object, topic: LedgerTopic) -> None:
        await self.db.delete(row)
        self.touch(topic)


def assign(row: object, fields: dict) -> None:
    """Copy a field dict produced by core/ onto an ORM row."""
    for key, value in fields.items():
        setattr(row, key, value)


class LedgerStore:
    """Runs ledger units atomically and fans committed snapshots out."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        max_attempts: int = 5,
        retry_base_delay_ms: int = 10,
    ):
        self._db = db_manager
        self.max_attempts = max_attempts
        self.retry_base_delay_ms = retry_base_delay_ms
        self.feed = ChangeFeed(self.load_topic)

    async def run_transaction(
        self,
        operation: str,
        work: Callable[[LedgerTransaction], Awaitable[T]],
        retry_on_duplicate: bool = False,
    ) -> T:
        """Run work atomically, retrying on write conflicts.

        retry_on_duplicate treats a primary-key collision as a conflict too; used by
        idempotent create-if-missing units where a concurrent creator won the race.
        """
        for attempt in range(1, self.max_attempts + 1):
            async with self._db.session() as db:
                tx = LedgerTransaction(db)
                try:
                    result = await work(tx)
                    await db.commit()
                except StaleDataError as e:
                    await db.rollback()
                    conflict: Exception | None = e
                except IntegrityError as e:
                    if not retry_on_duplicate:
                        raise
                    await db.rollback()
                    conflict = e
                except DBAPIError as e:
                    if not is_serialization_failure(e):
                        raise
                    await db.rollback()
                    conflict = e
                else:
                    conflict = None

            if conflict is None:
                await self._publish(tx.touched)
                if attempt > 1:
                    logger.info(
                        f"{operation} committed after {attempt} attempts",
                        extra={"operation": operation, "attempt": attempt},
                    )
                return result

            logger.warning(
                f"{operation} hit a write conflict, retrying: {conflict}",
                extra={"operation": operation, "attempt": attempt},
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(self._backoff_seconds(attempt))

        raise ConcurrencyError(
            f"{operation} kept conflicting with concurrent writers "
            f"after {self.max_attempts} attempts.",
            self.max_attempts,
            ErrorContext(operation=operation),
        )

    def _backoff_seconds(self, attempt: int) -> float:
        delay_ms = self.retry_base_delay_ms * (2 ** (attempt - 1))
        return delay_ms * random.uniform(0.75, 1.25) / 1000

    async def _publish(self, topics: set[LedgerTopic]) -> None:
        for topic in sorted(topics, key=lambda t: t.value):
            try:
                await self.feed.publish(topic)
            except AuctionLedgerError as e:
                # Commit already succeeded; subscribers catch up on the next change
                logger.error(
                    f"Failed to publish {topic.value} snapshot: {e.message}",
                    extra={"topic": topic.value, "error_code": e.code},
                    exc_info=True,
                )

    # ─── Committed snapshots ────────────────────────────────────

    async def load_topic(self, topic: LedgerTopic):
        """Full current value of a topic, detached from the session."""
        async with self._db.session() as db:
            if topic is LedgerTopic.TOURNAMENT:
                row = await db.get(Tournament, TOURNAMENT_DOC_ID)
                return TournamentView.model_validate(row) if row else None
            if topic is LedgerTopic.AUCTION_STATE:
                row = await db.get(AuctionState, AUCTION_STATE_DOC_ID)
                return AuctionStateView.model_validate(row) if row else None
            if topic is LedgerTopic.TEAMS:
                result = await db.execute(select(Team).order_by(Team.name, Team.id))
                return [TeamView.model_validate(t) for t in result.scalars().all()]
            result = await db.execute(
                select(Player).order_by(Player.created_at, Player.id),
            )
            return [PlayerView.model_validate(p) for p in result.scalars().all()]

    async def subscribe(
        self, topic: LedgerTopic | str, doc_id: str | None = None,
    ) -> Subscription:
        return await self.feed.subscribe(topic, doc_id)
