"""Bid Batching Coordinator — buffers rapid bids client-side and commits them in batches.

Invariants:
    - combined view = committed ++ in_flight ++ pending, built at read time; the
      committed snapshot is never edited locally
    - A proposal is validated against the combined view before it is buffered;
      a rejected proposal leaves no trace
    - At most one batch is in flight; a flush during a flush is a no-op (False)
    - A failed flush puts its batch back in front of newer pending bids, unless the
      active player changed, in which case the batch is dropped with a notice
    - Pending bids raised against a player that is no longer active are discarded
    - An auction snapshot older (lower version) than the one held is ignored

Design Decisions:
    - One asyncio event loop, no locks: every mutation of the buffers happens
      between awaits
    - The debounce timer is an asyncio.Task; re-armed on every proposal, cancelled
      on manual flush, reset and close
    - The engine is reached only through the BidCommitter protocol, so tests drive
      the coordinator with AsyncMock fakes
    - Observers are plain callables; notices are advisory strings, never exceptions
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable

from auction_ledger.config import Settings, get_settings
from auction_ledger.core.bid_history import (
    Bid,
    BidProjection,
    bids_from_json,
    combined_history,
    project_bids,
)
from auction_ledger.core.domain_types import LedgerTopic
from auction_ledger.core.enforce_bids import (
    check_positive_amount,
    minimum_next_bid,
    validate_proposed_bid,
)
from auction_ledger.core.errors import (
    ActivePlayerChangedError,
    AuctionLedgerError,
    BidValidationError,
    ErrorContext,
    ResourceNotFoundError,
)
from auction_ledger.core.repository_protocols import (
    AuctionStateLike,
    BidCommitter,
    TeamLike,
)

logger = logging.getLogger(__name__)

PENDING_CLEARED_NOTICE = "Pending bids cleared because the active player changed."

ProjectionObserver = Callable[[BidProjection], None]
NoticeObserver = Callable[[str], None]
Subscribe = Callable[[LedgerTopic], Awaitable[AsyncIterator[Any]]]


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class BidBatchingCoordinator:
    """Client-side bid buffer in front of TransactionEngine.commit_pending_bids."""

    def __init__(
        self,
        engine: BidCommitter,
        subscribe: Subscribe | None = None,
        settings: Settings | None = None,
        clock_ms: Callable[[], int] = _now_ms,
    ):
        settings = settings or get_settings()
        self._engine = engine
        self._subscribe = subscribe
        self._clock_ms = clock_ms

        self.batch_size = settings.pending_batch_size
        self.debounce_seconds = settings.flush_debounce_ms / 1000
        self.bid_difference = settings.default_bid_difference
        self._opening_bid = settings.opening_bid
        self._difference_rules = {
            "min_difference": settings.min_bid_difference,
            "high_bid_threshold": settings.high_bid_threshold,
            "high_bid_difference": settings.high_bid_difference,
        }

        self._auction: AuctionStateLike | None = None
        self._teams: dict[str, TeamLike] = {}
        self._pending: list[Bid] = []
        self._pending_player_id: str | None = None
        self._in_flight: list[Bid] = []
        self._timer: asyncio.Task | None = None

        self._projection_observers: list[ProjectionObserver] = []
        self._notice_observers: list[NoticeObserver] = []
        self._subscriptions: list[Any] = []
        self._consumers: list[asyncio.Task] = []

    # ─── Lifecycle ──────────────────────────────────────────────

    async def start(self) -> None:
        """Subscribe to auction state and teams; initial snapshots applied before returning."""
        if self._subscribe is None:
            return
        feeds = [
            (LedgerTopic.AUCTION_STATE, self.apply_auction_snapshot),
            (LedgerTopic.TEAMS, self.apply_team_snapshots),
        ]
        for topic, apply in feeds:
            subscription = await self._subscribe(topic)
            self._subscriptions.append(subscription)
            apply(await anext(subscription))
            self._consumers.append(asyncio.create_task(self._consume(subscription, apply)))

    async def _consume(self, subscription: AsyncIterator[Any], apply: Callable) -> None:
        async for snapshot in subscription:
            apply(snapshot)

    async def close(self) -> None:
        """Cancel the timer and the subscriptions. An in-flight commit is left to finish."""
        self._cancel_timer()
        for subscription in self._subscriptions:
            subscription.close()
        for task in self._consumers:
            task.cancel()
        await asyncio.gather(*self._consumers, return_exceptions=True)
        self._subscriptions = []
        self._consumers = []

    # ─── Observers ──────────────────────────────────────────────

    def on_projection(self, callback: ProjectionObserver) -> None:
        self._projection_observers.append(callback)

    def on_notice(self, callback: NoticeObserver) -> None:
        self._notice_observers.append(callback)

    def _publish_projection(self) -> None:
        projection = self.projection()
        for callback in list(self._projection_observers):
            callback(projection)

    def _notify(self, message: str) -> None:
        logger.warning(message, extra={"operation": "bid_coordinator"})
        for callback in list(self._notice_observers):
            callback(message)

    # ─── Snapshots ──────────────────────────────────────────────

    @property
    def current_player_id(self) -> str | None:
        return self._auction.current_player_id if self._auction else None

    @property
    def pending(self) -> list[Bid]:
        return list(self._pending)

    @property
    def in_flight(self) -> list[Bid]:
        return list(self._in_flight)

    def apply_auction_snapshot(self, snapshot: AuctionStateLike | None) -> None:
        if snapshot is None:
            return
        if self._auction is not None and snapshot.version < self._auction.version:
            return
        self._auction = snapshot
        if self._pending and self._pending_player_id != snapshot.current_player_id:
            self._pending = []
            self._pending_player_id = None
            self._cancel_timer()
            self._notify(PENDING_CLEARED_NOTICE)
        self._publish_projection()

    def apply_team_snapshots(self, teams: Iterable[TeamLike]) -> None:
        self._teams = {team.id: team for team in teams}

    # ─── Derived view ───────────────────────────────────────────

    def combined_history(self) -> list[Bid]:
        committed = bids_from_json(self._auction.bid_history) if self._auction else []
        return combined_history(committed, self._in_flight, self._pending)

    def minimum_next_bid(self) -> int:
        return minimum_next_bid(
            self.combined_history(), self.bid_difference,
            self._opening_bid, **self._difference_rules,
        )

    def projection(self) -> BidProjection:
        """Standing bid as bidders should see it, pending bids included."""
        combined = self.combined_history()
        if combined:
            return project_bids(combined)
        if self._auction is None:
            return BidProjection(0, None)
        return BidProjection(self._auction.current_bid, self._auction.leading_team_id)

    # ─── Proposals ──────────────────────────────────────────────

    def _validate(self, team_id: str, amount: int) -> TeamLike:
        positive = check_positive_amount(amount)
        if positive:
            raise positive
        if not self.current_player_id:
            raise BidValidationError("No active player to bid on.", field="player_id")
        team = self._teams.get(team_id)
        if team is None:
            raise ResourceNotFoundError(
                "Team", team_id, ErrorContext(team_id=team_id),
            )
        error = validate_proposed_bid(
            team.id, amount, team.remaining_purse, team.max_bid_amount,
            self.combined_history(), self.bid_difference,
            self._opening_bid, **self._difference_rules,
        )
        if error:
            raise error
        return team

    async def propose_bid(self, team_id: str, amount: int) -> Bid:
        """Validate, buffer, project, hint; flush when the batch is full."""
        team = self._validate(team_id, amount)
        bid = Bid(team.id, team.name, amount, self._clock_ms())
        self._pending = [*self._pending, bid]
        self._pending_player_id = self.current_player_id
        self._publish_projection()

        try:
            await self._engine.update_live_bid(team.id, amount)
        except AuctionLedgerError as e:
            self._notify(f"Live bid update failed: {e.message}")

        if len(self._pending) >= self.batch_size and not self._in_flight:
            await self.flush()
        else:
            self._arm_timer()
        return bid

    # ─── Flushing ───────────────────────────────────────────────

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.create_task(self._flush_after_debounce())

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _flush_after_debounce(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._timer = None
        await self.flush()

    async def flush(self) -> bool:
        """Commit every pending bid as one batch. False when the batch was not committed."""
        self._cancel_timer()
        if self._in_flight:
            return False
        if not self._pending:
            return True

        batch, player_id = self._pending, self._pending_player_id
        self._pending, self._pending_player_id = [], None
        self._in_flight = batch
        try:
            committed = await self._engine.commit_pending_bids(player_id, batch)
        except ActivePlayerChangedError:
            self._in_flight = []
            self._notify(PENDING_CLEARED_NOTICE)
            self._publish_projection()
            return False
        except AuctionLedgerError as e:
            self._in_flight = []
            self._requeue(batch, player_id)
            self._notify(f"Could not save bids: {e.message}")
            return False

        # Committed snapshot first, so the combined view never loses the batch
        self.apply_auction_snapshot(committed)
        self._in_flight = []
        logger.info(
            f"Flushed {len(batch)} bid(s) for player {player_id}",
            extra={"operation": "flush", "player_id": player_id, "bid_count": len(batch)},
        )
        return True

    async def sync_now(self) -> bool:
        return await self.flush()

    def _requeue(self, batch: list[Bid], player_id: str | None) -> None:
        if player_id != self.current_player_id:
            self._notify(PENDING_CLEARED_NOTICE)
            self._publish_projection()
            return
        self._pending = [*batch, *self._pending]
        self._pending_player_id = player_id

    def reset(self) -> None:
        """Drop pending bids and the timer (after the auction is stopped)."""
        self._cancel_timer()
        self._pending = []
        self._pending_player_id = None
        self._publish_projection()
