"""Change Feed — in-process subscribe(topic | document) → stream of full snapshots.

Invariants:
    - A new subscription receives the current snapshot first, then one snapshot per
      committed change to its topic, until closed
    - Snapshots are full values (no diffs); a subscriber never sees an older snapshot
      after a newer one (load sequence numbers, stale loads dropped)
    - Document subscriptions on a collection receive that document or None once deleted
    - Publishing never blocks on a slow subscriber (unbounded per-subscriber queue)

Design Decisions:
    - Loader injected as a coroutine function: the feed knows topics, not tables
    - Publish re-reads after commit instead of trusting in-transaction objects,
      so subscribers only ever see committed state
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable

from auction_ledger.core.domain_types import LedgerTopic

logger = logging.getLogger(__name__)

SnapshotLoader = Callable[[LedgerTopic], Awaitable[Any]]

_CLOSED = object()


def _select(snapshot: Any, doc_id: str | None) -> Any:
    if doc_id is None or not isinstance(snapshot, list):
        return snapshot
    return next((doc for doc in snapshot if doc.id == doc_id), None)


class Subscription:
    """Async iterator over snapshots of one topic (optionally one document)."""

    def __init__(self, feed: "ChangeFeed", topic: LedgerTopic, doc_id: str | None):
        self.topic = topic
        self.doc_id = doc_id
        self.closed = False
        self._feed = feed
        self._queue: asyncio.Queue = asyncio.Queue()
        self._last_seq = 0

    def _deliver(self, seq: int, snapshot: Any) -> None:
        if self.closed or seq <= self._last_seq:
            return
        self._last_seq = seq
        self._queue.put_nowait(_select(snapshot, self.doc_id))

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Any:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._remove(self)
        self._queue.put_nowait(_CLOSED)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class ChangeFeed:
    """Fan-out of committed snapshots to subscribers, per topic."""

    def __init__(self, loader: SnapshotLoader):
        self._loader = loader
        self._subscribers: dict[LedgerTopic, list[Subscription]] = defaultdict(list)
        self._seq = 0

    async def _load(self, topic: LedgerTopic) -> tuple[int, Any]:
        # Sequence taken before the read: a later load observes fresher state
        self._seq += 1
        seq = self._seq
        return seq, await self._loader(topic)

    async def subscribe(
        self, topic: LedgerTopic | str, doc_id: str | None = None,
    ) -> Subscription:
        topic = LedgerTopic(topic)
        subscription = Subscription(self, topic, doc_id)
        self._subscribers[topic].append(subscription)
        seq, snapshot = await self._load(topic)
        subscription._deliver(seq, snapshot)
        logger.debug(
            "Subscribed to %s", topic.value,
            extra={"topic": topic.value},
        )
        return subscription

    async def publish(self, topic: LedgerTopic) -> None:
        """Reload the topic and push the snapshot to every live subscriber."""
        if not self._subscribers.get(topic):
            return
        seq, snapshot = await self._load(topic)
        for subscription in list(self._subscribers[topic]):
            subscription._deliver(seq, snapshot)

    def subscriber_count(self, topic: LedgerTopic) -> int:
        return len(self._subscribers.get(topic, []))

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def close_all(self) -> None:
        for subscribers in list(self._subscribers.values()):
            for subscription in list(subscribers):
                subscription.close()
