"""Change Feed — verifies snapshot fan-out with a fake loader (no database).

Invariants:
    - Current snapshot first, then one per publish
    - Older loads never overwrite newer ones
    - Closed subscriptions stop iterating and stop receiving
"""

import asyncio

from auction_ledger.core.domain_types import LedgerTopic
from auction_ledger.infrastructure.change_feed import ChangeFeed


class _Doc:
    def __init__(self, id, value):
        self.id = id
        self.value = value


class _FakeLoader:
    def __init__(self):
        self.values = {
            LedgerTopic.TEAMS: [_Doc("a", 1), _Doc("b", 2)],
            LedgerTopic.TOURNAMENT: "v1",
        }
        self.calls = 0

    async def __call__(self, topic):
        self.calls += 1
        return self.values.get(topic)


async def test_subscribe_delivers_current_snapshot_first():
    feed = ChangeFeed(_FakeLoader())
    subscription = await feed.subscribe(LedgerTopic.TOURNAMENT)
    assert await anext(subscription) == "v1"


async def test_publish_reaches_only_topic_subscribers():
    loader = _FakeLoader()
    feed = ChangeFeed(loader)
    tournament = await feed.subscribe(LedgerTopic.TOURNAMENT)
    teams = await feed.subscribe(LedgerTopic.TEAMS)
    await anext(tournament)
    await anext(teams)

    loader.values[LedgerTopic.TOURNAMENT] = "v2"
    await feed.publish(LedgerTopic.TOURNAMENT)

    assert await asyncio.wait_for(anext(tournament), timeout=1) == "v2"
    assert teams._queue.empty()


async def test_publish_without_subscribers_skips_load():
    loader = _FakeLoader()
    feed = ChangeFeed(loader)
    await feed.publish(LedgerTopic.TEAMS)
    assert loader.calls == 0


async def test_document_subscription_selects_by_id():
    loader = _FakeLoader()
    feed = ChangeFeed(loader)
    subscription = await feed.subscribe(LedgerTopic.TEAMS, "b")
    assert (await anext(subscription)).value == 2

    loader.values[LedgerTopic.TEAMS] = [_Doc("a", 1)]
    await feed.publish(LedgerTopic.TEAMS)
    assert await anext(subscription) is None


async def test_stale_sequence_is_dropped():
    feed = ChangeFeed(_FakeLoader())
    subscription = await feed.subscribe(LedgerTopic.TOURNAMENT)
    await anext(subscription)

    subscription._deliver(10, "newer")
    subscription._deliver(9, "older")

    assert await anext(subscription) == "newer"
    assert subscription._queue.empty()


async def test_close_ends_iteration_and_unregisters():
    feed = ChangeFeed(_FakeLoader())
    subscription = await feed.subscribe(LedgerTopic.TOURNAMENT)
    await anext(subscription)

    subscription.close()

    assert feed.subscriber_count(LedgerTopic.TOURNAMENT) == 0
    received = [item async for item in subscription]
    assert received == []


async def test_context_manager_closes_subscription():
    feed = ChangeFeed(_FakeLoader())
    async with await feed.subscribe("tournament") as subscription:
        assert feed.subscriber_count(LedgerTopic.TOURNAMENT) == 1
    assert subscription.closed
    assert feed.subscriber_count(LedgerTopic.TOURNAMENT) == 0
