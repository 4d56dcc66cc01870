"""Stream Routes — Server-Sent Events over the ledger change feed.

Invariants:
    - One SSE stream = one change-feed subscription, closed when the client leaves
    - The first event is the current snapshot, then one event per committed change
    - Events are full snapshots serialized as JSON (null for a missing document)

Design Decisions:
    - StreamingResponse for SSE: event_generator yields formatted SSE lines
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse

from auction_ledger.api.dependencies import get_store
from auction_ledger.core.domain_types import LedgerTopic
from auction_ledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/stream", tags=["stream"])

# SSE headers prevent proxy/browser buffering of streamed events.
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def _sse_line(topic: LedgerTopic, snapshot) -> str:
    payload = {"type": topic.value, "data": jsonable_encoder(snapshot)}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.get("/{topic}")
async def stream_topic(
    topic: LedgerTopic,
    doc_id: str | None = None,
    store: LedgerStore = Depends(get_store),
):
    """Live snapshots of a topic, or of one document in a collection topic."""
    subscription = await store.subscribe(topic, doc_id)

    async def event_generator():
        try:
            async for snapshot in subscription:
                yield _sse_line(topic, snapshot)
        except asyncio.CancelledError:
            logger.info(
                "Client disconnected from %s stream", topic.value,
                extra={"topic": topic.value},
            )
            raise
        finally:
            subscription.close()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
