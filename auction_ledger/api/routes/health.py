"""Health Probes — process liveness and ledger readiness.

Invariants:
    - GET /health/ answers 200 while the process runs, without touching the database
    - GET /health/ready answers 503 until the database answers SELECT 1 and the
      tournament and auction-state singletons exist
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from auction_ledger import __version__
from auction_ledger.core.domain_types import LedgerTopic

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

_SINGLETONS = (LedgerTopic.TOURNAMENT, LedgerTopic.AUCTION_STATE)


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "auction-ledger-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the ledger can be read and written."""
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None or not await db_manager.health_check():
        return _not_ready("database_unavailable")

    store = request.app.state.store
    missing = [t.value for t in _SINGLETONS if await store.load_topic(t) is None]
    if missing:
        logger.warning(
            f"Ledger singletons missing: {', '.join(missing)}",
            extra={"operation": "readiness_check"},
        )
        return _not_ready("ledger_not_initialized")

    return {
        "status": "ready",
        "checks": {"database": "healthy", "ledger": "initialized"},
    }


def _not_ready(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason},
    )
