"""API Dependencies — FastAPI providers for the ledger services and the admin check.

Invariants:
    - Services are built once in the lifespan and read from app.state
    - Every mutating route depends on require_admin
    - The admin key is compared in constant time

Design Decisions:
    - app.state over module globals: tests swap the whole service graph by
      assigning app.state before issuing requests
"""

import hmac

from fastapi import Depends, Header, HTTPException, Request, status

from auction_ledger.config import Settings, get_settings
from auction_ledger.services.ledger_store import LedgerStore
from auction_ledger.services.setup_operations import SetupOperations
from auction_ledger.services.transaction_engine import TransactionEngine


def get_store(request: Request) -> LedgerStore:
    return request.app.state.store


def get_engine(request: Request) -> TransactionEngine:
    return request.app.state.engine


def get_setup(request: Request) -> SetupOperations:
    return request.app.state.setup


async def require_admin(
    x_admin_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Privileged actor check: the only auth concept the ledger consumes."""
    if not x_admin_key or not hmac.compare_digest(
        x_admin_key.encode(), settings.admin_api_key.encode(),
    ):
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "ADMIN_REQUIRED",
                    "message": "Admin privileges are required for this action.",
                    "category": "validation",
                    "severity": "error",
                },
            },
        )
