"""Auction Ledger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AuctionLedgerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, ledger store, engine and setup operations built on startup via
      the lifespan context manager and exposed on app.state
    - The tournament and auction-state singletons exist before the first request

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Schema creation is Alembic's job; the lifespan only ensures the singleton rows
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auction_ledger import __version__
from auction_ledger.api.error_handlers import register_error_handlers
from auction_ledger.api.routes import auction, health, setup, stream, views
from auction_ledger.config import Settings, get_settings
from auction_ledger.infrastructure.database import DatabaseSessionManager, init_db
from auction_ledger.infrastructure.observability import setup_logging
from auction_ledger.services.ledger_store import LedgerStore
from auction_ledger.services.setup_operations import SetupOperations
from auction_ledger.services.transaction_engine import TransactionEngine

logger = logging.getLogger(__name__)


def build_services(
    app: FastAPI, db_manager: DatabaseSessionManager, settings: Settings,
) -> None:
    """Wire the service graph onto app.state (shared by lifespan and tests)."""
    store = LedgerStore(
        db_manager,
        max_attempts=settings.transaction_max_attempts,
        retry_base_delay_ms=settings.transaction_retry_base_delay_ms,
    )
    engine = TransactionEngine(store, settings)
    app.state.db_manager = db_manager
    app.state.store = store
    app.state.engine = engine
    app.state.setup = SetupOperations(store, engine, settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    build_services(app, db_manager, settings)
    await app.state.setup.ensure_tournament()
    await app.state.setup.ensure_auction_state()
    logger.info("Auction Ledger API started")
    yield
    logger.info("Auction Ledger API shutting down")
    app.state.store.feed.close_all()
    await db_manager.dispose()


app = FastAPI(
    title="Auction Ledger API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(views.router)
app.include_router(auction.router)
app.include_router(setup.router)
app.include_router(stream.router)

register_error_handlers(app)
