"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Auction constants default to the canonical rules in core/domain_types.py

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from auction_ledger.core import domain_types as rules


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://auction:auction@db:5432/auction"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Ledger transactions
    transaction_max_attempts: int = 5
    transaction_retry_base_delay_ms: int = 10

    # Auction rules
    opening_bid: int = rules.OPENING_BID
    min_reserve: int = rules.MIN_RESERVE
    default_team_size: int = rules.DEFAULT_TEAM_SIZE
    default_bid_difference: int = rules.DEFAULT_BID_DIFFERENCE
    min_bid_difference: int = rules.MIN_BID_DIFFERENCE
    high_bid_threshold: int = rules.HIGH_BID_THRESHOLD
    high_bid_difference: int = rules.HIGH_BID_DIFFERENCE

    # Bid batching (client side)
    pending_batch_size: int = rules.PENDING_BATCH_SIZE
    flush_debounce_ms: int = rules.FLUSH_DEBOUNCE_MS

    # API
    cors_origins: list[str] = ["http://localhost:5173"]
    admin_api_key: str = "change-me"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
