"""Error Hierarchy — typed, categorized exceptions for every ledger failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation and invariant errors (400/409) are recoverable; infrastructure errors are critical
    - Errors raised inside a transaction abort it with no partial mutation
    - to_response() produces the REST envelope; message is safe to show to the bidder

Design Decisions:
    - Single hierarchy with AuctionLedgerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    player_id: str | None = None
    team_id: str | None = None
    debug_info: dict[str, Any] | None = None


class AuctionLedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def recoverable(self) -> bool:
        return self.severity is not ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "player_id": self.context.player_id,
                    "team_id": self.context.team_id,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class BidValidationError(AuctionLedgerError):
    """Malformed bid input rejected before any store call."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BID_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class SetupValidationError(AuctionLedgerError):
    """Tournament/team/player setup input out of range."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SETUP_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Invariant Violations (400/409) ─────────────────────────────

class AuctionNotLiveError(AuctionLedgerError):
    """Operation needs a LIVE auction with an active player."""
    def __init__(self, action: str, context: ErrorContext | None = None):
        super().__init__(
            f"No live auction to {action}.",
            "AUCTION_NOT_LIVE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class InvalidAuctionTransitionError(AuctionLedgerError):
    """Requested auction status transition is not in the state machine."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_AUCTION_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class BidTooLowError(AuctionLedgerError):
    """Bid below the opening floor or not above the standing bid."""
    def __init__(self, amount: int, minimum: int, context: ErrorContext | None = None):
        super().__init__(
            f"Bid {amount} is too low; minimum acceptable bid is {minimum}.",
            "BID_TOO_LOW", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.amount = amount
        self.minimum = minimum


class DuplicateBidderError(AuctionLedgerError):
    """The same team cannot bid twice in a row."""
    def __init__(self, team_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Same team cannot bid twice in a row.",
            "DUPLICATE_CONSECUTIVE_BIDDER", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.team_id = team_id


class InsufficientPurseError(AuctionLedgerError):
    """Team's remaining purse cannot cover the amount."""
    def __init__(
        self, remaining_purse: int, amount: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Team purse is insufficient for this bid "
            f"(remaining {remaining_purse}, needed {amount}).",
            "INSUFFICIENT_PURSE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.remaining_purse = remaining_purse
        self.amount = amount


class MaxBidExceededError(AuctionLedgerError):
    """Bid would leave too little purse for the team's remaining slots."""
    def __init__(self, max_bid: int, amount: int, context: ErrorContext | None = None):
        super().__init__(
            f"Max bid for this team is {max(0, max_bid)} based on remaining slots.",
            "MAX_BID_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.max_bid = max_bid
        self.amount = amount


class PlayerAlreadySoldError(AuctionLedgerError):
    """Player is already SOLD or DRAFTED."""
    def __init__(self, player_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Player '{player_id}' is already assigned to a team.",
            "PLAYER_ALREADY_SOLD", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class EmptyBidHistoryError(AuctionLedgerError):
    """mark_player_sold needs at least one bid."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "At least one bid is required to mark SOLD.",
            "EMPTY_BID_HISTORY", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class BidsAlreadyPlacedError(AuctionLedgerError):
    """A player with any bid cannot be marked unsold."""
    def __init__(self, bid_count: int, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot mark unsold after bids have been placed ({bid_count} bid(s)).",
            "BIDS_ALREADY_PLACED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class BidIndexError(AuctionLedgerError):
    """delete_bid_at_index called with an index outside the history."""
    def __init__(self, index: int, size: int, context: ErrorContext | None = None):
        super().__init__(
            f"Bid not found at index {index} (history has {size} bid(s)).",
            "BID_NOT_FOUND", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ActivePlayerError(AuctionLedgerError):
    """Operation needs an active player, or refuses to touch the active one."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "ACTIVE_PLAYER_CONFLICT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Logical Staleness (409) ────────────────────────────────────

class ActivePlayerChangedError(AuctionLedgerError):
    """A pending batch was raised against a player that is no longer active."""
    def __init__(
        self, expected_player_id: str, actual_player_id: str | None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "Active player changed before bids were committed.",
            "ACTIVE_PLAYER_CHANGED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.expected_player_id = expected_player_id
        self.actual_player_id = actual_player_id


class ResourceNotFoundError(AuctionLedgerError):
    """Requested document does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (503) ────────────────────────────────

class DatabaseError(AuctionLedgerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ConcurrencyError(AuctionLedgerError):
    """Conflicting writes kept winning until the retry budget ran out."""
    def __init__(self, message: str, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.attempts = attempts
