"""Domain Types — identity types, enums and auction constants.

Invariants:
    - TeamId, PlayerId wrap document ids — never use bare str in domain logic
    - All valid states encoded as Enums — no raw string matching
    - Auction constants live here and nowhere else (config may override per deployment)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to the stored column value
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

TeamId = NewType("TeamId", str)
PlayerId = NewType("PlayerId", str)

TOURNAMENT_DOC_ID = "current"
AUCTION_STATE_DOC_ID = "current"


# ─── Auction Constants ───────────────────────────────────────────

OPENING_BID: int = 20_000           # floor for the first bid on a player
MIN_RESERVE: int = 20_000           # purse kept aside per future roster slot
DEFAULT_TEAM_SIZE: int = 9
DEFAULT_BID_DIFFERENCE: int = 5_000
MIN_BID_DIFFERENCE: int = 5_000
HIGH_BID_THRESHOLD: int = 100_000   # above this the increment is forced up
HIGH_BID_DIFFERENCE: int = 10_000
PENDING_BATCH_SIZE: int = 4
FLUSH_DEBOUNCE_MS: int = 800

DEFAULT_TOURNAMENT_NAME = "Softball Auction"
DEFAULT_TOURNAMENT_SEASON = "2025"


# ─── Enums ───────────────────────────────────────────────────────

class PlayerStatus(str, Enum):
    """Player lifecycle. UNSOLD and AVAILABLE both feed the biddable pool."""
    AVAILABLE = "AVAILABLE"
    UNSOLD = "UNSOLD"
    DRAFTED = "DRAFTED"
    SOLD = "SOLD"

    @property
    def is_rostered(self) -> bool:
        return self in (PlayerStatus.SOLD, PlayerStatus.DRAFTED)


class AuctionStatus(str, Enum):
    """AuctionState.status. SOLD is legacy and never written by the engine."""
    IDLE = "IDLE"
    LIVE = "LIVE"
    SOLD = "SOLD"


class PlayerRole(str, Enum):
    BATSMAN = "Batsman"
    WICKET_KEEPER_BATSMAN = "Wicket-keeper Batsman"
    FAST_BOWLER = "Fast Bowler"
    SPIN_BOWLER = "Spin Bowler"
    ALL_ROUNDER_PACE = "All-Rounder (Pace)"
    ALL_ROUNDER_SPIN = "All-Rounder (Spin)"


class LedgerTopic(str, Enum):
    """Change-feed topics — one per persisted aggregate."""
    TOURNAMENT = "tournament"
    AUCTION_STATE = "auction_state"
    TEAMS = "teams"
    PLAYERS = "players"
