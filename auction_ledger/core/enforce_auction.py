"""Auction State Machine — pure transition guards and state baselines.

Invariants:
    - IDLE → LIVE only via start, and only with an active player
    - LIVE → IDLE only via sold, unsold or stop
    - bid/sell/unsold while IDLE always fail
    - A SOLD or DRAFTED player is never biddable, selectable or re-assignable
    - Baselines are the only shapes AuctionState is reset to

Design Decisions:
    - Separated from enforce_bids: different lifecycle — transitions are checked on
      control actions, bid rules on every bid
    - Baselines returned as field dicts: the engine assigns them onto the ORM row,
      tests compare them directly
"""

from auction_ledger.core.bid_history import Bid
from auction_ledger.core.domain_types import (
    AuctionStatus,
    PlayerStatus,
    OPENING_BID,
)
from auction_ledger.core.errors import (
    AuctionLedgerError,
    AuctionNotLiveError,
    InvalidAuctionTransitionError,
    PlayerAlreadySoldError,
    EmptyBidHistoryError,
    BidsAlreadyPlacedError,
    BidIndexError,
    ActivePlayerError,
    ActivePlayerChangedError,
    ErrorContext,
)


def idle_baseline() -> dict:
    """State after a sale or an unsold close: no active player at all."""
    return {
        "current_player_id": None,
        "current_bid": 0,
        "leading_team_id": None,
        "status": AuctionStatus.IDLE.value,
        "bid_history": [],
    }


def no_bids_baseline(opening_bid: int = OPENING_BID) -> dict:
    """Active player kept, bidding rewound to the opening amount."""
    return {
        "current_bid": opening_bid,
        "leading_team_id": None,
        "bid_history": [],
    }


def selected_player_state(player_id: str, opening_bid: int = OPENING_BID) -> dict:
    return {
        "current_player_id": player_id,
        "status": AuctionStatus.IDLE.value,
        **no_bids_baseline(opening_bid),
    }


def require_live(
    status: str, current_player_id: str | None, action: str,
) -> AuctionLedgerError | None:
    if status != AuctionStatus.LIVE or not current_player_id:
        return AuctionNotLiveError(
            action, ErrorContext(operation=action, player_id=current_player_id),
        )
    return None


def check_can_start(
    status: str, current_player_id: str | None,
) -> AuctionLedgerError | None:
    if status == AuctionStatus.LIVE:
        return InvalidAuctionTransitionError("Auction is already live.")
    if not current_player_id:
        return InvalidAuctionTransitionError(
            "Select a player before starting the auction.",
        )
    return None


def check_can_stop(status: str) -> AuctionLedgerError | None:
    if status != AuctionStatus.LIVE:
        return InvalidAuctionTransitionError("Auction is not live.")
    return None


def check_can_select_player(status: str) -> AuctionLedgerError | None:
    if status == AuctionStatus.LIVE:
        return InvalidAuctionTransitionError(
            "Stop the live auction before changing players.",
        )
    return None


def check_player_unassigned(
    player_id: str, player_status: str, sold_to_team_id: str | None = None,
) -> AuctionLedgerError | None:
    if PlayerStatus(player_status).is_rostered:
        return PlayerAlreadySoldError(
            player_id,
            ErrorContext(player_id=player_id, team_id=sold_to_team_id),
        )
    return None


def check_has_bids(history: list[Bid]) -> AuctionLedgerError | None:
    if not history:
        return EmptyBidHistoryError()
    return None


def check_no_bids(history: list[Bid]) -> AuctionLedgerError | None:
    if history:
        return BidsAlreadyPlacedError(len(history))
    return None


def check_bid_index(index: int, history: list[Bid]) -> AuctionLedgerError | None:
    if index < 0 or index >= len(history):
        return BidIndexError(index, len(history))
    return None


def check_active_player(current_player_id: str | None) -> AuctionLedgerError | None:
    if not current_player_id:
        return ActivePlayerError("No active player to update.")
    return None


def check_not_active_player(
    player_id: str, current_player_id: str | None, action: str = "delete",
) -> AuctionLedgerError | None:
    if player_id == current_player_id:
        return ActivePlayerError(
            f"Cannot {action} the player currently on the auction block.",
            ErrorContext(player_id=player_id),
        )
    return None


def check_batch_player(
    expected_player_id: str, current_player_id: str | None,
) -> AuctionLedgerError | None:
    """A pending batch may only land on the player it was raised against."""
    if current_player_id != expected_player_id:
        return ActivePlayerChangedError(
            expected_player_id, current_player_id,
            ErrorContext(operation="commit_pending_bids", player_id=expected_player_id),
        )
    return None
