"""Bid Enforcement — pure legality checks for committed and proposed bids.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Each check returns the typed error on violation, None on success
    - Chains evaluate in a fixed order and the first error wins
    - place_bid order: opening floor → outbids standing bid → not same bidder → purse
    - propose order: positive amount → not same bidder → minimum increment → max bid → purse

Design Decisions:
    - Return errors instead of raising: the transaction engine and the coordinator
      raise them at their own boundary, and tests assert on values without pytest.raises
    - Team figures passed as plain ints: the same rules serve ORM rows and
      change-feed snapshots
"""

from auction_ledger.core.bid_history import Bid, latest_bid
from auction_ledger.core.domain_types import (
    OPENING_BID,
    MIN_BID_DIFFERENCE,
    HIGH_BID_THRESHOLD,
    HIGH_BID_DIFFERENCE,
)
from auction_ledger.core.errors import (
    AuctionLedgerError,
    BidValidationError,
    BidTooLowError,
    DuplicateBidderError,
    InsufficientPurseError,
    MaxBidExceededError,
    ErrorContext,
)


def check_positive_amount(amount: int) -> AuctionLedgerError | None:
    if amount <= 0:
        return BidValidationError(
            "Enter a valid bid amount greater than 0.", field="amount",
        )
    return None


def check_opening_floor(
    amount: int, opening_bid: int = OPENING_BID,
) -> AuctionLedgerError | None:
    if amount < opening_bid:
        return BidTooLowError(amount, opening_bid)
    return None


def check_outbids(
    amount: int, current_bid: int, history: list[Bid],
) -> AuctionLedgerError | None:
    """With bids on the table, the new amount must be strictly higher."""
    if history and amount <= current_bid:
        return BidTooLowError(amount, current_bid + 1)
    return None


def check_not_same_bidder(
    team_id: str, history: list[Bid],
) -> AuctionLedgerError | None:
    last = latest_bid(history)
    if last is not None and last.team_id == team_id:
        return DuplicateBidderError(team_id, ErrorContext(team_id=team_id))
    return None


def check_purse(
    team_id: str, remaining_purse: int, amount: int,
) -> AuctionLedgerError | None:
    if remaining_purse < amount:
        return InsufficientPurseError(
            remaining_purse, amount, ErrorContext(team_id=team_id),
        )
    return None


def check_max_bid(
    team_id: str, max_bid_amount: int, amount: int,
) -> AuctionLedgerError | None:
    if amount > max_bid_amount:
        return MaxBidExceededError(
            max_bid_amount, amount, ErrorContext(team_id=team_id),
        )
    return None


def effective_bid_difference(
    current_bid: int,
    requested: int,
    min_difference: int = MIN_BID_DIFFERENCE,
    high_bid_threshold: int = HIGH_BID_THRESHOLD,
    high_bid_difference: int = HIGH_BID_DIFFERENCE,
) -> int:
    """Increment the next bid must add. Forced up once bidding gets expensive."""
    if current_bid >= high_bid_threshold:
        return high_bid_difference
    return max(min_difference, requested)


def minimum_next_bid(
    history: list[Bid],
    requested_difference: int,
    opening_bid: int = OPENING_BID,
    **difference_rules: int,
) -> int:
    last = latest_bid(history)
    if last is None:
        return opening_bid
    return last.amount + effective_bid_difference(
        last.amount, requested_difference, **difference_rules,
    )


def validate_placed_bid(
    team_id: str,
    amount: int,
    remaining_purse: int,
    current_bid: int,
    history: list[Bid],
    opening_bid: int = OPENING_BID,
) -> AuctionLedgerError | None:
    """Rules checked inside place_bid against the committed snapshot."""
    return (
        check_opening_floor(amount, opening_bid)
        or check_outbids(amount, current_bid, history)
        or check_not_same_bidder(team_id, history)
        or check_purse(team_id, remaining_purse, amount)
    )


def validate_proposed_bid(
    team_id: str,
    amount: int,
    remaining_purse: int,
    max_bid_amount: int,
    combined: list[Bid],
    requested_difference: int,
    opening_bid: int = OPENING_BID,
    **difference_rules: int,
) -> AuctionLedgerError | None:
    """Rules the coordinator checks against committed ++ pending before buffering."""
    positive = check_positive_amount(amount)
    if positive:
        return positive
    duplicate = check_not_same_bidder(team_id, combined)
    if duplicate:
        return duplicate
    minimum = minimum_next_bid(
        combined, requested_difference, opening_bid, **difference_rules,
    )
    if amount < minimum:
        return BidTooLowError(amount, minimum, ErrorContext(team_id=team_id))
    return (
        check_max_bid(team_id, max_bid_amount, amount)
        or check_purse(team_id, remaining_purse, amount)
    )
