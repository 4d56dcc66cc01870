"""Team Ledger — pure purse/roster arithmetic for every team mutation.

Invariants:
    - Each function returns the complete set of changed team fields
    - max_bid_amount is recomputed in every result that touches purse or roster
    - purchase keeps remaining_purse == total_purse - spent_amount
    - refund floors spent_amount and players_count at 0
    - draft never touches money
"""

from auction_ledger.core.domain_types import MIN_RESERVE
from auction_ledger.core.max_bid import calculate_max_bid


def baseline(total_purse: int, team_size: int, min_reserve: int = MIN_RESERVE) -> dict:
    """A fresh team: full purse, nothing spent, empty roster."""
    return {
        "total_purse": total_purse,
        "remaining_purse": total_purse,
        "spent_amount": 0,
        "players_count": 0,
        "max_bid_amount": calculate_max_bid(total_purse, 0, team_size, min_reserve),
    }


def purchase(
    remaining_purse: int, spent_amount: int, players_count: int,
    amount: int, team_size: int, min_reserve: int = MIN_RESERVE,
) -> dict:
    next_remaining = remaining_purse - amount
    next_count = players_count + 1
    return {
        "remaining_purse": next_remaining,
        "spent_amount": spent_amount + amount,
        "players_count": next_count,
        "max_bid_amount": calculate_max_bid(
            next_remaining, next_count, team_size, min_reserve,
        ),
    }


def refund(
    remaining_purse: int, spent_amount: int, players_count: int,
    amount: int, team_size: int, min_reserve: int = MIN_RESERVE,
) -> dict:
    next_remaining = remaining_purse + amount
    next_count = max(0, players_count - 1)
    return {
        "remaining_purse": next_remaining,
        "spent_amount": max(0, spent_amount - amount),
        "players_count": next_count,
        "max_bid_amount": calculate_max_bid(
            next_remaining, next_count, team_size, min_reserve,
        ),
    }


def draft(
    remaining_purse: int, players_count: int,
    team_size: int, min_reserve: int = MIN_RESERVE,
) -> dict:
    next_count = players_count + 1
    return {
        "players_count": next_count,
        "max_bid_amount": calculate_max_bid(
            remaining_purse, next_count, team_size, min_reserve,
        ),
    }
