"""Max-Bid Calculator — derives a team's largest legal bid from purse and open slots.

Invariants:
    - Full team (no remaining slots) ⇒ 0
    - Otherwise remaining_purse - (remaining_slots - 1) * min_reserve, may be negative
    - The raw value is what bids are compared against; display_max_bid clamps for humans
"""

from auction_ledger.core.domain_types import MIN_RESERVE


def remaining_slots(players_count: int, team_size: int) -> int:
    return max(0, team_size - players_count)


def calculate_max_bid(
    remaining_purse: int,
    players_count: int,
    team_size: int,
    min_reserve: int = MIN_RESERVE,
) -> int:
    """Reserve min_reserve for every other slot still to fill, bid the rest."""
    slots = remaining_slots(players_count, team_size)
    if slots == 0:
        return 0
    return remaining_purse - (slots - 1) * min_reserve


def display_max_bid(max_bid_amount: int) -> int:
    return max(0, max_bid_amount)
