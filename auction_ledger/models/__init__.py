"""ORM Models — one SQLAlchemy model per ledger aggregate.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every aggregate carries a version column: the optimistic-concurrency token
      the ledger store retries on

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so metadata is complete before create_all/migrations
"""

from auction_ledger.models.tournament import Tournament  # noqa: F401
from auction_ledger.models.team import Team  # noqa: F401
from auction_ledger.models.player import Player  # noqa: F401
from auction_ledger.models.auction_state import AuctionState  # noqa: F401
