"""View Routes — read-only snapshots and derived views for bidders and admins.

Invariants:
    - Read-only: no route here opens a ledger transaction
    - Derived lists are computed by core/auction_views over committed snapshots
"""

from fastapi import APIRouter, Depends

from auction_ledger.api.dependencies import get_store
from auction_ledger.core import auction_views
from auction_ledger.core.domain_types import LedgerTopic
from auction_ledger.core.errors import ResourceNotFoundError
from auction_ledger.services.ledger_store import LedgerStore

router = APIRouter(prefix="/api/v1", tags=["views"])


async def _current_player_id(store: LedgerStore) -> str | None:
    state = await store.load_topic(LedgerTopic.AUCTION_STATE)
    return state.current_player_id if state else None


@router.get("/tournament")
async def get_tournament(store: LedgerStore = Depends(get_store)):
    return await store.load_topic(LedgerTopic.TOURNAMENT)


@router.get("/auction")
async def get_auction_state(store: LedgerStore = Depends(get_store)):
    return await store.load_topic(LedgerTopic.AUCTION_STATE)


@router.get("/teams")
async def list_teams(store: LedgerStore = Depends(get_store)):
    return await store.load_topic(LedgerTopic.TEAMS)


@router.get("/teams/roster-counts")
async def get_roster_counts(store: LedgerStore = Depends(get_store)):
    """SOLD/DRAFTED players per team, recomputed from the player documents."""
    players = await store.load_topic(LedgerTopic.PLAYERS)
    return auction_views.roster_counts(players)


@router.get("/players")
async def list_players(store: LedgerStore = Depends(get_store)):
    return await store.load_topic(LedgerTopic.PLAYERS)


@router.get("/players/available")
async def list_available_players(store: LedgerStore = Depends(get_store)):
    players = await store.load_topic(LedgerTopic.PLAYERS)
    return auction_views.available_players(players, await _current_player_id(store))


@router.get("/players/completed")
async def list_completed_players(store: LedgerStore = Depends(get_store)):
    players = await store.load_topic(LedgerTopic.PLAYERS)
    return auction_views.completed_players(players)


@router.get("/players/random")
async def pick_random_player(store: LedgerStore = Depends(get_store)):
    """Uniform pick from the available pool; null when nobody is left."""
    players = await store.load_topic(LedgerTopic.PLAYERS)
    return auction_views.pick_random_player(players, await _current_player_id(store))


@router.get("/players/{player_id}")
async def get_player(player_id: str, store: LedgerStore = Depends(get_store)):
    players = await store.load_topic(LedgerTopic.PLAYERS)
    for player in players:
        if player.id == player_id:
            return player
    raise ResourceNotFoundError("Player", player_id)
