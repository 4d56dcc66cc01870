"""Auction Routes — HTTP entry points for the live auction operations.

Invariants:
    - Every route here mutates the ledger and depends on require_admin
    - Routes are thin: one engine call each, errors propagate to the global handlers
    - Responses are committed snapshots, never in-transaction objects
"""

from fastapi import APIRouter, Depends, Response, status

from auction_ledger.api.dependencies import get_engine, require_admin
from auction_ledger.core.bid_history import Bid
from auction_ledger.schemas.requests import (
    AssignPlayerRequest,
    BidRequest,
    CommitBidsRequest,
    SelectPlayerRequest,
)
from auction_ledger.services.transaction_engine import TransactionEngine

router = APIRouter(
    prefix="/api/v1", tags=["auction"], dependencies=[Depends(require_admin)],
)


@router.post("/auction/player")
async def set_current_player(
    body: SelectPlayerRequest, engine: TransactionEngine = Depends(get_engine),
):
    return await engine.set_current_player(body.player_id)


@router.post("/auction/start")
async def start_auction(engine: TransactionEngine = Depends(get_engine)):
    return await engine.start_auction()


@router.post("/auction/stop")
async def stop_auction(engine: TransactionEngine = Depends(get_engine)):
    return await engine.stop_auction()


@router.post("/auction/bids")
async def place_bid(
    body: BidRequest, engine: TransactionEngine = Depends(get_engine),
):
    return await engine.place_bid(body.team_id, body.amount)


@router.post("/auction/bids/batch")
async def commit_pending_bids(
    body: CommitBidsRequest, engine: TransactionEngine = Depends(get_engine),
):
    """Append a buffered batch; an empty batch commits nothing."""
    bids = [
        Bid(b.team_id, b.team_name, b.amount, b.timestamp) for b in body.bids
    ]
    state = await engine.commit_pending_bids(body.player_id, bids)
    if state is None:
        return {"committed": 0}
    return {"committed": len(bids), "auction_state": state}


@router.put("/auction/live-bid", status_code=status.HTTP_204_NO_CONTENT)
async def update_live_bid(
    body: BidRequest, engine: TransactionEngine = Depends(get_engine),
):
    await engine.update_live_bid(body.team_id, body.amount)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/auction/bids/{index}")
async def delete_bid_at_index(
    index: int, engine: TransactionEngine = Depends(get_engine),
):
    return await engine.delete_bid_at_index(index)


@router.post("/auction/sold")
async def mark_player_sold(engine: TransactionEngine = Depends(get_engine)):
    change = await engine.mark_player_sold()
    return {"player": change.player, "team": change.team}


@router.post("/auction/unsold")
async def mark_player_unsold(engine: TransactionEngine = Depends(get_engine)):
    return await engine.mark_player_unsold()


@router.post("/players/{player_id}/assign")
async def assign_player_to_team(
    player_id: str,
    body: AssignPlayerRequest,
    engine: TransactionEngine = Depends(get_engine),
):
    """Draft without purse: roster slot taken, money untouched."""
    change = await engine.assign_player_to_team_no_purse(player_id, body.team_id)
    return {"player": change.player, "team": change.team}


@router.delete("/players/{player_id}")
async def delete_player(
    player_id: str, engine: TransactionEngine = Depends(get_engine),
):
    team = await engine.delete_player(player_id)
    return {"deleted": player_id, "refunded_team": team}
