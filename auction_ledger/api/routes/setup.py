"""Setup Routes — tournament, team and player administration.

Invariants:
    - All routes require the admin key
    - Pydantic request schemas reject malformed input before any ledger call
"""

from fastapi import APIRouter, Depends, status

from auction_ledger.api.dependencies import get_setup, require_admin
from auction_ledger.schemas.requests import (
    PlayerCreate,
    PlayerUpdate,
    ResetTeamsRequest,
    TeamCreate,
    TeamUpdate,
    TournamentConfig,
)
from auction_ledger.services.setup_operations import SetupOperations

router = APIRouter(
    prefix="/api/v1", tags=["setup"], dependencies=[Depends(require_admin)],
)


@router.put("/tournament")
async def configure_tournament(
    body: TournamentConfig, setup: SetupOperations = Depends(get_setup),
):
    return await setup.configure_tournament(
        body.name, body.season, body.team_purse, body.team_size,
    )


@router.post("/teams", status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate, setup: SetupOperations = Depends(get_setup),
):
    return await setup.create_team(body.name, body.captain_name, body.total_purse)


@router.post("/teams/reset")
async def reset_teams(
    body: ResetTeamsRequest, setup: SetupOperations = Depends(get_setup),
):
    return await setup.reset_teams(body.total_purse)


@router.put("/teams/{team_id}")
async def update_team(
    team_id: str, body: TeamUpdate, setup: SetupOperations = Depends(get_setup),
):
    return await setup.update_team(
        team_id, body.name, body.captain_name, body.total_purse,
    )


@router.post("/players", status_code=status.HTTP_201_CREATED)
async def create_player(
    body: PlayerCreate, setup: SetupOperations = Depends(get_setup),
):
    return await setup.create_player(
        name=body.name,
        role=body.role,
        contact_number=body.contact_number,
        area=body.area,
        base_price=body.base_price,
        regular_team=body.regular_team,
        assign_to_team_id=body.assign_to_team_id,
    )


@router.put("/players/{player_id}")
async def update_player(
    player_id: str, body: PlayerUpdate, setup: SetupOperations = Depends(get_setup),
):
    return await setup.update_player(
        player_id,
        name=body.name,
        role=body.role,
        contact_number=body.contact_number,
        area=body.area,
        base_price=body.base_price,
        regular_team=body.regular_team,
    )
