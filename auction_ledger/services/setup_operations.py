"""Setup Operations — tournament, team and player administration outside live bidding.

Invariants:
    - Every operation is one ledger transaction and publishes through the change feed
    - ensure_* create the singleton documents at most once, even when raced
    - Team (re)baselines always satisfy remaining_purse == total_purse, spent 0, players 0
    - update_player never touches status or sold fields
    - A player created with assign_to_team_id is drafted in the same transaction

Design Decisions:
    - Kept apart from the transaction engine: these run before or between auctions,
      not on the bidding hot path
    - Blank tournament name/season fall back to defaults instead of failing
"""

import logging
from datetime import datetime, timezone

from auction_ledger.config import Settings
from auction_ledger.core import team_ledger
from auction_ledger.core.domain_types import (
    AUCTION_STATE_DOC_ID,
    DEFAULT_TOURNAMENT_NAME,
    DEFAULT_TOURNAMENT_SEASON,
    TOURNAMENT_DOC_ID,
    LedgerTopic,
    PlayerRole,
    PlayerStatus,
)
from auction_ledger.core.enforce_auction import idle_baseline
from auction_ledger.core.errors import SetupValidationError
from auction_ledger.models import AuctionState, Player, Team, Tournament
from auction_ledger.schemas.ledger import (
    AuctionStateView,
    PlayerView,
    TeamView,
    TournamentView,
)
from auction_ledger.services.ledger_store import LedgerStore, LedgerTransaction, assign
from auction_ledger.services.transaction_engine import TransactionEngine

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SetupOperations:
    """Administrative ledger writes: singletons, teams, player pool."""

    def __init__(self, store: LedgerStore, engine: TransactionEngine, settings: Settings):
        self.store = store
        self.engine = engine
        self.settings = settings

    # ─── Singletons ─────────────────────────────────────────────

    async def ensure_tournament(self) -> TournamentView:
        async def work(tx: LedgerTransaction):
            tournament = await tx.tournament()
            if tournament is None:
                tournament = Tournament(
                    id=TOURNAMENT_DOC_ID,
                    name=DEFAULT_TOURNAMENT_NAME,
                    season=DEFAULT_TOURNAMENT_SEASON,
                    team_purse=0,
                    team_size=self.settings.default_team_size,
                )
                tx.add(tournament, LedgerTopic.TOURNAMENT)
                await tx.db.flush()
            return tournament

        tournament = await self.store.run_transaction(
            "ensure_tournament", work, retry_on_duplicate=True,
        )
        return TournamentView.model_validate(tournament)

    async def ensure_auction_state(self) -> AuctionStateView:
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state_or_none()
            if state is None:
                state = AuctionState(id=AUCTION_STATE_DOC_ID, **idle_baseline())
                tx.add(state, LedgerTopic.AUCTION_STATE)
                await tx.db.flush()
            return state

        state = await self.store.run_transaction(
            "ensure_auction_state", work, retry_on_duplicate=True,
        )
        return AuctionStateView.model_validate(state)

    async def configure_tournament(
        self, name: str, season: str, team_purse: int, team_size: int,
    ) -> TournamentView:
        if team_purse < 0:
            raise SetupValidationError("Team purse cannot be negative.", "team_purse")
        if team_size < 1:
            raise SetupValidationError("Team size must be at least 1.", "team_size")

        async def work(tx: LedgerTransaction):
            tournament = await tx.tournament()
            if tournament is None:
                tournament = Tournament(id=TOURNAMENT_DOC_ID)
                tx.add(tournament, LedgerTopic.TOURNAMENT)
            tournament.name = _clean(name) or DEFAULT_TOURNAMENT_NAME
            tournament.season = _clean(season) or DEFAULT_TOURNAMENT_SEASON
            tournament.team_purse = team_purse
            tournament.team_size = team_size
            tx.touch(LedgerTopic.TOURNAMENT)
            return tournament

        tournament = await self.store.run_transaction("configure_tournament", work)
        logger.info(
            f"Tournament configured: purse={team_purse}, size={team_size}",
            extra={"operation": "configure_tournament"},
        )
        return TournamentView.model_validate(tournament)

    # ─── Teams ──────────────────────────────────────────────────

    async def create_team(
        self, name: str, captain_name: str, total_purse: int | None = None,
    ) -> TeamView:
        """New team on a full purse; purse defaults to the tournament's team_purse."""
        async def work(tx: LedgerTransaction):
            tournament = await tx.tournament()
            purse = total_purse
            if purse is None:
                purse = tournament.team_purse if tournament else 0
            if purse <= 0:
                raise SetupValidationError(
                    "Team purse must be greater than 0.", "total_purse",
                )
            team_size = tournament.team_size if tournament else self.settings.default_team_size
            team = Team(
                name=name.strip(),
                captain_name=captain_name.strip(),
                **team_ledger.baseline(purse, team_size, self.settings.min_reserve),
            )
            tx.add(team, LedgerTopic.TEAMS)
            await tx.db.flush()
            return team

        team = await self.store.run_transaction("create_team", work)
        logger.info(
            f"Team {team.name} created",
            extra={"operation": "create_team", "team_id": team.id},
        )
        return TeamView.model_validate(team)

    async def update_team(
        self, team_id: str, name: str, captain_name: str, total_purse: int,
    ) -> TeamView:
        """Rename and re-baseline a team (purse reset, roster count cleared)."""
        if total_purse <= 0:
            raise SetupValidationError("Team purse must be greater than 0.", "total_purse")

        async def work(tx: LedgerTransaction):
            team = await tx.team(team_id)
            team.name = name.strip()
            team.captain_name = captain_name.strip()
            assign(team, team_ledger.baseline(
                total_purse, await tx.team_size(self.settings.default_team_size),
                self.settings.min_reserve,
            ))
            tx.touch(LedgerTopic.TEAMS)
            return team

        team = await self.store.run_transaction("update_team", work)
        return TeamView.model_validate(team)

    async def reset_teams(self, total_purse: int | None = None) -> list[TeamView]:
        """Re-baseline every team in one transaction."""
        if total_purse is not None and total_purse <= 0:
            raise SetupValidationError("Team purse must be greater than 0.", "total_purse")

        async def work(tx: LedgerTransaction):
            team_size = await tx.team_size(self.settings.default_team_size)
            teams = await tx.teams()
            for team in teams:
                assign(team, team_ledger.baseline(
                    total_purse if total_purse is not None else team.total_purse,
                    team_size, self.settings.min_reserve,
                ))
            tx.touch(LedgerTopic.TEAMS)
            return teams

        teams = await self.store.run_transaction("reset_teams", work)
        logger.info(
            f"Reset {len(teams)} team(s)",
            extra={"operation": "reset_teams"},
        )
        return [TeamView.model_validate(t) for t in teams]

    # ─── Player pool ────────────────────────────────────────────

    async def create_player(
        self,
        name: str,
        role: PlayerRole | str,
        contact_number: str = "",
        area: str | None = None,
        base_price: int = 0,
        regular_team: str | None = None,
        assign_to_team_id: str | None = None,
    ) -> PlayerView:
        if base_price < 0:
            raise SetupValidationError("Base price cannot be negative.", "base_price")
        role = PlayerRole(role)

        async def work(tx: LedgerTransaction):
            player = Player(
                name=name.strip(),
                role=role.value,
                contact_number=contact_number.strip(),
                area=_clean(area),
                base_price=base_price,
                regular_team=_clean(regular_team),
                status=PlayerStatus.AVAILABLE.value,
                bid_history=[],
                created_at=datetime.now(timezone.utc),
            )
            tx.add(player, LedgerTopic.PLAYERS)
            await tx.db.flush()
            if assign_to_team_id:
                await self.engine.apply_draft(tx, player, assign_to_team_id)
            return player

        player = await self.store.run_transaction("create_player", work)
        logger.info(
            f"Player {player.name} created",
            extra={"operation": "create_player", "player_id": player.id},
        )
        return PlayerView.model_validate(player)

    async def update_player(
        self,
        player_id: str,
        name: str,
        role: PlayerRole | str,
        contact_number: str = "",
        area: str | None = None,
        base_price: int = 0,
        regular_team: str | None = None,
    ) -> PlayerView:
        """Profile fields only; auction outcome fields are left as they are."""
        if base_price < 0:
            raise SetupValidationError("Base price cannot be negative.", "base_price")
        role = PlayerRole(role)

        async def work(tx: LedgerTransaction):
            player = await tx.player(player_id)
            player.name = name.strip()
            player.role = role.value
            player.contact_number = contact_number.strip()
            player.area = _clean(area)
            player.base_price = base_price
            player.regular_team = _clean(regular_team)
            tx.touch(LedgerTopic.PLAYERS)
            return player

        player = await self.store.run_transaction("update_player", work)
        return PlayerView.model_validate(player)
