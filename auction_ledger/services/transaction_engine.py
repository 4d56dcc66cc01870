"""Transaction Engine — every auction mutation as one atomic ledger unit.

Invariants:
    - Each public method is exactly one LedgerStore.run_transaction call
    - Read → validate (core/ checks, first error wins) → write; a failed check
      raises before any write, so the unit commits nothing
    - AuctionState.bid_history and the active player's bid_history are written
      together in the same unit, always by reassignment
    - Team purse/roster figures only change through core/team_ledger
    - The player on the block is never drafted or deleted; closing a player
      (sold or unsold) refuses one already SOLD or DRAFTED
    - Returned views are built from the committed rows

Design Decisions:
    - Engine owns the clock (injectable): bid timestamps are epoch milliseconds,
      sold_at is an aware UTC datetime
    - commit_pending_bids trusts the batch (the coordinator validated it against
      committed ++ pending); only the active-player identity is re-checked
"""

import logging
from datetime import datetime, timezone
from typing import Callable, NamedTuple

from auction_ledger.config import Settings
from auction_ledger.core import team_ledger
from auction_ledger.core.bid_history import (
    Bid,
    append_bids,
    bids_from_json,
    bids_to_json,
    project_bids,
    reconcile_player_history,
    remove_bid_at,
)
from auction_ledger.core.domain_types import (
    AuctionStatus,
    LedgerTopic,
    PlayerStatus,
)
from auction_ledger.core.enforce_auction import (
    check_active_player,
    check_batch_player,
    check_bid_index,
    check_can_select_player,
    check_can_start,
    check_can_stop,
    check_has_bids,
    check_no_bids,
    check_not_active_player,
    check_player_unassigned,
    idle_baseline,
    no_bids_baseline,
    require_live,
    selected_player_state,
)
from auction_ledger.core.enforce_bids import check_purse, validate_placed_bid
from auction_ledger.core.errors import AuctionLedgerError
from auction_ledger.models import Player, Team
from auction_ledger.schemas.ledger import AuctionStateView, PlayerView, TeamView
from auction_ledger.services.ledger_store import LedgerStore, LedgerTransaction, assign

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _raise_if(error: AuctionLedgerError | None) -> None:
    if error is not None:
        raise error


class RosterChange(NamedTuple):
    """A player landing on (or leaving) a team, as committed."""
    player: PlayerView
    team: TeamView


class TransactionEngine:
    """Atomic auction operations over the ledger store."""

    def __init__(
        self, store: LedgerStore, settings: Settings, clock: Clock = _utc_now,
    ):
        self.store = store
        self.settings = settings
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    async def _team_size(self, tx: LedgerTransaction) -> int:
        return await tx.team_size(self.settings.default_team_size)

    # ─── Active player & state machine ──────────────────────────

    async def set_current_player(self, player_id: str) -> AuctionStateView:
        """Put a player on the block: fresh history, opening bid, IDLE."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_can_select_player(state.status))
            player = await tx.player(player_id)
            _raise_if(check_player_unassigned(
                player.id, player.status, player.sold_to_team_id,
            ))
            player.bid_history = []
            assign(state, selected_player_state(player.id, self.settings.opening_bid))
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS)
            return state

        state = await self.store.run_transaction("set_current_player", work)
        logger.info(
            f"Player {player_id} is now on the block",
            extra={"operation": "set_current_player", "player_id": player_id},
        )
        return AuctionStateView.model_validate(state)

    async def start_auction(self) -> AuctionStateView:
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_can_start(state.status, state.current_player_id))
            state.status = AuctionStatus.LIVE.value
            tx.touch(LedgerTopic.AUCTION_STATE)
            return state

        state = await self.store.run_transaction("start_auction", work)
        return AuctionStateView.model_validate(state)

    async def stop_auction(self) -> AuctionStateView:
        """LIVE → IDLE keeping the active player; bidding rewound to the opening bid."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_can_stop(state.status))
            assign(state, no_bids_baseline(self.settings.opening_bid))
            state.status = AuctionStatus.IDLE.value
            tx.touch(LedgerTopic.AUCTION_STATE)
            return state

        state = await self.store.run_transaction("stop_auction", work)
        return AuctionStateView.model_validate(state)

    # ─── Bidding ────────────────────────────────────────────────

    async def place_bid(self, team_id: str, amount: int) -> AuctionStateView:
        """Record one bid after checking it against the committed snapshot."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(require_live(state.status, state.current_player_id, "bid on"))
            player = await tx.player(state.current_player_id)
            _raise_if(check_player_unassigned(
                player.id, player.status, player.sold_to_team_id,
            ))
            team = await tx.team(team_id)
            history = bids_from_json(state.bid_history)
            _raise_if(validate_placed_bid(
                team.id, amount, team.remaining_purse,
                state.current_bid, history, self.settings.opening_bid,
            ))

            bid = Bid(team.id, team.name, amount, self._now_ms())
            state.bid_history = bids_to_json(append_bids(history, [bid]))
            player.bid_history = bids_to_json(
                append_bids(bids_from_json(player.bid_history), [bid]),
            )
            state.current_bid = amount
            state.leading_team_id = team.id
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS)
            return state

        state = await self.store.run_transaction("place_bid", work)
        return AuctionStateView.model_validate(state)

    async def commit_pending_bids(
        self, player_id: str, bids: list[Bid],
    ) -> AuctionStateView | None:
        """Append a coordinator batch in order, or fail if the player moved on."""
        if not bids:
            return None
        batch = list(bids)

        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_batch_player(player_id, state.current_player_id))
            player = await tx.player(player_id)
            history = append_bids(bids_from_json(state.bid_history), batch)
            state.bid_history = bids_to_json(history)
            player.bid_history = bids_to_json(
                append_bids(bids_from_json(player.bid_history), batch),
            )
            state.current_bid, state.leading_team_id = project_bids(history)
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS)
            return state

        state = await self.store.run_transaction("commit_pending_bids", work)
        logger.info(
            f"Committed {len(batch)} pending bid(s) for player {player_id}",
            extra={
                "operation": "commit_pending_bids",
                "player_id": player_id,
                "bid_count": len(batch),
            },
        )
        return AuctionStateView.model_validate(state)

    async def update_live_bid(self, team_id: str, amount: int) -> None:
        """Optimistic hint for viewers; history is untouched until the batch lands."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_active_player(state.current_player_id))
            state.current_bid = amount
            state.leading_team_id = team_id
            tx.touch(LedgerTopic.AUCTION_STATE)

        await self.store.run_transaction("update_live_bid", work)

    async def delete_bid_at_index(self, index: int) -> AuctionStateView:
        """Remove one bid from both histories and re-derive the standing bid."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(check_active_player(state.current_player_id))
            auction_bids = bids_from_json(state.bid_history)
            _raise_if(check_bid_index(index, auction_bids))
            player = await tx.player(state.current_player_id)

            remaining = remove_bid_at(auction_bids, index)
            player.bid_history = bids_to_json(reconcile_player_history(
                bids_from_json(player.bid_history), auction_bids, index,
            ))
            state.bid_history = bids_to_json(remaining)
            state.current_bid, state.leading_team_id = project_bids(remaining)
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS)
            return state

        state = await self.store.run_transaction("delete_bid_at_index", work)
        return AuctionStateView.model_validate(state)

    # ─── Closing a player ───────────────────────────────────────

    async def mark_player_sold(self) -> RosterChange:
        """Sell the active player to the last bidder and clear the block."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(require_live(state.status, state.current_player_id, "sell"))
            history = bids_from_json(state.bid_history)
            _raise_if(check_has_bids(history))
            winner = history[-1]

            player = await tx.player(state.current_player_id)
            _raise_if(check_player_unassigned(
                player.id, player.status, player.sold_to_team_id,
            ))
            team = await tx.team(winner.team_id)
            _raise_if(check_purse(team.id, team.remaining_purse, winner.amount))

            assign(team, team_ledger.purchase(
                team.remaining_purse, team.spent_amount, team.players_count,
                winner.amount, await self._team_size(tx), self.settings.min_reserve,
            ))
            player.status = PlayerStatus.SOLD.value
            player.sold_to_team_id = team.id
            player.sold_price = winner.amount
            player.sold_at = self._clock()
            assign(state, idle_baseline())
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS, LedgerTopic.TEAMS)
            return player, team

        player, team = await self.store.run_transaction("mark_player_sold", work)
        logger.info(
            f"Player {player.id} sold to {team.name} for {player.sold_price}",
            extra={
                "operation": "mark_player_sold",
                "player_id": player.id,
                "team_id": team.id,
            },
        )
        return RosterChange(PlayerView.model_validate(player), TeamView.model_validate(team))

    async def mark_player_unsold(self) -> PlayerView:
        """Close the active player with no bids and clear the block."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state()
            _raise_if(require_live(
                state.status, state.current_player_id, "mark unsold",
            ))
            _raise_if(check_no_bids(bids_from_json(state.bid_history)))
            player = await tx.player(state.current_player_id)
            _raise_if(check_player_unassigned(
                player.id, player.status, player.sold_to_team_id,
            ))
            player.status = PlayerStatus.UNSOLD.value
            player.sold_to_team_id = None
            player.sold_price = None
            player.sold_at = self._clock()
            player.bid_history = []
            assign(state, idle_baseline())
            tx.touch(LedgerTopic.AUCTION_STATE, LedgerTopic.PLAYERS)
            return player

        player = await self.store.run_transaction("mark_player_unsold", work)
        logger.info(
            f"Player {player.id} closed unsold",
            extra={"operation": "mark_player_unsold", "player_id": player.id},
        )
        return PlayerView.model_validate(player)

    # ─── Roster maintenance ─────────────────────────────────────

    async def apply_draft(
        self, tx: LedgerTransaction, player: Player, team_id: str,
    ) -> Team:
        state = await tx.auction_state_or_none()
        _raise_if(
            check_not_active_player(
                player.id, state.current_player_id if state else None, "draft",
            )
            or check_player_unassigned(
                player.id, player.status, player.sold_to_team_id,
            )
        )
        team = await tx.team(team_id)
        assign(team, team_ledger.draft(
            team.remaining_purse, team.players_count,
            await self._team_size(tx), self.settings.min_reserve,
        ))
        player.status = PlayerStatus.DRAFTED.value
        player.sold_to_team_id = team.id
        player.sold_price = 0
        player.sold_at = self._clock()
        tx.touch(LedgerTopic.PLAYERS, LedgerTopic.TEAMS)
        return team

    async def assign_player_to_team_no_purse(
        self, player_id: str, team_id: str,
    ) -> RosterChange:
        """Put a player on a roster without spending purse (pre-auction draft)."""
        async def work(tx: LedgerTransaction):
            player = await tx.player(player_id)
            team = await self.apply_draft(tx, player, team_id)
            return player, team

        player, team = await self.store.run_transaction(
            "assign_player_to_team_no_purse", work,
        )
        logger.info(
            f"Player {player.id} drafted to {team.name}",
            extra={
                "operation": "assign_player_to_team_no_purse",
                "player_id": player.id,
                "team_id": team.id,
            },
        )
        return RosterChange(PlayerView.model_validate(player), TeamView.model_validate(team))

    async def delete_player(self, player_id: str) -> TeamView | None:
        """Delete a player, refunding the owning team first. Returns the refunded team."""
        async def work(tx: LedgerTransaction):
            state = await tx.auction_state_or_none()
            _raise_if(check_not_active_player(
                player_id, state.current_player_id if state else None,
            ))
            player = await tx.player(player_id)
            team = None
            if PlayerStatus(player.status).is_rostered and player.sold_to_team_id:
                team = await tx.team(player.sold_to_team_id)
                assign(team, team_ledger.refund(
                    team.remaining_purse, team.spent_amount, team.players_count,
                    player.sold_price or 0,
                    await self._team_size(tx), self.settings.min_reserve,
                ))
                tx.touch(LedgerTopic.TEAMS)
            await tx.delete(player, LedgerTopic.PLAYERS)
            return team

        team = await self.store.run_transaction("delete_player", work)
        logger.info(
            f"Player {player_id} deleted",
            extra={"operation": "delete_player", "player_id": player_id},
        )
        return TeamView.model_validate(team) if team is not None else None
