"""Transaction Engine — verifies every auction operation against a real ledger.

Invariants:
    - A rejected operation commits nothing (state read back is unchanged)
    - Both bid arrays move together; purse figures follow core/team_ledger
    - State machine: IDLE →start→ LIVE →sold|unsold|stop→ IDLE
"""

import pytest

from auction_ledger.core import auction_views
from auction_ledger.core.bid_history import Bid
from auction_ledger.core.domain_types import AuctionStatus, LedgerTopic, PlayerStatus
from auction_ledger.core.errors import (
    ActivePlayerChangedError,
    ActivePlayerError,
    AuctionNotLiveError,
    BidIndexError,
    BidsAlreadyPlacedError,
    BidTooLowError,
    DuplicateBidderError,
    EmptyBidHistoryError,
    InsufficientPurseError,
    InvalidAuctionTransitionError,
    PlayerAlreadySoldError,
    ResourceNotFoundError,
)


async def _state(store):
    return await store.load_topic(LedgerTopic.AUCTION_STATE)


async def _team(store, team_id):
    teams = await store.load_topic(LedgerTopic.TEAMS)
    return next(t for t in teams if t.id == team_id)


async def _player(store, player_id):
    players = await store.load_topic(LedgerTopic.PLAYERS)
    return next((p for p in players if p.id == player_id), None)


async def _go_live(engine, player_id):
    await engine.set_current_player(player_id)
    await engine.start_auction()


# ─── Active player & state machine ──────────────────────────────

async def test_set_current_player_resets_block(engine, store, league):
    state = await engine.set_current_player(league.striker.id)

    assert state.current_player_id == league.striker.id
    assert state.current_bid == 20_000
    assert state.leading_team_id is None
    assert state.status == AuctionStatus.IDLE
    assert state.bid_history == []


async def test_set_current_player_unknown_id_fails(engine, league):
    with pytest.raises(ResourceNotFoundError):
        await engine.set_current_player("missing")


async def test_set_current_player_while_live_fails(engine, league):
    await _go_live(engine, league.striker.id)
    with pytest.raises(InvalidAuctionTransitionError):
        await engine.set_current_player(league.spinner.id)


async def test_set_current_player_rejects_sold_player(engine, league):
    await engine.assign_player_to_team_no_purse(league.spinner.id, league.alpha.id)
    with pytest.raises(PlayerAlreadySoldError):
        await engine.set_current_player(league.spinner.id)


async def test_start_requires_selected_player(engine, league):
    with pytest.raises(InvalidAuctionTransitionError):
        await engine.start_auction()


async def test_start_twice_fails(engine, league):
    await _go_live(engine, league.striker.id)
    with pytest.raises(InvalidAuctionTransitionError):
        await engine.start_auction()


async def test_stop_keeps_player_and_rewinds_bidding(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 40_000)

    state = await engine.stop_auction()

    assert state.status == AuctionStatus.IDLE
    assert state.current_player_id == league.striker.id
    assert state.current_bid == 20_000
    assert state.leading_team_id is None
    assert state.bid_history == []


async def test_stop_while_idle_fails(engine, league):
    with pytest.raises(InvalidAuctionTransitionError):
        await engine.stop_auction()


# ─── Bidding ────────────────────────────────────────────────────

async def test_place_bid_requires_live_auction(engine, league):
    await engine.set_current_player(league.striker.id)
    with pytest.raises(AuctionNotLiveError):
        await engine.place_bid(league.alpha.id, 20_000)


async def test_opening_bid_accepted_at_floor(engine, league):
    await _go_live(engine, league.striker.id)
    state = await engine.place_bid(league.alpha.id, 20_000)
    assert state.current_bid == 20_000
    assert state.leading_team_id == league.alpha.id


async def test_opening_bid_below_floor_rejected(engine, store, league):
    await _go_live(engine, league.striker.id)
    with pytest.raises(BidTooLowError):
        await engine.place_bid(league.alpha.id, 19_999)
    assert (await _state(store)).bid_history == []


async def test_bid_must_exceed_standing_bid(engine, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 40_000)
    with pytest.raises(BidTooLowError):
        await engine.place_bid(league.bravo.id, 40_000)


async def test_bid_beyond_purse_rejected(engine, setup, league):
    thin = await setup.create_team("Thin", "Tara", total_purse=30_000)
    await _go_live(engine, league.striker.id)
    with pytest.raises(InsufficientPurseError):
        await engine.place_bid(thin.id, 40_000)


async def test_bid_from_unknown_team_rejected(engine, league):
    await _go_live(engine, league.striker.id)
    with pytest.raises(ResourceNotFoundError):
        await engine.place_bid("ghost-team", 40_000)


async def test_place_bid_writes_both_histories(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 40_000)

    state = await _state(store)
    player = await _player(store, league.striker.id)
    assert state.bid_history == player.bid_history
    assert state.bids[0].team_name == "Alpha"
    assert state.bids[0].amount == 40_000


async def test_sale_flow_updates_team_player_and_block(engine, store, league):
    assert league.alpha.max_bid_amount == 340_000
    await _go_live(engine, league.striker.id)

    await engine.place_bid(league.alpha.id, 40_000)
    with pytest.raises(DuplicateBidderError):
        await engine.place_bid(league.alpha.id, 45_000)
    await engine.place_bid(league.bravo.id, 45_000)

    change = await engine.mark_player_sold()

    assert change.team.id == league.bravo.id
    assert change.team.remaining_purse == 455_000
    assert change.team.spent_amount == 45_000
    assert change.team.players_count == 1
    assert change.team.max_bid_amount == 455_000 - 7 * 20_000
    assert change.player.status == PlayerStatus.SOLD
    assert change.player.sold_to_team_id == league.bravo.id
    assert change.player.sold_price == 45_000
    assert change.player.sold_at is not None

    state = await _state(store)
    assert state.current_player_id is None
    assert state.current_bid == 0
    assert state.leading_team_id is None
    assert state.status == AuctionStatus.IDLE
    assert state.bid_history == []

    untouched = await _team(store, league.alpha.id)
    assert untouched.remaining_purse == 500_000


async def test_sold_requires_bids(engine, league):
    await _go_live(engine, league.striker.id)
    with pytest.raises(EmptyBidHistoryError):
        await engine.mark_player_sold()


async def test_sold_requires_live_auction(engine, league):
    with pytest.raises(AuctionNotLiveError):
        await engine.mark_player_sold()


async def test_unsold_closes_player_without_bids(engine, store, league):
    await _go_live(engine, league.striker.id)

    player = await engine.mark_player_unsold()

    assert player.status == PlayerStatus.UNSOLD
    assert player.sold_to_team_id is None
    assert player.sold_price is None
    assert player.bid_history == []
    state = await _state(store)
    assert state.current_player_id is None
    assert state.status == AuctionStatus.IDLE


async def test_unsold_rejected_once_bids_exist(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)

    with pytest.raises(BidsAlreadyPlacedError):
        await engine.mark_player_unsold()

    player = await _player(store, league.striker.id)
    assert player.status == PlayerStatus.AVAILABLE


async def test_unsold_refuses_rostered_player(engine, store, db_manager, league):
    await _go_live(engine, league.striker.id)
    from auction_ledger.models import Player
    async with db_manager.session() as db:
        row = await db.get(Player, league.striker.id)
        row.status = PlayerStatus.DRAFTED.value
        row.sold_to_team_id = league.alpha.id
        await db.commit()

    with pytest.raises(PlayerAlreadySoldError):
        await engine.mark_player_unsold()

    player = await _player(store, league.striker.id)
    assert player.status == PlayerStatus.DRAFTED
    assert player.sold_to_team_id == league.alpha.id
    assert (await _state(store)).status == AuctionStatus.LIVE


async def test_unsold_player_can_be_auctioned_again(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.mark_player_unsold()

    await _go_live(engine, league.striker.id)
    state = await engine.place_bid(league.alpha.id, 20_000)

    assert state.current_player_id == league.striker.id
    assert state.leading_team_id == league.alpha.id
    player = await _player(store, league.striker.id)
    assert player.status == PlayerStatus.UNSOLD
    assert len(player.bids) == 1


async def test_unsold_is_stamped_with_close_time(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)
    await engine.mark_player_sold()
    await _go_live(engine, league.spinner.id)

    unsold = await engine.mark_player_unsold()

    assert unsold.sold_at is not None
    players = await store.load_topic(LedgerTopic.PLAYERS)
    completed = auction_views.completed_players(players)
    assert [p.id for p in completed] == [league.spinner.id, league.striker.id]


# ─── Pending batches & live hint ────────────────────────────────

async def test_commit_pending_bids_appends_batch_in_order(engine, store, league):
    await engine.set_current_player(league.striker.id)
    batch = [
        Bid(league.alpha.id, "Alpha", 25_000, 1),
        Bid(league.bravo.id, "Bravo", 30_000, 2),
        Bid(league.alpha.id, "Alpha", 35_000, 3),
    ]

    state = await engine.commit_pending_bids(league.striker.id, batch)

    assert state.bids == batch
    assert state.current_bid == 35_000
    assert state.leading_team_id == league.alpha.id
    player = await _player(store, league.striker.id)
    assert player.bids == batch


async def test_commit_pending_bids_empty_batch_is_noop(engine, store, league):
    await engine.set_current_player(league.striker.id)
    before = await _state(store)

    assert await engine.commit_pending_bids(league.striker.id, []) is None
    assert (await _state(store)).version == before.version


async def test_stale_batch_rejected_after_player_change(engine, store, league):
    await engine.set_current_player(league.striker.id)
    await engine.set_current_player(league.spinner.id)

    with pytest.raises(ActivePlayerChangedError):
        await engine.commit_pending_bids(
            league.striker.id, [Bid(league.alpha.id, "Alpha", 25_000, 1)],
        )

    state = await _state(store)
    assert state.current_player_id == league.spinner.id
    assert state.bid_history == []
    assert state.current_bid == 20_000
    assert (await _player(store, league.striker.id)).bid_history == []


async def test_update_live_bid_leaves_history_alone(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)

    await engine.update_live_bid(league.bravo.id, 30_000)

    state = await _state(store)
    assert state.current_bid == 30_000
    assert state.leading_team_id == league.bravo.id
    assert len(state.bid_history) == 1


async def test_update_live_bid_requires_active_player(engine, league):
    with pytest.raises(ActivePlayerError):
        await engine.update_live_bid(league.alpha.id, 30_000)


# ─── Bid deletion ───────────────────────────────────────────────

async def test_delete_last_bid_restores_previous_leader(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)
    await engine.place_bid(league.bravo.id, 30_000)
    await engine.place_bid(league.alpha.id, 35_000)

    state = await engine.delete_bid_at_index(2)

    assert [b.amount for b in state.bids] == [25_000, 30_000]
    assert state.current_bid == 30_000
    assert state.leading_team_id == league.bravo.id
    player = await _player(store, league.striker.id)
    assert player.bid_history == state.bid_history


async def test_delete_only_bid_clears_projection(engine, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)

    state = await engine.delete_bid_at_index(0)

    assert state.bid_history == []
    assert state.current_bid == 0
    assert state.leading_team_id is None


async def test_delete_bid_index_out_of_range(engine, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 25_000)
    with pytest.raises(BidIndexError):
        await engine.delete_bid_at_index(1)
    with pytest.raises(BidIndexError):
        await engine.delete_bid_at_index(-1)


async def test_delete_bid_without_active_player(engine, league):
    with pytest.raises(ActivePlayerError):
        await engine.delete_bid_at_index(0)


async def test_delete_on_diverged_histories_matches_by_content(
    engine, store, db_manager, league,
):
    await engine.set_current_player(league.striker.id)
    b0 = Bid(league.bravo.id, "Bravo", 20_000, 100)
    b1 = Bid(league.alpha.id, "Alpha", 25_000, 101)
    b2 = Bid(league.bravo.id, "Bravo", 30_000, 102)
    b3 = Bid(league.alpha.id, "Alpha", 35_000, 103)
    await engine.commit_pending_bids(league.striker.id, [b1, b2, b3])

    # Player copy carries an extra leading bid the auction copy lost
    from auction_ledger.models import Player
    async with db_manager.session() as db:
        row = await db.get(Player, league.striker.id)
        row.bid_history = [b.to_dict() for b in (b0, b1, b2, b3)]
        await db.commit()

    state = await engine.delete_bid_at_index(1)

    assert state.bids == [b1, b3]
    assert (await _player(store, league.striker.id)).bids == [b0, b1, b3]


# ─── Roster maintenance ─────────────────────────────────────────

async def test_assign_without_purse_drafts_player(engine, store, league):
    change = await engine.assign_player_to_team_no_purse(
        league.spinner.id, league.alpha.id,
    )

    assert change.player.status == PlayerStatus.DRAFTED
    assert change.player.sold_price == 0
    assert change.player.sold_to_team_id == league.alpha.id
    assert change.team.remaining_purse == 500_000
    assert change.team.spent_amount == 0
    assert change.team.players_count == 1
    assert change.team.max_bid_amount == 500_000 - 7 * 20_000


async def test_assign_rejects_already_rostered_player(engine, league):
    await engine.assign_player_to_team_no_purse(league.spinner.id, league.alpha.id)
    with pytest.raises(PlayerAlreadySoldError):
        await engine.assign_player_to_team_no_purse(league.spinner.id, league.bravo.id)


async def test_delete_sold_player_refunds_team(engine, store, league):
    await _go_live(engine, league.striker.id)
    await engine.place_bid(league.alpha.id, 60_000)
    await engine.mark_player_sold()

    refunded = await engine.delete_player(league.striker.id)

    assert refunded.remaining_purse == 500_000
    assert refunded.spent_amount == 0
    assert refunded.players_count == 0
    assert refunded.max_bid_amount == 340_000
    assert await _player(store, league.striker.id) is None


async def test_delete_available_player_touches_no_team(engine, store, league):
    assert await engine.delete_player(league.spinner.id) is None
    assert await _player(store, league.spinner.id) is None


async def test_delete_active_player_refused(engine, store, league):
    await engine.set_current_player(league.striker.id)
    with pytest.raises(ActivePlayerError):
        await engine.delete_player(league.striker.id)
    assert await _player(store, league.striker.id) is not None


async def test_active_player_cannot_be_drafted(engine, store, league):
    await _go_live(engine, league.striker.id)

    with pytest.raises(ActivePlayerError):
        await engine.assign_player_to_team_no_purse(league.striker.id, league.alpha.id)

    player = await _player(store, league.striker.id)
    assert player.status == PlayerStatus.AVAILABLE
    assert (await _team(store, league.alpha.id)).players_count == 0


async def test_delete_player_with_missing_team_aborts(engine, store, db_manager, league):
    await engine.assign_player_to_team_no_purse(league.spinner.id, league.bravo.id)
    from auction_ledger.models import Team
    async with db_manager.session() as db:
        await db.delete(await db.get(Team, league.bravo.id))
        await db.commit()

    with pytest.raises(ResourceNotFoundError):
        await engine.delete_player(league.spinner.id)

    player = await _player(store, league.spinner.id)
    assert player is not None
    assert player.status == PlayerStatus.DRAFTED
