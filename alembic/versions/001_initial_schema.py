"""Initial schema — tournament, auction_state, teams, players.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tournament",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("season", sa.String(50), nullable=False),
        sa.Column("team_purse", sa.Integer, nullable=False, server_default="0"),
        sa.Column("team_size", sa.Integer, nullable=False, server_default="9"),
        sa.Column("version", sa.Integer, nullable=False),
    )

    op.create_table(
        "auction_state",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("current_player_id", sa.String(36), nullable=True),
        sa.Column("current_bid", sa.Integer, nullable=False, server_default="0"),
        sa.Column("leading_team_id", sa.String(36), nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="IDLE"),
        sa.Column("bid_history", sa.JSON, nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("captain_name", sa.String(200), nullable=False),
        sa.Column("total_purse", sa.Integer, nullable=False),
        sa.Column("remaining_purse", sa.Integer, nullable=False),
        sa.Column("spent_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("players_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_bid_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False),
    )

    op.create_table(
        "players",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("contact_number", sa.String(50), nullable=False, server_default=""),
        sa.Column("area", sa.String(100), nullable=True),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("base_price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("regular_team", sa.String(200), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="AVAILABLE"),
        sa.Column("sold_to_team_id", sa.String(36), nullable=True),
        sa.Column("sold_price", sa.Integer, nullable=True),
        sa.Column("sold_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("bid_history", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("version", sa.Integer, nullable=False),
    )
    op.create_index("ix_players_status", "players", ["status"])
    op.create_index("ix_players_sold_to_team_id", "players", ["sold_to_team_id"])


def downgrade() -> None:
    op.drop_index("ix_players_sold_to_team_id", table_name="players")
    op.drop_index("ix_players_status", table_name="players")
    op.drop_table("players")
    op.drop_table("teams")
    op.drop_table("auction_state")
    op.drop_table("tournament")
