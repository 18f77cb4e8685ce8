"""Create ladder tables

Revision ID: 20261018_ladder
Revises:
Create Date: 2026-10-18

This migration creates the baseline schema:
- players: name-keyed identities (unique name)
- seasons: one per year (unique year)
- season_rankings: (season, player) -> rank, unique per season/player,
  ranks may repeat or skip values
- matches: append-only match log

season_rankings and matches cascade when their season is deleted.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261018_ladder"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create players, seasons, season_rankings and matches."""
    # === PLAYERS ===
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # === SEASONS ===
    op.create_table(
        "seasons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("year", sa.Integer(), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    # === SEASON RANKINGS ===
    op.create_table(
        "season_rankings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "season_id",
            sa.Integer(),
            sa.ForeignKey("seasons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "player_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False
        ),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.UniqueConstraint("season_id", "player_id", name="_season_player_uc"),
    )
    op.create_index(
        "ix_season_rankings_season_rank", "season_rankings", ["season_id", "rank"]
    )
    op.create_index(
        "ix_season_rankings_player_id", "season_rankings", ["player_id"]
    )

    # === MATCHES ===
    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "season_id",
            sa.Integer(),
            sa.ForeignKey("seasons.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "winner_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False
        ),
        sa.Column(
            "loser_id", sa.Integer(), sa.ForeignKey("players.id"), nullable=False
        ),
        sa.Column("score", sa.String(), nullable=True),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("processed", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_matches_season_id", "matches", ["season_id"])


def downgrade() -> None:
    """Drop all ladder tables."""
    op.drop_index("ix_matches_season_id", "matches")
    op.drop_table("matches")
    op.drop_index("ix_season_rankings_player_id", "season_rankings")
    op.drop_index("ix_season_rankings_season_rank", "season_rankings")
    op.drop_table("season_rankings")
    op.drop_table("seasons")
    op.drop_table("players")
