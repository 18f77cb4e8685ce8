# src/rankladder/db/models.py

"""Database models for the RankLadder application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

Base = declarative_base()

# Largest value an Integer column (64-bit signed) can hold.
MAX_INT = 2**63 - 1


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing a created_at timestamp column."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


# ===============================================
# Core Tables: Player and Season
# ===============================================


class Player(Base, TimestampMixin):
    """Represents a unique person across all seasons.

    Players are created lazily the first time their name is seen and are
    never deleted in normal operation. The name is the identity key.
    """

    __tablename__ = "players"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    rankings: Mapped[List["SeasonRanking"]] = relationship(back_populates="player")

    def __init__(self, name: str, **kw: Any):
        super().__init__(**kw)
        self.name = name

    @classmethod
    async def find_by_name(cls, db: AsyncSession, name: str) -> "Player | None":
        """Find a player by exact name."""
        result = await db.execute(select(cls).where(cls.name == name))
        return result.scalar_one_or_none()


class Season(Base, TimestampMixin):
    """A ranking universe, one per year.

    Deleting a season removes its ranking entries and match records.
    """

    __tablename__ = "seasons"
    id: Mapped[int] = mapped_column(primary_key=True)
    year: Mapped[int] = mapped_column(unique=True, nullable=False)

    rankings: Mapped[List["SeasonRanking"]] = relationship(
        back_populates="season",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    matches: Mapped[List["Match"]] = relationship(
        back_populates="season",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @classmethod
    async def find_by_year(cls, db: AsyncSession, year: int) -> "Season | None":
        """Find a season by its year."""
        result = await db.execute(select(cls).where(cls.year == year))
        return result.scalar_one_or_none()


# ===============================================
# Ladder and Match Tables
# ===============================================


class SeasonRanking(Base):
    """A player's position on one season's ladder.

    Rank values are positive integers, lower is better. They are neither
    unique nor contiguous within a season: ties and gaps are normal.
    """

    __tablename__ = "season_rankings"
    id: Mapped[int] = mapped_column(primary_key=True)
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    rank: Mapped[int] = mapped_column(nullable=False)

    season: Mapped["Season"] = relationship(back_populates="rankings")
    player: Mapped["Player"] = relationship(back_populates="rankings")

    __table_args__ = (
        UniqueConstraint("season_id", "player_id", name="_season_player_uc"),
        Index("ix_season_rankings_season_rank", "season_id", "rank"),
    )

    @classmethod
    async def find_by_season_and_player(
        cls, db: AsyncSession, season_id: int, player_id: int
    ) -> "SeasonRanking | None":
        """Find a ladder entry by season and player IDs."""
        query = (
            select(cls)
            .where(cls.season_id == season_id, cls.player_id == player_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()


class Match(Base, TimestampMixin):
    """Append-only record of a reported match.

    Used for history and audit; the ladder rules only read current
    SeasonRanking state, never past matches.
    """

    __tablename__ = "matches"
    id: Mapped[int] = mapped_column(primary_key=True)
    season_id: Mapped[int] = mapped_column(
        ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Business timestamp: when the match was actually played
    played_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    winner_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    loser_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    score: Mapped[str | None] = mapped_column(String, nullable=True)
    note: Mapped[str | None] = mapped_column(String, nullable=True)
    # True once the rank mutation has been applied in the same transaction
    processed: Mapped[bool] = mapped_column(default=True, nullable=False)

    season: Mapped["Season"] = relationship(back_populates="matches")
    winner: Mapped["Player"] = relationship(foreign_keys=[winner_id])
    loser: Mapped["Player"] = relationship(foreign_keys=[loser_id])
