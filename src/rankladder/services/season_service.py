# src/rankladder/services/season_service.py

"""Business logic for creating and looking up seasons."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db import models
from rankladder.exceptions import (
    MissingSeedsError,
    SeasonExistsError,
    SeasonNotFoundError,
    ValidationError,
)
from rankladder.ladder.seeds import Seeds, iter_seed_ranks
from rankladder.services.player_service import find_or_create_player
from rankladder.services.transaction import run_atomic, year_key

logger = logging.getLogger(__name__)


async def init_season(db: AsyncSession, year: int | None, seeds: Seeds | None) -> int:
    """
    Create the season for `year` and write its starting ladder.

    `seeds` is either OrderedNames (rank = position) or ExplicitEntries
    (ranks as given, ties and gaps allowed). Invalid seed items are skipped;
    a name already seeded earlier in the same batch keeps its first entry.

    All of it happens in one transaction: a failure leaves no season behind.

    Raises:
        ValidationError: If year is missing.
        MissingSeedsError: If no seed form was given.
        SeasonExistsError: If a season for this year already exists.
    """
    if year is None:
        raise ValidationError("year required", details={"field": "year"})
    if seeds is None:
        raise MissingSeedsError()

    async def _init() -> int:
        if await models.Season.find_by_year(db, year) is not None:
            raise SeasonExistsError(year)

        season = models.Season(year=year)
        db.add(season)
        await db.flush()

        seeded: set[int] = set()
        for name, rank in iter_seed_ranks(seeds):
            player = await find_or_create_player(db, name)
            if player.id in seeded:
                logger.warning(
                    "Skipping duplicate seed for player",
                    extra={"season_id": season.id, "player_id": player.id},
                )
                continue
            seeded.add(player.id)
            db.add(
                models.SeasonRanking(
                    season_id=season.id, player_id=player.id, rank=rank
                )
            )

        await db.flush()
        logger.info(
            "Season initialized",
            extra={"season_id": season.id, "year": year, "seeded": len(seeded)},
        )
        return season.id

    return await run_atomic(db, _init, key=year_key(year))


async def get_season(db: AsyncSession, season_id: int) -> models.Season:
    """Fetch a season by id or raise SeasonNotFoundError."""
    season = await db.get(models.Season, season_id)
    if season is None:
        raise SeasonNotFoundError(season_id=season_id)
    return season


async def list_seasons(db: AsyncSession) -> list[models.Season]:
    """All seasons, newest year first."""
    result = await db.execute(select(models.Season).order_by(models.Season.year.desc()))
    return list(result.scalars().all())


async def resolve_season_id(
    db: AsyncSession, season_id: int | None = None, year: int | None = None
) -> int | None:
    """
    Turn a season id or a year into a season id.

    A given season_id is returned as-is without a lookup; the year is only
    consulted when season_id is absent. Returns None when nothing matches.
    """
    if season_id:
        return int(season_id)
    if not year:
        return None
    season = await models.Season.find_by_year(db, int(year))
    return season.id if season else None


async def require_season_id(
    db: AsyncSession, season_id: int | None = None, year: int | None = None
) -> int:
    """Like resolve_season_id, but raise when the season can't be determined."""
    if not season_id and not year:
        raise ValidationError(
            "season_id or year required", details={"season_id": None, "year": None}
        )
    resolved = await resolve_season_id(db, season_id=season_id, year=year)
    if resolved is None:
        raise SeasonNotFoundError(year=year)
    return resolved
