# src/rankladder/services/ranking_service.py

"""Ladder reads and rank normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db import models
from rankladder.ladder.rules import dense_rank_map
from rankladder.services.season_service import get_season
from rankladder.services.transaction import run_atomic, season_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LadderEntry:
    rank: int
    player_id: int
    name: str


async def get_ladder(db: AsyncSession, season_id: int) -> list[LadderEntry]:
    """
    The season's ladder, best rank first.

    Players sharing a rank are listed by player id, oldest player first, so
    the order of a tie is stable across calls.
    """
    await get_season(db, season_id)
    query = (
        select(models.SeasonRanking.rank, models.Player.id, models.Player.name)
        .join(models.Player, models.Player.id == models.SeasonRanking.player_id)
        .where(models.SeasonRanking.season_id == season_id)
        .order_by(models.SeasonRanking.rank.asc(), models.Player.id.asc())
    )
    result = await db.execute(query)
    return [LadderEntry(*row) for row in result.all()]


async def densify_ranks(db: AsyncSession, season_id: int) -> int:
    """
    Collapse the season's rank values to 1..K, keeping order and ties.

    {1, 1, 4, 4, 7} becomes {1, 1, 2, 2, 3}. Running it on a dense ladder
    changes nothing. Returns how many entries moved.
    """

    async def _densify() -> int:
        await get_season(db, season_id)
        result = await db.execute(
            select(models.SeasonRanking).where(
                models.SeasonRanking.season_id == season_id
            ).execution_options(populate_existing=True)
        )
        entries = list(result.scalars().all())
        mapping = dense_rank_map(entry.rank for entry in entries)

        changed = 0
        for entry in entries:
            new_rank = mapping[entry.rank]
            if new_rank != entry.rank:
                entry.rank = new_rank
                changed += 1
        await db.flush()

        logger.info(
            "Ranks densified",
            extra={
                "season_id": season_id,
                "changed": changed,
                "distinct_ranks": len(mapping),
            },
        )
        return changed

    return await run_atomic(db, _densify, key=season_key(season_id))
