# src/rankladder/services/placement_service.py

"""Business logic for putting players onto a season's ladder."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db import models
from rankladder.exceptions import InvalidRankError
from rankladder.ladder.rules import MAX_RANK
from rankladder.services.player_service import find_or_create_player, normalize_name
from rankladder.services.season_service import get_season
from rankladder.services.transaction import run_atomic, season_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementResult:
    """Where a placement request left the player."""

    player_id: int
    final_rank: int
    existed: bool


async def get_bottom_rank(db: AsyncSession, season_id: int) -> int:
    """One below the worst rank on the season's ladder, or 1 when it is empty."""
    query = select(func.coalesce(func.max(models.SeasonRanking.rank), 0)).where(
        models.SeasonRanking.season_id == season_id
    )
    worst = (await db.execute(query)).scalar_one()
    return int(worst) + 1


async def ensure_in_ladder(
    db: AsyncSession, season_id: int, player_id: int, at_rank: int | None = None
) -> int:
    """
    Make sure the player has an entry on the season's ladder.

    A missing player is appended at `at_rank`, defaulting to the current
    bottom (max + 1). An existing entry is left alone. Returns the player's
    rank either way. Flushes, never commits.
    """
    entry = await models.SeasonRanking.find_by_season_and_player(
        db, season_id, player_id
    )
    if entry is not None:
        return entry.rank

    rank = at_rank if at_rank is not None else await get_bottom_rank(db, season_id)
    if rank > MAX_RANK:
        raise InvalidRankError(rank)
    db.add(models.SeasonRanking(season_id=season_id, player_id=player_id, rank=rank))
    await db.flush()
    logger.info(
        "Auto-admitted player to ladder",
        extra={"season_id": season_id, "player_id": player_id, "rank": rank},
    )
    return rank


async def place_player(
    db: AsyncSession, season_id: int, name: str, rank: int | None = None
) -> PlacementResult:
    """
    Insert a new or returning player into a season's ladder.

    - Already on this ladder: nothing changes; the current rank is returned
      with existed=True.
    - rank omitted: placed at the bottom (max + 1, or 1 on an empty ladder).
    - rank given: placed at exactly that value. Nobody else is shifted, so
      this may tie with the current holder of that rank.

    Raises:
        BlankNameError: If the name is empty after trimming.
        InvalidRankError: If a rank is given but is not an integer in
            1..MAX_RANK, or the ladder bottom is already at MAX_RANK.
        SeasonNotFoundError: If the season doesn't exist.
    """
    clean = normalize_name(name)
    if rank is not None and (
        isinstance(rank, bool)
        or not isinstance(rank, int)
        or not 1 <= rank <= MAX_RANK
    ):
        raise InvalidRankError(rank)

    async def _place() -> PlacementResult:
        await get_season(db, season_id)
        player = await find_or_create_player(db, clean)

        entry = await models.SeasonRanking.find_by_season_and_player(
            db, season_id, player.id
        )
        if entry is not None:
            logger.debug(
                "Player already on ladder, placement skipped",
                extra={"season_id": season_id, "player_id": player.id},
            )
            return PlacementResult(player.id, entry.rank, existed=True)

        final_rank = await ensure_in_ladder(db, season_id, player.id, at_rank=rank)
        logger.info(
            "Player placed",
            extra={"season_id": season_id, "player_id": player.id, "rank": final_rank},
        )
        return PlacementResult(player.id, final_rank, existed=False)

    return await run_atomic(db, _place, key=season_key(season_id))
