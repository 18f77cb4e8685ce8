# tests/helpers.py

"""Small shared helpers for ladder tests."""

from rankladder.ladder.seeds import ExplicitEntries, OrderedNames
from rankladder.services import ranking_service, season_service
from sqlalchemy.ext.asyncio import AsyncSession


async def make_season(db: AsyncSession, year: int, *names: str) -> int:
    """Create a season whose ladder is `names` in order, ranks 1..N."""
    return await season_service.init_season(db, year, OrderedNames(names))


async def make_season_with_ranks(
    db: AsyncSession, year: int, ranks: dict[str, int]
) -> int:
    """Create a season with explicit (possibly tied or gapped) ranks."""
    return await season_service.init_season(
        db, year, ExplicitEntries(tuple(ranks.items()))
    )


async def ladder_ranks(db: AsyncSession, season_id: int) -> dict[str, int]:
    """Current ladder as {name: rank}."""
    entries = await ranking_service.get_ladder(db, season_id)
    return {entry.name: entry.rank for entry in entries}
