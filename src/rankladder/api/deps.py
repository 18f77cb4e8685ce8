# src/rankladder/api/deps.py

"""Shared FastAPI dependencies."""

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db.models import MAX_INT
from rankladder.db.session import get_db
from rankladder.services import season_service


async def season_id_from_query(
    season_id: int | None = Query(None, ge=1, le=MAX_INT, description="Season ID"),
    year: int | None = Query(None, ge=1, le=MAX_INT, description="Season year"),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Resolve `?season_id=` or `?year=` to a season id (404/422 otherwise)."""
    return await season_service.require_season_id(db, season_id=season_id, year=year)
