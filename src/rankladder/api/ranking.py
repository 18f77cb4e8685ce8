# src/rankladder/api/ranking.py

"""API endpoints for reading season ladders."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.api.deps import season_id_from_query
from rankladder.db.session import get_db
from rankladder.schemas.ranking import LadderEntryRead
from rankladder.services import ranking_service
from rankladder.services.ranking_service import LadderEntry

router = APIRouter(prefix="/rankings", tags=["Rankings"])


@router.get("/", response_model=list[LadderEntryRead])
async def read_ladder(
    season_id: int = Depends(season_id_from_query),
    db: AsyncSession = Depends(get_db),
) -> list[LadderEntry]:
    """
    Retrieve a season's ladder, best rank first.

    - **season_id**: The season to read, or
    - **year**: The season's year (used only when season_id is absent)

    Tied players are listed by player id.
    """
    return await ranking_service.get_ladder(db, season_id)
