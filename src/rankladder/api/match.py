# src/rankladder/api/match.py

"""API endpoints for reporting and listing matches."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.api.deps import season_id_from_query
from rankladder.db.session import get_db
from rankladder.schemas import match as match_schema
from rankladder.services import match_service
from rankladder.services.match_service import MatchRecord, MatchReport

# Create an APIRouter instance for matches
router = APIRouter(prefix="/matches", tags=["Matches"])


@router.get("/", response_model=list[match_schema.MatchRead])
async def read_matches(
    season_id: int = Depends(season_id_from_query),
    limit: int = Query(
        match_service.DEFAULT_MATCH_LIMIT, ge=1, le=500, description="Max records"
    ),
    db: AsyncSession = Depends(get_db),
) -> list[MatchRecord]:
    """
    Retrieve a season's match history, most recently played first.

    - **season_id**: The season to read, or
    - **year**: The season's year (used only when season_id is absent)
    - **limit**: Maximum number of records to return (default 100)
    """
    return await match_service.get_matches(db, season_id, limit=limit)


@router.post(
    "/",
    response_model=match_schema.MatchReportRead,
    status_code=status.HTTP_201_CREATED,
)
async def report_match(
    match_in: match_schema.MatchCreate, db: AsyncSession = Depends(get_db)
) -> MatchReport:
    """
    Report a match result and update the ladder.

    Unknown names become new players, and players missing from the ladder
    are admitted at its bottom before the result is applied.

    Raises:
        404: If the season doesn't exist
        422: If a name is blank or winner and loser are the same player
    """
    return await match_service.report_match(
        db,
        match_in.season_id,
        match_in.winner_name,
        match_in.loser_name,
        played_at=match_in.played_at,
        score=match_in.score,
        note=match_in.note,
    )
