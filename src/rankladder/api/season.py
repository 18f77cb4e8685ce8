# src/rankladder/api/season.py

"""API endpoints for seasons and ladder maintenance."""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db.models import MAX_INT, Season
from rankladder.db.session import get_db
from rankladder.schemas import season as season_schema
from rankladder.services import placement_service, ranking_service, season_service

# Creates an APIRouter instance
# - prefix="/seasons": All routes defined here will be prefixed with /seasons
# - tags=["Seasons"]: Groups these endpoints under "Seasons" in the API docs
router = APIRouter(prefix="/seasons", tags=["Seasons"])


@router.post(
    "/",
    response_model=season_schema.SeasonRead,
    status_code=status.HTTP_201_CREATED,
)
async def init_season(
    season_in: season_schema.SeasonInit,
    db: AsyncSession = Depends(get_db),
) -> season_schema.SeasonRead:
    """
    Create a season and seed its ladder.

    - **year**: The unique season year.
    - **players_in_order**: Names best-first (rank = position).
    - **entries**: Explicit name/rank pairs; ties and gaps are kept as given.

    Invalid seed items are skipped rather than failing the request.

    Raises:
        409 Conflict: If a season for this year already exists.
        422 Unprocessable Entity: If no seed form was given.
    """
    season_id = await season_service.init_season(
        db, season_in.year, season_in.to_seeds()
    )
    return season_schema.SeasonRead(id=season_id, year=season_in.year)


@router.get("/", response_model=list[season_schema.SeasonRead])
async def read_seasons(db: AsyncSession = Depends(get_db)) -> list[Season]:
    """
    List all seasons, newest year first.
    """
    return await season_service.list_seasons(db)


@router.post("/{season_id}/players", response_model=season_schema.PlacementRead)
async def place_player(
    placement_in: season_schema.PlacementCreate,
    season_id: int = Path(..., ge=1, le=MAX_INT),
    db: AsyncSession = Depends(get_db),
) -> season_schema.PlacementRead:
    """
    Put a new or returning player on the season's ladder.

    - **name**: The player's name; created if unknown.
    - **rank**: Exact rank to insert at (may tie). Bottom of the ladder if omitted.

    A player already on this ladder is left where they are and
    `existed` is true.

    Raises:
        404 Not Found: If the season doesn't exist.
    """
    result = await placement_service.place_player(
        db, season_id, placement_in.name, placement_in.rank
    )
    return season_schema.PlacementRead(
        season_id=season_id,
        player_id=result.player_id,
        final_rank=result.final_rank,
        existed=result.existed,
    )


@router.post("/{season_id}/densify", response_model=season_schema.DensifyRead)
async def densify_ranks(
    season_id: int = Path(..., ge=1, le=MAX_INT),
    db: AsyncSession = Depends(get_db),
) -> season_schema.DensifyRead:
    """
    Collapse the season's ranks to 1..K, keeping order and ties.

    Raises:
        404 Not Found: If the season doesn't exist.
    """
    changed = await ranking_service.densify_ranks(db, season_id)
    return season_schema.DensifyRead(season_id=season_id, changed=changed)
