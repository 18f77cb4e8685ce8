# src/rankladder/api/player.py

"""API endpoints for resolving and reading players."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db.models import MAX_INT, Player
from rankladder.db.session import get_db
from rankladder.schemas import player as player_schema
from rankladder.services import player_service

# Create an APIRouter instance for players
# - prefix="/players": All routes here will be prefixed with /players
# - tags=["Players"]: Groups these endpoints under "Players" in the API docs
router = APIRouter(prefix="/players", tags=["Players"])


@router.post("/", response_model=player_schema.PlayerRead)
async def resolve_player(
    player_in: player_schema.PlayerResolve, db: AsyncSession = Depends(get_db)
) -> Player:
    """
    Resolve a name to a player, creating the player on first sight.

    - **name**: The player's unique name (trimmed).

    Calling this again with the same name returns the same player.

    Raises:
        422 Unprocessable Entity: If the name is blank.
    """
    player_id = await player_service.resolve_player(db, player_in.name)
    return await player_service.get_player(db, player_id)


@router.get("/{player_id}", response_model=player_schema.PlayerRead)
async def read_player(
    player_id: int = Path(..., ge=1, le=MAX_INT),
    db: AsyncSession = Depends(get_db),
) -> Player:
    """
    Retrieve a single player by their ID.
    """
    return await player_service.get_player(db, player_id)
