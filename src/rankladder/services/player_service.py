# src/rankladder/services/player_service.py

"""Business logic for player identity resolution."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.db import models
from rankladder.exceptions import BlankNameError, PlayerNotFoundError
from rankladder.ladder.seeds import clean_name
from rankladder.services.transaction import player_key, run_atomic

logger = logging.getLogger(__name__)


def normalize_name(raw: object, field: str = "name") -> str:
    """Trim a player name, rejecting it when nothing is left."""
    name = clean_name(raw)
    if not name:
        raise BlankNameError(field)
    return name


async def find_or_create_player(db: AsyncSession, name: str) -> models.Player:
    """
    Return the player called `name`, creating it if this is the first time
    the name is seen.

    Runs inside the caller's transaction: it flushes but never commits. If a
    concurrent transaction creates the same name first, the flush (or the
    caller's commit) raises IntegrityError and `run_atomic` retries the whole
    operation, which then finds the existing row.
    """
    player = await models.Player.find_by_name(db, name)
    if player is None:
        player = models.Player(name=name)
        db.add(player)
        await db.flush()
        logger.info("Created new player", extra={"player_id": player.id})
    return player


async def resolve_player(db: AsyncSession, name: str) -> int:
    """
    Resolve a player name to its id, creating the player if needed.

    Idempotent: repeated calls with the same name return the same id.

    Raises:
        BlankNameError: If the name is empty after trimming.
    """
    clean = normalize_name(name)

    async def _resolve() -> int:
        player = await find_or_create_player(db, clean)
        return player.id

    return await run_atomic(db, _resolve, key=player_key(clean))


async def get_player(db: AsyncSession, player_id: int) -> models.Player:
    """Fetch a player by id or raise PlayerNotFoundError."""
    player = await db.get(models.Player, player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return player
