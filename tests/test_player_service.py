# tests/test_player_service.py

"""Tests for player identity resolution."""

import asyncio

import pytest
from rankladder.db.models import Player
from rankladder.exceptions import BlankNameError, PlayerNotFoundError
from rankladder.services import player_service
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


async def count_players(db: AsyncSession, name: str) -> int:
    query = select(func.count()).select_from(Player).where(Player.name == name)
    return (await db.execute(query)).scalar_one()


@pytest.mark.asyncio
async def test_resolve_player_creates_on_first_sight(db_session: AsyncSession):
    player_id = await player_service.resolve_player(db_session, "Newcomer")

    player = await player_service.get_player(db_session, player_id)
    assert player.name == "Newcomer"
    assert player.is_active is True


@pytest.mark.asyncio
async def test_resolve_player_is_idempotent(db_session: AsyncSession):
    """Same name, same id, one row."""
    first = await player_service.resolve_player(db_session, "Repeat")
    second = await player_service.resolve_player(db_session, "Repeat")

    assert first == second
    assert await count_players(db_session, "Repeat") == 1


@pytest.mark.asyncio
async def test_resolve_player_trims_names(db_session: AsyncSession):
    first = await player_service.resolve_player(db_session, "  Padded ")
    second = await player_service.resolve_player(db_session, "Padded")

    assert first == second


@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
@pytest.mark.asyncio
async def test_resolve_player_rejects_blank_names(db_session: AsyncSession, blank):
    with pytest.raises(BlankNameError):
        await player_service.resolve_player(db_session, blank)

    total = (
        await db_session.execute(select(func.count()).select_from(Player))
    ).scalar_one()
    assert total == 0


@pytest.mark.asyncio
async def test_get_player_missing_raises(db_session: AsyncSession):
    with pytest.raises(PlayerNotFoundError):
        await player_service.get_player(db_session, 999)


@pytest.mark.asyncio
async def test_concurrent_resolution_creates_one_player(
    file_session_factory: async_sessionmaker[AsyncSession],
):
    """Two simultaneous resolutions of a brand-new name share one row."""

    async def resolve() -> int:
        async with file_session_factory() as session:
            return await player_service.resolve_player(session, "X")

    ids = await asyncio.gather(resolve(), resolve())

    assert ids[0] == ids[1]
    async with file_session_factory() as session:
        assert await count_players(session, "X") == 1


@pytest.mark.asyncio
async def test_many_concurrent_resolutions_converge(
    file_session_factory: async_sessionmaker[AsyncSession],
):
    names = ["Racer", " Racer", "Racer ", "Racer", "Racer"]

    async def resolve(name: str) -> int:
        async with file_session_factory() as session:
            return await player_service.resolve_player(session, name)

    ids = await asyncio.gather(*(resolve(n) for n in names))

    assert len(set(ids)) == 1
    async with file_session_factory() as session:
        assert await count_players(session, "Racer") == 1
