# tests/test_transaction.py

"""Tests for the atomic, serialized transaction runner."""

import asyncio

import pytest
from rankladder.exceptions import ConflictError, LockTimeoutError, StorageError
from rankladder.services import transaction
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


def _integrity_error() -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


@pytest.mark.asyncio
async def test_run_atomic_returns_result(db_session: AsyncSession):
    async def op() -> int:
        return 7

    assert await transaction.run_atomic(db_session, op) == 7


@pytest.mark.asyncio
async def test_integrity_error_is_retried(db_session: AsyncSession):
    calls = []

    async def op() -> str:
        calls.append(1)
        if len(calls) == 1:
            raise _integrity_error()
        return "ok"

    assert await transaction.run_atomic(db_session, op, attempts=3) == "ok"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_integrity_error_exhausts_attempts(db_session: AsyncSession):
    calls = []

    async def op() -> None:
        calls.append(1)
        raise _integrity_error()

    with pytest.raises(ConflictError):
        await transaction.run_atomic(db_session, op, attempts=2)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_other_database_errors_become_storage_errors(db_session: AsyncSession):
    async def op() -> None:
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    with pytest.raises(StorageError):
        await transaction.run_atomic(db_session, op)


@pytest.mark.asyncio
async def test_domain_errors_pass_through(db_session: AsyncSession):
    async def op() -> None:
        raise KeyError("nope")

    with pytest.raises(KeyError):
        await transaction.run_atomic(db_session, op)


@pytest.mark.asyncio
async def test_same_key_operations_do_not_interleave(db_session: AsyncSession):
    events: list[str] = []

    def make_op(tag: str):
        async def op() -> None:
            events.append(f"{tag}-start")
            await asyncio.sleep(0.01)
            events.append(f"{tag}-end")

        return op

    key = ("test", "serial")
    await asyncio.gather(
        transaction.run_atomic(db_session, make_op("a"), key=key),
        transaction.run_atomic(db_session, make_op("b"), key=key),
    )

    assert events in (
        ["a-start", "a-end", "b-start", "b-end"],
        ["b-start", "b-end", "a-start", "a-end"],
    )


@pytest.mark.asyncio
async def test_lock_timeout(db_session: AsyncSession, monkeypatch):
    monkeypatch.setattr(transaction, "LOCK_TIMEOUT", 0.05)
    key = ("test", "held")

    async def op() -> None:
        return None

    async with transaction.season_lock(key):
        with pytest.raises(LockTimeoutError):
            await transaction.run_atomic(db_session, op, key=key)

    # Released again afterwards
    await transaction.run_atomic(db_session, op, key=key)


def test_lock_timeout_is_a_storage_error():
    assert issubclass(LockTimeoutError, StorageError)


def test_keys_are_distinct():
    assert transaction.season_key(1) != transaction.year_key(1)
    assert transaction.player_key("1") != transaction.season_key(1)


@pytest.mark.asyncio
async def test_locks_are_dropped_once_released(db_session: AsyncSession):
    async def op() -> None:
        return None

    for name in ("Ann", "Bob", "Cy"):
        await transaction.run_atomic(
            db_session, op, key=transaction.player_key(name)
        )

    assert transaction.active_lock_keys() == set()


@pytest.mark.asyncio
async def test_lock_kept_while_waiters_remain(db_session: AsyncSession):
    key = ("test", "busy")
    release = asyncio.Event()

    async def slow() -> None:
        await release.wait()

    async def fast() -> None:
        return None

    first = asyncio.create_task(transaction.run_atomic(db_session, slow, key=key))
    second = asyncio.create_task(transaction.run_atomic(db_session, fast, key=key))
    await asyncio.sleep(0.01)
    assert key in transaction.active_lock_keys()

    release.set()
    await asyncio.gather(first, second)
    assert key not in transaction.active_lock_keys()


@pytest.mark.asyncio
async def test_lock_dropped_after_timeout(db_session: AsyncSession, monkeypatch):
    monkeypatch.setattr(transaction, "LOCK_TIMEOUT", 0.05)
    key = ("test", "timeout-cleanup")

    async def op() -> None:
        return None

    async with transaction.season_lock(key):
        with pytest.raises(LockTimeoutError):
            await transaction.run_atomic(db_session, op, key=key)
        assert key in transaction.active_lock_keys()

    assert key not in transaction.active_lock_keys()
