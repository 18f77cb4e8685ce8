# src/rankladder/services/transaction.py

"""Atomic, serialized execution of ladder mutations.

Every mutating operation reads current rank state and writes new state. Two
such operations interleaving on the same season would lose updates, so each
one runs under an in-process lock for its key and inside a single database
transaction that is committed on success and rolled back on any error.
"""

from __future__ import annotations

import asyncio
import logging
import os
import weakref
from collections.abc import AsyncIterator, Awaitable, Callable, Hashable
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rankladder.exceptions import ConflictError, LockTimeoutError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOCK_TIMEOUT = float(os.getenv("LADDER_LOCK_TIMEOUT", "10"))
CONFLICT_RETRIES = int(os.getenv("LADDER_CONFLICT_RETRIES", "3"))


class _LockSlot:
    """A key's lock plus how many tasks currently hold or await it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


# One registry per event loop: asyncio locks cannot be shared across loops.
# A slot is dropped as soon as no task holds or awaits it.
_locks: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, dict[Hashable, _LockSlot]
] = weakref.WeakKeyDictionary()


def season_key(season_id: int) -> tuple[str, int]:
    return ("season", season_id)


def year_key(year: int) -> tuple[str, int]:
    return ("year", year)


def player_key(name: str) -> tuple[str, str]:
    return ("player", name)


def _registry() -> dict[Hashable, _LockSlot]:
    return _locks.setdefault(asyncio.get_running_loop(), {})


def active_lock_keys() -> set[Hashable]:
    """Keys whose lock is currently held or awaited on this event loop."""
    return set(_registry())


@asynccontextmanager
async def season_lock(
    key: Hashable, timeout: float | None = None
) -> AsyncIterator[None]:
    """Hold the lock for `key`, giving up with LockTimeoutError after `timeout`."""
    timeout = LOCK_TIMEOUT if timeout is None else timeout
    registry = _registry()
    slot = registry.get(key)
    if slot is None:
        slot = registry[key] = _LockSlot()
    slot.users += 1
    try:
        try:
            await asyncio.wait_for(slot.lock.acquire(), timeout)
        except asyncio.TimeoutError:
            logger.error("Lock acquisition timed out", extra={"lock_key": repr(key)})
            raise LockTimeoutError(key, timeout)
        try:
            yield
        finally:
            slot.lock.release()
    finally:
        slot.users -= 1
        if slot.users == 0 and registry.get(key) is slot:
            del registry[key]


async def run_atomic(
    db: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    key: Hashable | None = None,
    attempts: int | None = None,
) -> T:
    """
    Run `operation` as one transaction on `db`, serialized on `key`.

    - Success: the session is committed and the operation's result returned.
    - IntegrityError: rolled back and the whole operation retried, since a
      concurrent writer may have created the row we tried to insert. When
      attempts run out a ConflictError is raised.
    - Any other SQLAlchemyError: rolled back and re-raised as StorageError.
    - Anything else (domain errors included): rolled back and re-raised.

    `operation` must only flush, never commit, and must re-read everything
    it needs on each attempt.
    """
    attempts = CONFLICT_RETRIES if attempts is None else attempts
    lock_cm = season_lock(key) if key is not None else _no_lock()

    async with lock_cm:
        for attempt in range(1, attempts + 1):
            try:
                result = await operation()
                await db.commit()
                return result
            except IntegrityError as e:
                await db.rollback()
                logger.warning(
                    "Integrity conflict, retrying transaction",
                    extra={"attempt": attempt, "lock_key": repr(key), "error": str(e)},
                )
                if attempt >= attempts:
                    raise ConflictError(
                        message="Conflicting concurrent update, please retry",
                        details={"attempts": attempts, "lock_key": repr(key)},
                    ) from e
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    "Storage failure, transaction rolled back",
                    extra={"lock_key": repr(key), "error": str(e)},
                    exc_info=True,
                )
                raise StorageError(
                    message="Storage failure", details={"error": str(e)}
                ) from e
            except Exception:
                await db.rollback()
                raise

    # Only reached when attempts < 1.
    raise ConflictError(message="Conflicting concurrent update, please retry")


@asynccontextmanager
async def _no_lock() -> AsyncIterator[None]:
    yield
