# src/rankladder/exceptions.py

"""Errors raised by the ladder services.

Each family maps to one HTTP status in main.py: not found (404), rejected
input (422), conflicts (409) and storage trouble (503). `details` travels
into log records as structured context.
"""

from __future__ import annotations


class LadderError(Exception):
    """Base exception for all RankLadder errors.

    Attributes:
        message: What went wrong, safe to show a client
        details: Structured context for log records
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(LadderError):
    """Base class for resource not found errors."""

    pass


class SeasonNotFoundError(ResourceNotFoundError):
    """Raised when a season id or year does not resolve to a season."""

    def __init__(self, season_id: int | None = None, year: int | None = None) -> None:
        if season_id is not None:
            message = f"Season with ID {season_id} not found"
        else:
            message = f"Season for year {year} not found"
        super().__init__(
            message=message,
            details={"season_id": season_id, "year": year},
        )


class PlayerNotFoundError(ResourceNotFoundError):
    """Raised when a player ID does not exist."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"No player with id {player_id}",
            details={"player_id": player_id},
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(LadderError):
    """Base class for validation errors."""

    pass


class BlankNameError(ValidationError):
    """Raised when a player name is missing or empty after trimming."""

    def __init__(self, field: str = "name") -> None:
        super().__init__(
            message=f"{field} must be a non-empty string",
            details={"field": field},
        )


class InvalidRankError(ValidationError):
    """Raised when a rank is not an integer the ladder can store (1..2**63-1)."""

    def __init__(self, rank: object) -> None:
        super().__init__(
            message=f"Rank must be an integer from 1 to 2**63-1, got {rank!r}",
            details={"rank": rank},
        )


class MissingSeedsError(ValidationError):
    """Raised when a season is initialized without any seed form."""

    def __init__(self) -> None:
        super().__init__(
            message="players_in_order or entries required",
            details={},
        )


class SelfMatchError(ValidationError):
    """Raised when the winner and the loser are the same player."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Winner and loser must be different players, got '{name}' twice",
            details={"player_name": name},
        )


# =============================================================================
# Conflict Errors (HTTP 409)
# =============================================================================


class ConflictError(LadderError):
    """Base class for uniqueness conflicts.

    The enclosing transaction is always rolled back before this is raised.
    """

    pass


class SeasonExistsError(ConflictError):
    """Raised when a season is initialized for a year that already exists."""

    def __init__(self, year: int) -> None:
        super().__init__(
            message=f"Season for year {year} already exists",
            details={"year": year},
        )


# =============================================================================
# Storage Errors (HTTP 503)
# =============================================================================


class StorageError(LadderError):
    """Raised when the store fails underneath an operation (I/O, lock timeout).

    The operation's transaction has been rolled back when this surfaces.
    """

    pass


class LockTimeoutError(StorageError):
    """Raised when a ladder lock cannot be acquired in time."""

    def __init__(self, key: object, timeout: float) -> None:
        super().__init__(
            message=f"Timed out after {timeout:g}s waiting for lock {key!r}",
            details={"lock_key": repr(key), "timeout": timeout},
        )
