# src/rankladder/schemas/season.py

"""Pydantic schemas for seasons and ladder placement."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rankladder.db.models import MAX_INT
from rankladder.exceptions import MissingSeedsError
from rankladder.ladder.rules import MAX_RANK
from rankladder.ladder.seeds import ExplicitEntries, OrderedNames, Seeds


class SeedEntry(BaseModel):
    """One explicit (name, rank) seed.

    Both fields are loosely typed on purpose: a malformed entry is skipped
    during initialization instead of rejecting the whole batch.
    """

    name: Any = None
    rank: Any = None


class SeasonInit(BaseModel):
    """Payload for initializing a season's ladder.

    Exactly one seed form is used: `entries` when present, otherwise
    `players_in_order`.

    Examples:
        {"year": 2025, "players_in_order": ["Ann", "Bob", "Cy"]}
        {"year": 2025, "entries": [{"name": "Ann", "rank": 1},
                                   {"name": "Bob", "rank": 1}]}
    """

    year: int = Field(..., ge=1, le=MAX_INT, description="Season year, unique")
    players_in_order: list[Any] | None = Field(
        None, description="Names best-first; rank = 1-based position"
    )
    entries: list[SeedEntry] | None = Field(
        None, description="Explicit (name, rank) pairs; ties and gaps allowed"
    )

    def to_seeds(self) -> Seeds:
        """Resolve the payload into a single seed variant."""
        if self.entries is not None:
            return ExplicitEntries(tuple((e.name, e.rank) for e in self.entries))
        if self.players_in_order is not None:
            return OrderedNames(tuple(self.players_in_order))
        raise MissingSeedsError()


class SeasonRead(BaseModel):
    """Properties to return to the client."""

    id: int
    year: int

    model_config = ConfigDict(from_attributes=True)


class PlacementCreate(BaseModel):
    """Payload for placing a player on a season's ladder."""

    name: str
    rank: int | None = Field(
        None,
        ge=1,
        le=MAX_RANK,
        description="Exact rank to insert at; bottom if omitted",
    )


class PlacementRead(BaseModel):
    """Result of a placement request."""

    season_id: int
    player_id: int
    final_rank: int
    existed: bool


class DensifyRead(BaseModel):
    """Result of a densify request."""

    season_id: int
    changed: int = Field(..., description="Number of entries whose rank moved")
