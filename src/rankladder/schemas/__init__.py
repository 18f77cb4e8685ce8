# src/rankladder/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .match import MatchCreate, MatchRead, MatchReportRead
from .player import PlayerBase, PlayerRead, PlayerResolve
from .ranking import LadderEntryRead
from .season import (
    DensifyRead,
    PlacementCreate,
    PlacementRead,
    SeasonInit,
    SeasonRead,
    SeedEntry,
)

__all__ = [
    # Match
    "MatchCreate",
    "MatchRead",
    "MatchReportRead",
    # Player
    "PlayerBase",
    "PlayerRead",
    "PlayerResolve",
    # Ranking
    "LadderEntryRead",
    # Season
    "DensifyRead",
    "PlacementCreate",
    "PlacementRead",
    "SeasonInit",
    "SeasonRead",
    "SeedEntry",
]
