# src/rankladder/schemas/match.py

"""Pydantic schemas for the Match resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rankladder.db.models import MAX_INT
from rankladder.ladder.rules import Outcome


class MatchCreate(BaseModel):
    """Properties to receive via API when reporting a match.

    Examples:
        {"season_id": 1, "winner_name": "Ann", "loser_name": "Bob"}
        {"season_id": 1, "winner_name": "Cy", "loser_name": "Ann",
         "played_at": "2025-05-01T18:30:00Z", "score": "6-4 6-3"}
    """

    season_id: int = Field(..., ge=1, le=MAX_INT)
    winner_name: str
    loser_name: str
    played_at: datetime | None = Field(
        None, description="When the match was played; defaults to now"
    )
    score: str | None = None
    note: str | None = None


class MatchReportRead(BaseModel):
    """What a reported match did to the ladder."""

    match_id: int
    outcome: Outcome
    winner_id: int
    loser_id: int
    winner_rank_before: int
    loser_rank_before: int
    winner_rank_after: int
    loser_rank_after: int

    model_config = ConfigDict(from_attributes=True)


class MatchRead(BaseModel):
    """A match history row."""

    id: int
    played_at: datetime
    winner: str
    loser: str
    score: str | None = None
    note: str | None = None

    model_config = ConfigDict(from_attributes=True)
