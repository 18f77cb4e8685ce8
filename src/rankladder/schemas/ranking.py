# src/rankladder/schemas/ranking.py

"""Ladder schemas for season rankings."""

from pydantic import BaseModel, ConfigDict, Field


class LadderEntryRead(BaseModel):
    """Single entry in a season ladder.

    Attributes:
        rank: Ladder rank (1 = best); may be shared with other players
        player_id: The player's id
        name: The player's display name
    """

    rank: int = Field(..., ge=1, description="Ladder rank, ties allowed")
    player_id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
