# src/rankladder/ladder/rules.py

"""
The ladder's rank rules, free of any database access.

A ladder is minimal-disturbance: each reported match moves only the entries
needed to reflect the single ordering fact it establishes. Ranks are compared,
never assumed to be contiguous or unique.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

# Ranks are stored in a 64-bit signed INTEGER column.
MAX_RANK = 2**63 - 1


class Outcome(str, Enum):
    """Which of the three mutually exclusive rules a match triggered."""

    UPSET_AVOIDED = "upset_avoided"
    UPSET = "upset"
    TIE_BREAK = "tie_break"


@dataclass(frozen=True)
class RankChange:
    """The mutation a single match result calls for.

    Attributes:
        outcome: The rule that applied.
        winner_rank: The winner's rank after the match.
        shifted_rank: For a tie-break, the rank value whose other holders
            (everyone except the winner) move down by one. None otherwise.
    """

    outcome: Outcome
    winner_rank: int
    shifted_rank: int | None = None


def resolve_match(winner_rank: int, loser_rank: int) -> RankChange:
    """
    Decide how the ladder moves when the holder of `winner_rank` beats the
    holder of `loser_rank`. Lower rank values are better standings.
    """
    if winner_rank < loser_rank:
        # The favourite won: nothing to correct.
        return RankChange(Outcome.UPSET_AVOIDED, winner_rank)

    if winner_rank > loser_rank:
        # Winner jumps to just above the loser's pre-match rank, floored at 1.
        # Nobody else moves, so this may create or keep a tie.
        return RankChange(Outcome.UPSET, max(1, loser_rank - 1))

    # Equal ranks: the winner heads the band, the rest of the band drops one.
    return RankChange(Outcome.TIE_BREAK, winner_rank, shifted_rank=winner_rank)


def bottom_rank(ranks: Iterable[int]) -> int:
    """The rank one below the current worst entry, or 1 for an empty ladder."""
    return max(ranks, default=0) + 1


def dense_rank_map(ranks: Iterable[int]) -> dict[int, int]:
    """
    Map each distinct rank value to its position among the sorted distinct
    values, e.g. {1, 1, 4, 4, 7} -> {1: 1, 4: 2, 7: 3}.

    Entries that shared a value keep sharing one, and order is preserved.
    """
    return {old: new for new, old in enumerate(sorted(set(ranks)), start=1)}
