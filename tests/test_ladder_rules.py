# tests/test_ladder_rules.py

"""Unit tests for the pure ladder rules."""

import pytest
from rankladder.ladder.rules import (
    Outcome,
    RankChange,
    bottom_rank,
    dense_rank_map,
    resolve_match,
)

# =============================================================================
# resolve_match
# =============================================================================


def test_favourite_winning_changes_nothing():
    """Winner at 3 beating loser at 7 is an expected result."""
    change = resolve_match(winner_rank=3, loser_rank=7)

    assert change == RankChange(Outcome.UPSET_AVOIDED, winner_rank=3)
    assert change.shifted_rank is None


def test_upset_moves_winner_just_above_loser():
    """Winner at 7 beating loser at 3 lands on 2."""
    change = resolve_match(winner_rank=7, loser_rank=3)

    assert change.outcome is Outcome.UPSET
    assert change.winner_rank == 2
    assert change.shifted_rank is None


@pytest.mark.parametrize("winner_rank", [2, 5, 40])
def test_upset_over_rank_one_is_floored_at_one(winner_rank: int):
    """Beating the rank-1 player ties the winner with them at 1."""
    change = resolve_match(winner_rank=winner_rank, loser_rank=1)

    assert change.outcome is Outcome.UPSET
    assert change.winner_rank == 1


def test_equal_ranks_is_a_tie_break():
    """Winner keeps the shared rank; the band at that rank is shifted."""
    change = resolve_match(winner_rank=4, loser_rank=4)

    assert change.outcome is Outcome.TIE_BREAK
    assert change.winner_rank == 4
    assert change.shifted_rank == 4


def test_adjacent_upset_swaps_into_tie():
    """Rank 3 beating rank 2 moves the winner to 1, leaving 2 untouched."""
    change = resolve_match(winner_rank=3, loser_rank=2)

    assert change.winner_rank == 1


# =============================================================================
# bottom_rank / dense_rank_map
# =============================================================================


def test_bottom_rank_of_empty_ladder_is_one():
    assert bottom_rank([]) == 1


def test_bottom_rank_is_one_past_the_worst():
    assert bottom_rank([1, 4, 4, 2]) == 5


def test_dense_rank_map_preserves_ties_and_order():
    """{1,1,4,4,7} collapses to {1,1,2,2,3}."""
    ranks = [1, 1, 4, 4, 7]
    mapping = dense_rank_map(ranks)

    assert mapping == {1: 1, 4: 2, 7: 3}
    assert [mapping[r] for r in ranks] == [1, 1, 2, 2, 3]


def test_dense_rank_map_is_identity_on_dense_ladder():
    mapping = dense_rank_map([1, 2, 2, 3])

    assert all(old == new for old, new in mapping.items())


def test_dense_rank_map_of_nothing_is_empty():
    assert dense_rank_map([]) == {}
