# src/rankladder/services/match_service.py

"""Business logic for match-related operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from rankladder.db import models
from rankladder.exceptions import InvalidRankError, SelfMatchError, ValidationError
from rankladder.ladder.rules import MAX_RANK, Outcome, resolve_match
from rankladder.services.placement_service import ensure_in_ladder, get_bottom_rank
from rankladder.services.player_service import find_or_create_player, normalize_name
from rankladder.services.season_service import get_season
from rankladder.services.transaction import run_atomic, season_key

logger = logging.getLogger(__name__)

DEFAULT_MATCH_LIMIT = 100


@dataclass(frozen=True)
class MatchReport:
    """What a reported match did to the ladder."""

    match_id: int
    outcome: Outcome
    winner_id: int
    loser_id: int
    winner_rank_before: int
    loser_rank_before: int
    winner_rank_after: int
    loser_rank_after: int


@dataclass(frozen=True)
class MatchRecord:
    """A match history row with player names resolved."""

    id: int
    played_at: datetime
    winner: str
    loser: str
    score: str | None
    note: str | None


def parse_played_at(value: datetime | str | None) -> datetime | None:
    """
    Accept a datetime or an ISO-8601 string; return an aware UTC datetime.

    Naive values are taken to be UTC already.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(
                f"played_at is not an ISO-8601 timestamp: {value!r}",
                details={"played_at": value},
            )
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def _current_ranks(
    db: AsyncSession, season_id: int, *player_ids: int
) -> dict[int, int]:
    query = select(models.SeasonRanking.player_id, models.SeasonRanking.rank).where(
        models.SeasonRanking.season_id == season_id,
        models.SeasonRanking.player_id.in_(player_ids),
    )
    result = await db.execute(query)
    return {player_id: rank for player_id, rank in result.all()}


async def apply_match_result(
    db: AsyncSession, season_id: int, winner_id: int, loser_id: int
) -> tuple[Outcome, dict[int, int], dict[int, int]]:
    """
    Apply the ladder rule for one result to current rank state.

    Returns the outcome plus the two players' ranks before and after.
    Flushes, never commits.
    """
    before = await _current_ranks(db, season_id, winner_id, loser_id)
    change = resolve_match(before[winner_id], before[loser_id])

    if change.outcome is Outcome.UPSET:
        await db.execute(
            update(models.SeasonRanking)
            .where(
                models.SeasonRanking.season_id == season_id,
                models.SeasonRanking.player_id == winner_id,
            )
            .values(rank=change.winner_rank)
        )
    elif change.outcome is Outcome.TIE_BREAK:
        if change.shifted_rank >= MAX_RANK:
            raise InvalidRankError(change.shifted_rank + 1)
        # Everyone else in the winner's rank band drops one, loser included.
        await db.execute(
            update(models.SeasonRanking)
            .where(
                models.SeasonRanking.season_id == season_id,
                models.SeasonRanking.rank == change.shifted_rank,
                models.SeasonRanking.player_id != winner_id,
            )
            .values(rank=models.SeasonRanking.rank + 1)
        )
    await db.flush()

    after = await _current_ranks(db, season_id, winner_id, loser_id)
    return change.outcome, before, after


async def report_match(
    db: AsyncSession,
    season_id: int | None,
    winner_name: str | None,
    loser_name: str | None,
    played_at: datetime | str | None = None,
    score: str | None = None,
    note: str | None = None,
) -> MatchReport:
    """
    Record a match result and move the ladder accordingly.

    This service is responsible for:
    1. Resolving both names to players, creating new ones
    2. Appending the immutable Match record
    3. Auto-admitting either player missing from the ladder at its bottom
    4. Applying exactly one of the upset-avoided / upset / tie-break rules

    All of it is one transaction under the season's lock. If any step fails,
    nothing is committed.

    Raises:
        ValidationError: If season_id is missing or played_at is malformed
        BlankNameError: If either name is empty after trimming
        SelfMatchError: If winner and loser are the same player
        SeasonNotFoundError: If the season doesn't exist
    """
    if not season_id:
        raise ValidationError("season_id required", details={"field": "season_id"})
    winner = normalize_name(winner_name, "winner_name")
    loser = normalize_name(loser_name, "loser_name")
    if winner == loser:
        raise SelfMatchError(winner)
    when = parse_played_at(played_at)

    logger.info("Processing match report", extra={"season_id": season_id})

    async def _report() -> MatchReport:
        await get_season(db, season_id)

        # 1. Resolve identities
        winner_player = await find_or_create_player(db, winner)
        loser_player = await find_or_create_player(db, loser)

        # 2. Append the match record
        match = models.Match(
            season_id=season_id,
            winner_id=winner_player.id,
            loser_id=loser_player.id,
            score=score or None,
            note=note or None,
        )
        if when is not None:
            match.played_at = when
        db.add(match)
        await db.flush()

        # 3. Auto-admit: the bottom is fixed before either admission, so two
        #    newcomers tie there and the tie-break rule separates them.
        bottom = await get_bottom_rank(db, season_id)
        await ensure_in_ladder(db, season_id, winner_player.id, at_rank=bottom)
        await ensure_in_ladder(db, season_id, loser_player.id, at_rank=bottom)

        # 4 & 5. Compare ranks and apply the rule
        outcome, before, after = await apply_match_result(
            db, season_id, winner_player.id, loser_player.id
        )

        logger.info(
            "Match processed",
            extra={
                "season_id": season_id,
                "match_id": match.id,
                "outcome": outcome.value,
                "winner_rank": after[winner_player.id],
                "loser_rank": after[loser_player.id],
            },
        )
        return MatchReport(
            match_id=match.id,
            outcome=outcome,
            winner_id=winner_player.id,
            loser_id=loser_player.id,
            winner_rank_before=before[winner_player.id],
            loser_rank_before=before[loser_player.id],
            winner_rank_after=after[winner_player.id],
            loser_rank_after=after[loser_player.id],
        )

    try:
        return await run_atomic(db, _report, key=season_key(season_id))
    except Exception as e:
        logger.error(
            "Failed to process match",
            extra={"season_id": season_id, "error": str(e)},
        )
        raise


async def get_matches(
    db: AsyncSession, season_id: int, limit: int = DEFAULT_MATCH_LIMIT
) -> list[MatchRecord]:
    """
    The season's match history, most recently played first.

    Matches with the same played_at are ordered by insertion, newest first.
    """
    await get_season(db, season_id)

    winner = aliased(models.Player)
    loser = aliased(models.Player)
    query = (
        select(
            models.Match.id,
            models.Match.played_at,
            winner.name,
            loser.name,
            models.Match.score,
            models.Match.note,
        )
        .join(winner, winner.id == models.Match.winner_id)
        .join(loser, loser.id == models.Match.loser_id)
        .where(models.Match.season_id == season_id)
        .order_by(models.Match.played_at.desc(), models.Match.id.desc())
        .limit(limit)
    )
    result = await db.execute(query)
    return [MatchRecord(*row) for row in result.all()]
