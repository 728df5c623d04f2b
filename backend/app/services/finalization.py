"""Apply a decided match to player ratings, player counters and team totals.

Everything a finalize touches (both players, their per-discipline counters,
their teams' totals and the match itself) is written in one transaction.
Each row carries a version column, so a concurrent writer turns our commit
into a ``StaleDataError``; the whole read-compute-write pass is then repeated
against fresh rows, up to ``FINALIZE_MAX_ATTEMPTS`` times.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..config import FINALIZE_MAX_ATTEMPTS
from ..exceptions import (
    MatchNotFound,
    NotReadyError,
    ReferenceNotFoundError,
    TransactionFailedError,
)
from ..models import (
    MATCH_COMPLETED,
    MATCH_IN_PROGRESS,
    GameLog,
    Match,
    Player,
    PlayerStat,
    Team,
    TeamStat,
)
from ..scoring import race
from .rating import K_FACTOR, match_ratings

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (StaleDataError, IntegrityError, OperationalError)


@dataclass
class RatingChange:
    player_id: str
    previous: int
    current: int

    @property
    def delta(self) -> int:
        return self.current - self.previous


@dataclass
class FinalizedMatch:
    match_id: str
    discipline: str
    winner_id: str
    loser_id: str
    final_score: str
    score: Dict[str, int]
    ratings: List[RatingChange] = field(default_factory=list)


def final_score_text(score_a: int, score_b: int) -> str:
    return f"{score_a}-{score_b}"


def match_side_players(m: Match) -> Dict[str, str]:
    return {"A": m.player_a_id, "B": m.player_b_id}


async def load_race_state(session: AsyncSession, m: Match) -> Dict:
    """Rebuild the race state of ``m`` from its persisted game log."""
    state = race.init_state(
        {"pointsToWin": {"A": m.target_a, "B": m.target_b}}, m.discipline
    )
    side_of = {pid: side for side, pid in match_side_players(m).items()}
    rows = (
        await session.execute(
            select(GameLog)
            .where(GameLog.match_id == m.id)
            .order_by(GameLog.game_number)
        )
    ).scalars().all()
    for row in rows:
        race.log_game(state, side_of[row.winner_id], row.points)
    return state


async def _fresh(session: AsyncSession, model, ref_id: str):
    return await session.get(model, ref_id, populate_existing=True)


async def _require(session: AsyncSession, model, ref_id: str, kind: str):
    row = await _fresh(session, model, ref_id)
    if row is None:
        raise ReferenceNotFoundError(kind, ref_id)
    return row


async def _player_stat(
    session: AsyncSession, player_id: str, discipline: str
) -> PlayerStat:
    stat = (
        await session.execute(
            select(PlayerStat)
            .where(
                PlayerStat.player_id == player_id,
                PlayerStat.discipline == discipline,
            )
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if stat is None:
        stat = PlayerStat(
            player_id=player_id, discipline=discipline, matches_played=0, wins=0
        )
        session.add(stat)
    return stat


async def _team_stat(session: AsyncSession, team_id: str, discipline: str) -> TeamStat:
    stat = (
        await session.execute(
            select(TeamStat)
            .where(TeamStat.team_id == team_id, TeamStat.discipline == discipline)
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if stat is None:
        stat = TeamStat(
            team_id=team_id, discipline=discipline, points=0, matches_played=0, wins=0
        )
        session.add(stat)
    return stat


async def _finalize_once(
    session: AsyncSession, match_id: str, k: float
) -> FinalizedMatch:
    m = await _fresh(session, Match, match_id)
    if m is None or m.deleted_at is not None:
        raise MatchNotFound(match_id)
    if m.status != MATCH_IN_PROGRESS:
        raise NotReadyError(f"match '{match_id}' is already {m.status}")

    state = await load_race_state(session, m)
    winner_side = race.match_winner(state)
    if winner_side is None:
        raise NotReadyError(f"match '{match_id}' has no winner yet")
    loser_side = race.other(winner_side)

    side_players = match_side_players(m)
    players = {
        side: await _require(session, Player, pid, "player")
        for side, pid in side_players.items()
    }
    scores = {"A": m.score_a, "B": m.score_b}

    new_winner, new_loser = match_ratings(
        players[winner_side].rating, players[loser_side].rating, k
    )
    new_ratings = {winner_side: new_winner, loser_side: new_loser}

    changes: List[RatingChange] = []
    for side in race.SIDES:
        player = players[side]
        won = side == winner_side
        changes.append(RatingChange(player.id, player.rating, new_ratings[side]))
        player.previous_rating = player.rating
        player.rating = new_ratings[side]

        stat = await _player_stat(session, player.id, m.discipline)
        stat.matches_played += 1
        if won:
            stat.wins += 1

        # team totals follow the team the player is on when the match is decided
        if player.team_id:
            await _require(session, Team, player.team_id, "team")
            team_stat = await _team_stat(session, player.team_id, m.discipline)
            team_stat.matches_played += 1
            if won:
                team_stat.wins += 1
            team_stat.points += scores[side]

    m.status = MATCH_COMPLETED
    m.winner_id = side_players[winner_side]
    m.final_score = final_score_text(m.score_a, m.score_b)
    m.completed_at = datetime.utcnow()
    await session.flush()

    return FinalizedMatch(
        match_id=m.id,
        discipline=m.discipline,
        winner_id=side_players[winner_side],
        loser_id=side_players[loser_side],
        final_score=m.final_score,
        score=scores,
        ratings=changes,
    )


async def finalize_match(
    session: AsyncSession,
    match_id: str,
    *,
    max_attempts: Optional[int] = None,
    k: float = K_FACTOR,
) -> FinalizedMatch:
    """Finalize a decided match in a single all-or-nothing transaction.

    Raises ``NotReadyError`` when the match has no winner yet or was already
    finalized, ``ReferenceNotFoundError`` when a player or team row has gone
    missing, and ``TransactionFailedError`` once conflicting writes have
    exhausted the attempt budget. On any failure the match stays in progress.
    """

    attempts = max_attempts or FINALIZE_MAX_ATTEMPTS
    last_error: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            result = await _finalize_once(session, match_id, k)
            await session.commit()
        except RETRYABLE_ERRORS as exc:
            await session.rollback()
            last_error = exc
            logger.warning(
                "Finalizing match %s failed on attempt %d/%d: %s",
                match_id,
                attempt,
                attempts,
                exc,
            )
            continue
        except Exception:
            await session.rollback()
            raise

        logger.info(
            "Finalized match %s: winner=%s score=%s",
            match_id,
            result.winner_id,
            result.final_score,
        )
        return result

    raise TransactionFailedError(
        f"could not finalize match '{match_id}' after {attempts} attempts; "
        "please retry"
    ) from last_error
