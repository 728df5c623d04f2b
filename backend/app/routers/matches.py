# backend/app/routers/matches.py
import logging
import uuid
from datetime import datetime
from typing import Annotated, Any, Sequence

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..cache import rankings_cache
from ..db import get_session
from ..exceptions import (
    InvalidOperationError,
    MatchAlreadyConcludedError,
    MatchNotFound,
    PlayerNotFound,
    http_problem,
)
from ..models import (
    MATCH_COMPLETED,
    MATCH_IN_PROGRESS,
    GameLog,
    Match,
    Player,
    ScoreEvent,
)
from ..rate_limit import event_rate_limit, limiter
from ..schemas import (
    DeadBallEventIn,
    EventIn,
    FinalizedMatchOut,
    GameEventIn,
    GameLogOut,
    MatchCreate,
    MatchIdOut,
    MatchOut,
    MatchPlayerOut,
    MatchSummaryOut,
    PocketEventIn,
    RatingChangeOut,
)
from ..scoring import Discipline, engine_for, parse_discipline
from ..services import finalize_match, resolve_handicap
from ..services.finalization import match_side_players
from .streams import broadcast

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/matches", tags=["matches"])


def _race_config(m: Match) -> dict:
    return {"pointsToWin": {"A": m.target_a, "B": m.target_b}}


def _side_of(m: Match, player_id: str) -> str:
    for side, pid in match_side_players(m).items():
        if pid == player_id:
            return side
    raise InvalidOperationError(f"player '{player_id}' is not playing in this match")


def _engine_event(m: Match, ev: Any) -> dict:
    """Translate an API event into the engine's side-based event payload."""
    discipline = parse_discipline(m.discipline)
    if isinstance(ev, GameEventIn):
        if discipline is not Discipline.EIGHT_BALL:
            raise InvalidOperationError("GAME events are only valid in 8-ball matches")
        return {
            "type": "GAME",
            "winner": _side_of(m, ev.winnerId),
            "loserPoints": ev.loserPoints,
        }
    if discipline is not Discipline.NINE_BALL:
        raise InvalidOperationError(f"{ev.type} events are only valid in 9-ball matches")
    if isinstance(ev, PocketEventIn):
        return {"type": "POCKET", "ball": ev.ball, "by": _side_of(m, ev.playerId)}
    if isinstance(ev, DeadBallEventIn):
        return {"type": "DEAD", "ball": ev.ball}
    raise InvalidOperationError("unsupported event")


def _conflict() -> Exception:
    return http_problem(
        status_code=409,
        detail="match was updated concurrently; reload it and retry",
        code="match_conflict",
    )


async def _get_match(session: AsyncSession, mid: str) -> Match:
    m = (
        await session.execute(
            select(Match).where(Match.id == mid, Match.deleted_at.is_(None))
        )
    ).scalar_one_or_none()
    if not m:
        raise MatchNotFound(mid)
    return m


async def _load_events(session: AsyncSession, mid: str) -> Sequence[ScoreEvent]:
    return (
        await session.execute(
            select(ScoreEvent).where(ScoreEvent.match_id == mid).order_by(ScoreEvent.seq)
        )
    ).scalars().all()


async def match_view(session: AsyncSession, m: Match) -> MatchOut:
    players = {
        p.id: p
        for p in (
            await session.execute(
                select(Player).where(Player.id.in_([m.player_a_id, m.player_b_id]))
            )
        ).scalars().all()
    }
    games = (
        await session.execute(
            select(GameLog).where(GameLog.match_id == m.id).order_by(GameLog.game_number)
        )
    ).scalars().all()
    summary = m.details if isinstance(m.details, dict) else {}

    def _player(pid: str, team_id: str | None, target: int, score: int) -> MatchPlayerOut:
        player = players.get(pid)
        return MatchPlayerOut(
            id=pid,
            name=player.name if player else None,
            teamId=team_id,
            pointsToWin=target,
            score=score,
        )

    winner_side = summary.get("winner")
    if m.winner_id:
        winner_id = m.winner_id
    elif winner_side:
        winner_id = match_side_players(m).get(winner_side)
    else:
        winner_id = None

    return MatchOut(
        id=m.id,
        discipline=m.discipline,
        status=m.status,
        playerA=_player(m.player_a_id, m.team_a_id, m.target_a, m.score_a),
        playerB=_player(m.player_b_id, m.team_b_id, m.target_b, m.score_b),
        games=[
            GameLogOut(gameNumber=g.game_number, winnerId=g.winner_id, points=g.points)
            for g in games
        ],
        winnerId=winner_id,
        onTheHill=bool(summary.get("onTheHill")) and m.status == MATCH_IN_PROGRESS,
        finalScore=m.final_score,
        tournament=m.tournament,
        table=m.table_name,
        createdAt=m.created_at,
        completedAt=m.completed_at,
        summary=summary or None,
    )


# GET /api/v0/matches
@router.get("", response_model=list[MatchSummaryOut])
async def list_matches(
    status: str | None = Query(None, pattern="^(in_progress|completed)$"),
    playerId: str | None = None,
    discipline: Discipline | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Match).where(Match.deleted_at.is_(None))
    if status:
        stmt = stmt.where(Match.status == status)
    if discipline:
        stmt = stmt.where(Match.discipline == discipline.value)
    if playerId:
        stmt = stmt.where(
            or_(Match.player_a_id == playerId, Match.player_b_id == playerId)
        )
    stmt = stmt.order_by(Match.created_at.desc(), Match.id).offset(offset).limit(limit)
    rows = (await session.execute(stmt)).scalars().all()
    return [
        MatchSummaryOut(
            id=m.id,
            discipline=m.discipline,
            status=m.status,
            playerAId=m.player_a_id,
            playerBId=m.player_b_id,
            scoreA=m.score_a,
            scoreB=m.score_b,
            finalScore=m.final_score,
            createdAt=m.created_at,
        )
        for m in rows
    ]


# POST /api/v0/matches
async def start_match(body: MatchCreate, session: AsyncSession) -> MatchIdOut:
    player_a = await session.get(Player, body.playerAId)
    if not player_a:
        raise PlayerNotFound(body.playerAId)
    player_b = await session.get(Player, body.playerBId)
    if not player_b:
        raise PlayerNotFound(body.playerBId)

    target_a, target_b = resolve_handicap(
        player_a.rating, player_b.rating, body.discipline
    )
    m = Match(
        id=uuid.uuid4().hex,
        discipline=body.discipline.value,
        player_a_id=player_a.id,
        player_b_id=player_b.id,
        team_a_id=player_a.team_id,
        team_b_id=player_b.team_id,
        target_a=target_a,
        target_b=target_b,
        score_a=0,
        score_b=0,
        status=MATCH_IN_PROGRESS,
        tournament=body.tournament,
        table_name=body.table,
    )
    engine = engine_for(body.discipline)
    m.details = engine.summary(engine.init_state(_race_config(m)))
    session.add(m)
    await session.commit()
    logger.info(
        "Started %s match %s: %s (race to %d) vs %s (race to %d)",
        m.discipline,
        m.id,
        player_a.id,
        target_a,
        player_b.id,
        target_b,
    )
    return MatchIdOut(id=m.id)


@router.post("", response_model=MatchIdOut)
async def start_match_route(
    body: MatchCreate, session: AsyncSession = Depends(get_session)
) -> MatchIdOut:
    return await start_match(body, session)


# GET /api/v0/matches/{mid}
@router.get("/{mid}", response_model=MatchOut)
async def get_match(mid: str, session: AsyncSession = Depends(get_session)):
    m = await _get_match(session, mid)
    return await match_view(session, m)


# POST /api/v0/matches/{mid}/events
async def record_game_outcome(mid: str, ev: EventIn, session: AsyncSession) -> MatchOut:
    m = await _get_match(session, mid)
    if m.status != MATCH_IN_PROGRESS:
        raise MatchAlreadyConcludedError(mid)

    existing = await _load_events(session, mid)
    engine = engine_for(m.discipline)
    state = engine.init_state(_race_config(m))
    for old in existing:
        state = engine.apply(old.payload, state)

    payload = _engine_event(m, ev)
    games_before = len(state["games"])
    state = engine.apply(payload, state)

    session.add(
        ScoreEvent(
            id=uuid.uuid4().hex,
            match_id=mid,
            seq=len(existing) + 1,
            type=payload["type"],
            payload=payload,
        )
    )
    side_players = match_side_players(m)
    for game in state["games"][games_before:]:
        session.add(
            GameLog(
                id=uuid.uuid4().hex,
                match_id=mid,
                game_number=game["gameNumber"],
                winner_id=side_players[game["winner"]],
                points=game["points"],
            )
        )
    m.score_a = state["points"]["A"]
    m.score_b = state["points"]["B"]
    m.details = engine.summary(state)

    try:
        await session.commit()
    except (StaleDataError, IntegrityError):
        await session.rollback()
        raise _conflict()

    view = await match_view(session, m)
    await broadcast(mid, {"event": payload, "summary": m.details})
    return view


@router.post("/{mid}/events", response_model=MatchOut)
@limiter.limit(event_rate_limit)
async def record_game_outcome_route(
    request: Request,
    mid: str,
    ev: Annotated[EventIn, Body(discriminator="type")],
    session: AsyncSession = Depends(get_session),
):
    return await record_game_outcome(mid, ev, session)


# POST /api/v0/matches/{mid}/finalize
async def finalize_match_endpoint(mid: str, session: AsyncSession) -> FinalizedMatchOut:
    result = await finalize_match(session, mid)
    await rankings_cache.clear()
    await broadcast(
        mid,
        {
            "status": MATCH_COMPLETED,
            "winnerId": result.winner_id,
            "finalScore": result.final_score,
        },
    )
    return FinalizedMatchOut(
        id=result.match_id,
        discipline=result.discipline,
        winnerId=result.winner_id,
        loserId=result.loser_id,
        finalScore=result.final_score,
        score=result.score,
        ratings=[
            RatingChangeOut(
                playerId=change.player_id,
                previousRating=change.previous,
                rating=change.current,
                change=change.delta,
            )
            for change in result.ratings
        ],
    )


@router.post("/{mid}/finalize", response_model=FinalizedMatchOut)
async def finalize_match_route(mid: str, session: AsyncSession = Depends(get_session)):
    return await finalize_match_endpoint(mid, session)


# DELETE /api/v0/matches/{mid}
async def cancel_match(mid: str, session: AsyncSession) -> None:
    m = await _get_match(session, mid)
    if m.status != MATCH_IN_PROGRESS:
        raise MatchAlreadyConcludedError(mid)

    m.deleted_at = datetime.utcnow()
    try:
        await session.commit()
    except StaleDataError:
        await session.rollback()
        raise _conflict()

    logger.info("Cancelled match %s", mid)
    await broadcast(mid, {"status": "cancelled"})


@router.delete("/{mid}", status_code=204)
async def cancel_match_route(mid: str, session: AsyncSession = Depends(get_session)):
    await cancel_match(mid, session)
    return Response(status_code=204)
