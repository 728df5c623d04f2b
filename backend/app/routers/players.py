import logging
import uuid
from typing import Iterable

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import rankings_cache
from ..config import DEFAULT_PLAYER_RATING
from ..db import get_session
from ..exceptions import PlayerNotFound, TeamNotFound
from ..models import Player, PlayerStat, Team
from ..schemas import DisciplineStatOut, PlayerCreate, PlayerOut, RankedPlayerOut
from ..scoring import Discipline

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/players", tags=["players"])


def player_stats_out(rows: Iterable[PlayerStat]) -> list[DisciplineStatOut]:
    by_discipline = {row.discipline: row for row in rows}
    out = []
    for discipline in Discipline:
        row = by_discipline.get(discipline.value)
        played = row.matches_played if row else 0
        wins = row.wins if row else 0
        out.append(
            DisciplineStatOut(
                discipline=discipline,
                matchesPlayed=played,
                wins=wins,
                losses=played - wins,
            )
        )
    return out


def player_out(player: Player, stats: Iterable[PlayerStat] = ()) -> PlayerOut:
    return PlayerOut(
        id=player.id,
        name=player.name,
        teamId=player.team_id,
        status=player.status,
        rating=player.rating,
        previousRating=player.previous_rating,
        ratingChange=player.rating - player.previous_rating,
        stats=player_stats_out(stats),
    )


# POST /api/v0/players
@router.post("", response_model=PlayerOut)
async def create_player(body: PlayerCreate, session: AsyncSession = Depends(get_session)):
    if body.teamId and not await session.get(Team, body.teamId):
        raise TeamNotFound(body.teamId)

    rating = DEFAULT_PLAYER_RATING if body.rating is None else body.rating
    player = Player(
        id=uuid.uuid4().hex,
        name=body.name,
        team_id=body.teamId,
        status="active",
        rating=rating,
        previous_rating=rating,
    )
    session.add(player)
    await session.commit()
    await rankings_cache.clear()
    logger.info("Created player %s (rating=%d)", player.id, rating)
    return player_out(player)


# GET /api/v0/players -- ranked by rating
@router.get("", response_model=list[RankedPlayerOut])
async def list_players(
    teamId: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    cache_key = (teamId, limit, offset)
    generation = rankings_cache.generation
    cached = await rankings_cache.get(cache_key)
    if cached is not None:
        return cached

    stmt = select(Player).where(Player.status == "active")
    if teamId:
        stmt = stmt.where(Player.team_id == teamId)
    stmt = stmt.order_by(Player.rating.desc(), Player.name).offset(offset).limit(limit)
    rows = (await session.execute(stmt)).scalars().all()

    ranked = [
        RankedPlayerOut(
            rank=offset + i,
            id=p.id,
            name=p.name,
            teamId=p.team_id,
            rating=p.rating,
            ratingChange=p.rating - p.previous_rating,
        )
        for i, p in enumerate(rows, start=1)
    ]
    await rankings_cache.set(cache_key, ranked, generation=generation)
    return ranked


# GET /api/v0/players/{player_id}
@router.get("/{player_id}", response_model=PlayerOut)
async def get_player(player_id: str, session: AsyncSession = Depends(get_session)):
    player = await session.get(Player, player_id)
    if not player:
        raise PlayerNotFound(player_id)
    return player_out(player, player.stats)
