import uuid
from typing import Iterable

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import TeamNotFound, http_problem
from ..models import Team, TeamStat
from ..schemas import TeamCreate, TeamOut, TeamStatOut
from ..scoring import Discipline

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/teams", tags=["teams"])


def team_stats_out(rows: Iterable[TeamStat]) -> list[TeamStatOut]:
    by_discipline = {row.discipline: row for row in rows}
    out = []
    for discipline in Discipline:
        row = by_discipline.get(discipline.value)
        if row is None:
            out.append(TeamStatOut(discipline=discipline))
            continue
        out.append(
            TeamStatOut(
                discipline=discipline,
                points=row.points,
                matchesPlayed=row.matches_played,
                wins=row.wins,
                losses=row.matches_played - row.wins,
            )
        )
    return out


def team_out(team: Team, stats: Iterable[TeamStat] = ()) -> TeamOut:
    return TeamOut(
        id=team.id,
        name=team.name,
        captain=team.captain,
        stats=team_stats_out(stats),
    )


# POST /api/v0/teams
@router.post("", response_model=TeamOut)
async def create_team(body: TeamCreate, session: AsyncSession = Depends(get_session)):
    exists = (
        await session.execute(
            select(Team.id).where(func.lower(Team.name) == body.name.lower())
        )
    ).scalar_one_or_none()
    if exists:
        raise http_problem(
            status_code=400,
            detail=f"team name '{body.name}' already exists",
            code="team_exists",
        )
    team = Team(id=uuid.uuid4().hex, name=body.name, captain=body.captain)
    session.add(team)
    await session.commit()
    return team_out(team)


# GET /api/v0/teams
@router.get("", response_model=list[TeamOut])
async def list_teams(session: AsyncSession = Depends(get_session)):
    teams = (await session.execute(select(Team).order_by(Team.name))).scalars().all()
    return [team_out(t, t.stats) for t in teams]


# GET /api/v0/teams/{team_id}
@router.get("/{team_id}", response_model=TeamOut)
async def get_team(team_id: str, session: AsyncSession = Depends(get_session)):
    team = await session.get(Team, team_id)
    if not team:
        raise TeamNotFound(team_id)
    return team_out(team, team.stats)
