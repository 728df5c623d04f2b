from typing import Any, Dict, List, Literal, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from .scoring import Discipline, parse_discipline
from .exceptions import InvalidOperationError


def _strip_required(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field_name} must not be empty")
    return trimmed


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    captain: Optional[str] = Field(default=None, max_length=100)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class DisciplineStatOut(BaseModel):
    discipline: Discipline
    matchesPlayed: int = 0
    wins: int = 0
    losses: int = 0


class TeamStatOut(DisciplineStatOut):
    points: int = 0


class TeamOut(BaseModel):
    id: str
    name: str
    captain: Optional[str] = None
    stats: List[TeamStatOut] = Field(default_factory=list)


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    teamId: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _strip_required(value, "name")


class PlayerOut(BaseModel):
    id: str
    name: str
    teamId: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    rating: int
    previousRating: int
    ratingChange: int = 0
    stats: List[DisciplineStatOut] = Field(default_factory=list)


class RankedPlayerOut(BaseModel):
    rank: int
    id: str
    name: str
    teamId: Optional[str] = None
    rating: int
    ratingChange: int = 0


class MatchCreate(BaseModel):
    discipline: Discipline
    playerAId: str
    playerBId: str
    tournament: Optional[str] = Field(default=None, max_length=200)
    table: Optional[str] = Field(default=None, max_length=100)

    model_config = ConfigDict(extra="forbid")

    @field_validator("discipline", mode="before")
    @classmethod
    def _parse_discipline(cls, value: Any) -> Discipline:
        try:
            return parse_discipline(value)
        except InvalidOperationError as exc:
            raise ValueError(exc.detail) from None

    @model_validator(mode="after")
    def _distinct_players(self) -> "MatchCreate":
        if self.playerAId == self.playerBId:
            raise ValueError("a match needs two different players")
        return self


class GameEventIn(BaseModel):
    """8-ball: a game has been won outright."""

    type: Literal["GAME"]
    winnerId: str
    loserPoints: int = Field(..., strict=True)


class PocketEventIn(BaseModel):
    """9-ball: a ball was legally pocketed by a player."""

    type: Literal["POCKET"]
    ball: int = Field(..., strict=True)
    playerId: str


class DeadBallEventIn(BaseModel):
    """9-ball: a ball left play without credit to anyone."""

    type: Literal["DEAD"]
    ball: int = Field(..., strict=True)


EventIn = Union[GameEventIn, PocketEventIn, DeadBallEventIn]


class MatchIdOut(BaseModel):
    """Schema returned after starting a match."""

    id: str


class GameLogOut(BaseModel):
    gameNumber: int
    winnerId: str
    points: int


class MatchPlayerOut(BaseModel):
    id: str
    name: Optional[str] = None
    teamId: Optional[str] = None
    pointsToWin: int
    score: int


class MatchOut(BaseModel):
    """Live or completed match as seen by a scorer or a viewer."""

    id: str
    discipline: Discipline
    status: Literal["in_progress", "completed"]
    playerA: MatchPlayerOut
    playerB: MatchPlayerOut
    games: List[GameLogOut] = Field(default_factory=list)
    winnerId: Optional[str] = None
    onTheHill: bool = False
    finalScore: Optional[str] = None
    tournament: Optional[str] = None
    table: Optional[str] = None
    createdAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    summary: Optional[Dict[str, Any]] = None


class MatchSummaryOut(BaseModel):
    id: str
    discipline: Discipline
    status: Literal["in_progress", "completed"]
    playerAId: str
    playerBId: str
    scoreA: int
    scoreB: int
    finalScore: Optional[str] = None
    createdAt: Optional[datetime] = None


class RatingChangeOut(BaseModel):
    playerId: str
    previousRating: int
    rating: int
    change: int


class FinalizedMatchOut(BaseModel):
    id: str
    discipline: Discipline
    winnerId: str
    loserId: str
    finalScore: str
    score: Dict[str, int]
    ratings: List[RatingChangeOut] = Field(default_factory=list)
