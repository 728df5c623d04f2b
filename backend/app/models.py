from sqlalchemy.orm import relationship
from sqlalchemy import (
    CheckConstraint,
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base

MATCH_IN_PROGRESS = "in_progress"
MATCH_COMPLETED = "completed"


class Team(Base):
    __tablename__ = "team"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    captain = Column(String, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    stats = relationship("TeamStat", lazy="selectin")

    __mapper_args__ = {"version_id_col": version}


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    team_id = Column(String, ForeignKey("team.id"), nullable=True)
    status = Column(String, nullable=False, default="active")  # "active" | "inactive"
    rating = Column(Integer, nullable=False, default=500)
    # rating before the most recently finalized match
    previous_rating = Column(Integer, nullable=False, default=500)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    stats = relationship("PlayerStat", lazy="selectin")

    __mapper_args__ = {"version_id_col": version}


class PlayerStat(Base):
    """Per-discipline match counters for a player."""

    __tablename__ = "player_stat"
    player_id = Column(String, ForeignKey("player.id"), primary_key=True)
    discipline = Column(String, primary_key=True)
    matches_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("wins <= matches_played", name="ck_player_stat_wins"),
    )
    __mapper_args__ = {"version_id_col": version}


class TeamStat(Base):
    """Per-discipline aggregates for a team, appended to on every finalize."""

    __tablename__ = "team_stat"
    team_id = Column(String, ForeignKey("team.id"), primary_key=True)
    discipline = Column(String, primary_key=True)
    points = Column(Integer, nullable=False, default=0)
    matches_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("wins <= matches_played", name="ck_team_stat_wins"),
    )
    __mapper_args__ = {"version_id_col": version}


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    discipline = Column(String, nullable=False)  # "eight-ball" | "nine-ball"
    player_a_id = Column(String, ForeignKey("player.id"), nullable=False)
    player_b_id = Column(String, ForeignKey("player.id"), nullable=False)
    # copied from the players when the match is set up
    team_a_id = Column(String, ForeignKey("team.id"), nullable=True)
    team_b_id = Column(String, ForeignKey("team.id"), nullable=True)
    target_a = Column(Integer, nullable=False)
    target_b = Column(Integer, nullable=False)
    score_a = Column(Integer, nullable=False, default=0)
    score_b = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=MATCH_IN_PROGRESS, index=True)
    winner_id = Column(String, ForeignKey("player.id"), nullable=True)
    final_score = Column(String, nullable=True)
    tournament = Column(String, nullable=True)
    table_name = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    completed_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}


class GameLog(Base):
    __tablename__ = "game_log"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    game_number = Column(Integer, nullable=False)
    winner_id = Column(String, ForeignKey("player.id"), nullable=False)
    # credit earned by the loser of the game; the winner takes the cap
    points = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "match_id", "game_number", name="uq_game_log_match_id_game_number"
        ),
    )


class ScoreEvent(Base):
    __tablename__ = "score_event"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    seq = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    type = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "seq", name="uq_score_event_match_id_seq"),
    )
