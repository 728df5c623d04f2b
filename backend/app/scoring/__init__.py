"""Scoring engines for the supported pool disciplines."""

from . import eight_ball, nine_ball, race
from .disciplines import (
    DISCIPLINE_RULES,
    Discipline,
    DisciplineRules,
    parse_discipline,
    rules_for,
)

ENGINES = {
    Discipline.EIGHT_BALL: eight_ball,
    Discipline.NINE_BALL: nine_ball,
}


def engine_for(discipline):
    return ENGINES[parse_discipline(discipline)]


__all__ = [
    "DISCIPLINE_RULES",
    "Discipline",
    "DisciplineRules",
    "ENGINES",
    "eight_ball",
    "engine_for",
    "nine_ball",
    "parse_discipline",
    "race",
    "rules_for",
]
