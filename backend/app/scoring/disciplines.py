"""Supported pool disciplines and their fixed per-game scoring rules."""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import InvalidOperationError


class Discipline(str, Enum):
    EIGHT_BALL = "eight-ball"
    NINE_BALL = "nine-ball"


@dataclass(frozen=True)
class DisciplineRules:
    # points credited to the winner of a single game
    game_cap: int
    # most points the loser of a single game can be credited with
    max_loser_points: int


DISCIPLINE_RULES = {
    # the loser can have cleared at most their seven group balls
    Discipline.EIGHT_BALL: DisciplineRules(game_cap=14, max_loser_points=7),
    # balls 1-8 count for the loser, the 9 always ends the game
    Discipline.NINE_BALL: DisciplineRules(game_cap=14, max_loser_points=8),
}

_ALIASES = {
    "8-ball": Discipline.EIGHT_BALL,
    "8ball": Discipline.EIGHT_BALL,
    "9-ball": Discipline.NINE_BALL,
    "9ball": Discipline.NINE_BALL,
}


def parse_discipline(value) -> Discipline:
    """Return the ``Discipline`` for ``value``, accepting the short ``8-ball`` forms."""
    if isinstance(value, Discipline):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return Discipline(key)
        except ValueError:
            pass
    raise InvalidOperationError(f"unknown discipline: {value!r}")


def rules_for(discipline) -> DisciplineRules:
    return DISCIPLINE_RULES[parse_discipline(discipline)]
