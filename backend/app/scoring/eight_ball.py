"""8-ball scoring engine.

Games are reported whole: the winner of a game takes the cap and the loser is
credited with the number of balls they legally pocketed before it ended.
"""

from typing import Dict

from ..exceptions import InvalidOperationError, InvalidScoreError
from . import race
from .disciplines import Discipline, rules_for

RULES = rules_for(Discipline.EIGHT_BALL)


def init_state(config: Dict) -> Dict:
    return race.init_state(config, Discipline.EIGHT_BALL)


def record_game_end(state: Dict, winner: str, loser_points) -> Dict:
    """Log a finished game and return its log entry."""
    race.ensure_open(state)
    race.check_side(winner)
    if isinstance(loser_points, bool) or not isinstance(loser_points, int):
        raise InvalidScoreError("loserPoints must be an integer")
    if not 0 <= loser_points <= RULES.max_loser_points:
        raise InvalidScoreError(
            f"loserPoints must be between 0 and {RULES.max_loser_points}"
        )
    return race.log_game(state, winner, loser_points)


def apply(event: Dict, state: Dict) -> Dict:
    if event.get("type") != "GAME":
        raise InvalidOperationError("invalid 8-ball event")
    record_game_end(state, event.get("winner"), event.get("loserPoints"))
    return state


def summary(state: Dict) -> Dict:
    return race.summary(state)
