"""9-ball scoring engine.

Every ball in the rack is assigned exactly once: pocketed by A, pocketed by B,
or dead. Pocketing the 9 ends the game; the shooter takes the cap and the
opponent is credited with the balls they pocketed in that rack only.
"""

from typing import Dict, List, Optional

from ..exceptions import InvalidOperationError
from . import race
from .disciplines import Discipline

GAME_BALL = 9
BALLS = tuple(range(1, GAME_BALL + 1))


def _empty_rack() -> Dict[str, List[int]]:
    return {"A": [], "B": [], "dead": []}


def init_state(config: Dict) -> Dict:
    state = race.init_state(config, Discipline.NINE_BALL)
    state["rack"] = _empty_rack()
    return state


def available_balls(state: Dict) -> List[int]:
    rack = state["rack"]
    taken = set(rack["A"]) | set(rack["B"]) | set(rack["dead"])
    return [ball for ball in BALLS if ball not in taken]


def _claim(state: Dict, ball) -> int:
    if isinstance(ball, bool) or not isinstance(ball, int) or ball not in BALLS:
        raise InvalidOperationError(f"ball must be between 1 and {GAME_BALL}")
    if ball not in available_balls(state):
        raise InvalidOperationError(f"ball {ball} has already been assigned")
    return ball


def pocket(state: Dict, ball, side) -> Optional[Dict]:
    """Credit ``ball`` to ``side``; returns the game log entry when the 9 drops."""
    race.ensure_open(state)
    race.check_side(side)
    ball = _claim(state, ball)

    if ball != GAME_BALL:
        state["rack"][side].append(ball)
        return None

    credit = len(state["rack"][race.other(side)])
    entry = race.log_game(state, side, credit)
    state["rack"] = _empty_rack()
    return entry


def mark_dead(state: Dict, ball) -> None:
    race.ensure_open(state)
    if ball == GAME_BALL:
        raise InvalidOperationError("the 9 ball cannot be marked dead")
    ball = _claim(state, ball)
    state["rack"]["dead"].append(ball)


def apply(event: Dict, state: Dict) -> Dict:
    etype = event.get("type")
    if etype == "POCKET":
        pocket(state, event.get("ball"), event.get("by"))
    elif etype == "DEAD":
        mark_dead(state, event.get("ball"))
    else:
        raise InvalidOperationError("invalid 9-ball event")
    return state


def summary(state: Dict) -> Dict:
    data = race.summary(state)
    rack = state["rack"]
    data["rack"] = {key: list(balls) for key, balls in rack.items()}
    data["availableBalls"] = available_balls(state)
    return data
