"""Race-to-points match state shared by the 8-ball and 9-ball engines.

Each player races to their own handicapped target. The winner of a game is
credited with the discipline's cap and the loser with whatever they earned in
that game. The match winner is always derived from the targets and the game
log, never stored, so a replayed state and a live one can't disagree.
"""

from typing import Dict, List, Optional

from ..exceptions import InvalidOperationError, MatchAlreadyConcludedError
from .disciplines import parse_discipline, rules_for

SIDES = ("A", "B")


def other(side: str) -> str:
    return "B" if side == "A" else "A"


def check_side(side) -> str:
    if side not in SIDES:
        raise InvalidOperationError(f"invalid side: {side!r}")
    return side


def init_state(config: Dict, discipline) -> Dict:
    """Initialise race state.

    ``config`` must contain ``pointsToWin`` – a mapping of side to that
    player's target, e.g. ``{"A": 28, "B": 25}``.
    """

    discipline = parse_discipline(discipline)
    raw_targets = config.get("pointsToWin") or {}
    targets = {}
    for side in SIDES:
        value = raw_targets.get(side)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidOperationError(
                f"pointsToWin for side {side} must be a positive integer"
            )
        targets[side] = value

    return {
        "discipline": discipline.value,
        "config": {
            "pointsToWin": targets,
            "cap": rules_for(discipline).game_cap,
        },
        "points": {"A": 0, "B": 0},
        "games": [],
    }


def _totals(games: List[Dict], cap: int) -> Dict[str, int]:
    points = {"A": 0, "B": 0}
    for game in games:
        winner = game["winner"]
        points[winner] += cap
        points[other(winner)] += game["points"]
    return points


def on_the_hill(points: Dict[str, int], targets: Dict[str, int], cap: int) -> bool:
    """Both players are within a single game of their targets."""
    return all(targets[side] - points[side] <= cap for side in SIDES)


def match_winner(state: Dict) -> Optional[str]:
    """Return the side that has won the match, or ``None`` while it is live.

    Hill-hill: when both players went into the last logged game on the hill,
    that game decided the match and its winner takes it, even if the loser's
    credit also carried them past their target. Otherwise the side that has
    reached its target wins.
    """

    cfg = state["config"]
    targets = cfg["pointsToWin"]
    cap = cfg["cap"]
    games = state["games"]

    points = _totals(games, cap)
    reached = [side for side in SIDES if points[side] >= targets[side]]
    if not reached:
        return None

    last = games[-1] if games else None
    if last is not None:
        before = _totals(games[:-1], cap)
        if on_the_hill(before, targets, cap) or len(reached) > 1:
            return last["winner"]
    return reached[0]


def is_concluded(state: Dict) -> bool:
    return match_winner(state) is not None


def ensure_open(state: Dict) -> None:
    if is_concluded(state):
        raise MatchAlreadyConcludedError()


def log_game(state: Dict, winner: str, loser_points: int) -> Dict:
    """Append a game to the log and credit both players; returns the log entry."""
    cap = state["config"]["cap"]
    entry = {
        "gameNumber": len(state["games"]) + 1,
        "winner": winner,
        "points": loser_points,
    }
    state["games"].append(entry)
    state["points"][winner] += cap
    state["points"][other(winner)] += loser_points
    return entry


def summary(state: Dict) -> Dict:
    cfg = state["config"]
    targets = cfg["pointsToWin"]
    points = state["points"]
    winner = match_winner(state)
    return {
        "discipline": state["discipline"],
        "pointsToWin": dict(targets),
        "points": dict(points),
        "remaining": {
            side: max(0, targets[side] - points[side]) for side in SIDES
        },
        "games": [dict(game) for game in state["games"]],
        "onTheHill": winner is None and on_the_hill(points, targets, cfg["cap"]),
        "winner": winner,
    }
