import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from app.exceptions import (
    InvalidOperationError,
    InvalidScoreError,
    MatchAlreadyConcludedError,
)
from app.scoring import eight_ball


def _game(state, winner, loser_points=0):
    return eight_ball.apply(
        {"type": "GAME", "winner": winner, "loserPoints": loser_points}, state
    )


def test_game_credits_cap_to_winner_and_balls_to_loser():
    state = eight_ball.init_state({"pointsToWin": {"A": 28, "B": 28}})
    state = _game(state, "A", 3)
    assert state["points"] == {"A": 14, "B": 3}
    assert state["games"] == [{"gameNumber": 1, "winner": "A", "points": 3}]


def test_race_ends_when_target_reached():
    state = eight_ball.init_state({"pointsToWin": {"A": 28, "B": 28}})
    state = _game(state, "A")
    assert eight_ball.summary(state)["winner"] is None
    state = _game(state, "A")
    summary = eight_ball.summary(state)
    assert summary["points"] == {"A": 28, "B": 0}
    assert summary["winner"] == "A"
    assert summary["remaining"] == {"A": 0, "B": 28}


def test_game_after_conclusion_is_rejected():
    state = eight_ball.init_state({"pointsToWin": {"A": 14, "B": 28}})
    state = _game(state, "A", 2)
    with pytest.raises(MatchAlreadyConcludedError):
        _game(state, "B", 1)
    assert state["points"] == {"A": 14, "B": 2}
    assert len(state["games"]) == 1


@pytest.mark.parametrize("loser_points", [0, 7])
def test_loser_points_bounds_are_accepted(loser_points):
    state = eight_ball.init_state({"pointsToWin": {"A": 50, "B": 50}})
    state = _game(state, "B", loser_points)
    assert state["points"]["A"] == loser_points


@pytest.mark.parametrize("loser_points", [-1, 8, 14, True, "3", None, 2.5])
def test_invalid_loser_points_rejected(loser_points):
    state = eight_ball.init_state({"pointsToWin": {"A": 50, "B": 50}})
    with pytest.raises(InvalidScoreError):
        _game(state, "A", loser_points)
    assert state["games"] == []


def test_unknown_winner_side_rejected():
    state = eight_ball.init_state({"pointsToWin": {"A": 28, "B": 28}})
    with pytest.raises(InvalidOperationError):
        _game(state, "C")


def test_non_game_events_rejected():
    state = eight_ball.init_state({"pointsToWin": {"A": 28, "B": 28}})
    with pytest.raises(InvalidOperationError):
        eight_ball.apply({"type": "POCKET", "ball": 3, "by": "A"}, state)


@pytest.mark.parametrize(
    "targets",
    [{}, {"A": 28}, {"A": 0, "B": 28}, {"A": -5, "B": 28}, {"A": "28", "B": 28}],
)
def test_init_requires_positive_targets(targets):
    with pytest.raises(InvalidOperationError):
        eight_ball.init_state({"pointsToWin": targets})
