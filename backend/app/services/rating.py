import math
from typing import Tuple

from ..config import RATING_K_FACTOR

K_FACTOR = RATING_K_FACTOR


def _check_finite(*values: float) -> None:
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"rating inputs must be finite numbers (got {value!r})")


def expected_score(rating_self: float, rating_opp: float) -> float:
    """Probability that ``rating_self`` beats ``rating_opp`` under Elo."""
    _check_finite(rating_self, rating_opp)
    return 1 / (1 + 10 ** ((rating_opp - rating_self) / 400))


def new_rating(
    rating: float, actual_score: float, expected: float, k: float = K_FACTOR
) -> int:
    """Return the rating after one match, rounded to a whole number.

    ``actual_score`` is ``1`` for the match winner and ``0`` for the loser;
    matches never end drawn.
    """
    _check_finite(rating, actual_score, expected, k)
    return round(rating + k * (actual_score - expected))


def match_ratings(
    winner_rating: int, loser_rating: int, k: float = K_FACTOR
) -> Tuple[int, int]:
    """Return ``(new_winner_rating, new_loser_rating)`` from pre-match ratings."""
    expected_win = expected_score(winner_rating, loser_rating)
    expected_loss = expected_score(loser_rating, winner_rating)
    return (
        new_rating(winner_rating, 1, expected_win, k),
        new_rating(loser_rating, 0, expected_loss, k),
    )
