"""Internal application services."""

from .handicap import HandicapChart, resolve as resolve_handicap
from .rating import expected_score, new_rating, match_ratings
from .finalization import FinalizedMatch, RatingChange, finalize_match

__all__ = [
    "HandicapChart",
    "resolve_handicap",
    "expected_score",
    "new_rating",
    "match_ratings",
    "FinalizedMatch",
    "RatingChange",
    "finalize_match",
]
