import math

import pytest

from app.services.rating import expected_score, match_ratings, new_rating


def test_expected_scores_sum_to_one():
    for a, b in [(500, 500), (600, 500), (350, 820), (1000, 0)]:
        assert math.isclose(expected_score(a, b) + expected_score(b, a), 1.0)


def test_even_match_moves_half_k():
    assert expected_score(500, 500) == pytest.approx(0.5)
    assert match_ratings(500, 500, k=32) == (516, 484)


def test_favourite_gains_less_than_underdog():
    assert match_ratings(600, 500, k=32) == (612, 488)
    assert match_ratings(500, 600, k=32) == (520, 580)


def test_new_rating_rounds_to_whole_points():
    value = new_rating(500, 1, 0.3, k=10)
    assert value == 507
    assert isinstance(value, int)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), None])
def test_non_finite_inputs_rejected(bad):
    with pytest.raises(ValueError):
        expected_score(bad, 500)
