"""Handicapped race targets from a static rating-differential chart."""

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from ..exceptions import ConfigurationError
from ..scoring import Discipline, parse_discipline


@dataclass(frozen=True)
class HandicapChart:
    # target for both players when their ratings are identical
    even_race: int
    # rating differential -> (higher-rated target, lower-rated target)
    races: Mapping[int, Tuple[int, int]] = field(default_factory=dict)


POINT_RACE_CHART = HandicapChart(
    even_race=28,
    races={
        25: (28, 25),
        50: (31, 28),
        75: (35, 28),
        100: (38, 25),
        125: (42, 25),
        150: (46, 25),
        175: (50, 25),
        200: (50, 19),
        250: (57, 19),
        300: (65, 19),
        350: (65, 14),
        400: (65, 10),
    },
)

# Both disciplines race to points with the same per-game cap, so they share
# the points chart.
HANDICAP_CHARTS: Dict[Discipline, HandicapChart] = {
    Discipline.EIGHT_BALL: POINT_RACE_CHART,
    Discipline.NINE_BALL: POINT_RACE_CHART,
}


def validate_chart(chart: HandicapChart, *, name: str = "handicap chart") -> HandicapChart:
    """Raise ``ConfigurationError`` unless ``chart`` can serve every lookup.

    Every differential key must be positive and every entry must favour the
    higher-rated player strictly, otherwise two different ratings could be
    handed the same race.
    """

    if not isinstance(chart.even_race, int) or chart.even_race <= 0:
        raise ConfigurationError(f"{name}: even race must be a positive integer")
    if not chart.races:
        raise ConfigurationError(f"{name}: chart has no entries")
    for diff, race in chart.races.items():
        if not isinstance(diff, int) or diff <= 0:
            raise ConfigurationError(
                f"{name}: differential keys must be positive integers (got {diff!r})"
            )
        try:
            higher, lower = race
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"{name}: entry for {diff} must be a (higher, lower) pair"
            ) from None
        if not (isinstance(higher, int) and isinstance(lower, int)):
            raise ConfigurationError(f"{name}: entry for {diff} must hold integers")
        if not higher > lower > 0:
            raise ConfigurationError(
                f"{name}: entry for {diff} must satisfy higher > lower > 0"
            )
    return chart


def validate_charts(charts: Mapping[Discipline, HandicapChart]) -> None:
    for discipline in Discipline:
        chart = charts.get(discipline)
        if chart is None:
            raise ConfigurationError(f"no handicap chart for {discipline.value}")
        validate_chart(chart, name=f"{discipline.value} handicap chart")


def closest_differential(keys, diff: float) -> int:
    """Nearest chart key to ``diff``; on a tie the smaller key wins."""
    best = None
    for key in sorted(keys):
        if best is None or abs(key - diff) < abs(best - diff):
            best = key
    if best is None:
        raise ConfigurationError("handicap chart has no entries")
    return best


def resolve(
    rating_a,
    rating_b,
    discipline,
    *,
    charts: Optional[Mapping[Discipline, HandicapChart]] = None,
) -> Tuple[int, int]:
    """Return ``(target_a, target_b)`` for a race between the two ratings.

    The higher-rated player always gets the larger target; identical ratings
    get the chart's even race.
    """

    for value in (rating_a, rating_b):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"rating must be a finite number (got {value!r})")

    chart = (HANDICAP_CHARTS if charts is None else charts).get(parse_discipline(discipline))
    if chart is None or not chart.races:
        raise ConfigurationError(f"no handicap chart for {discipline}")

    if rating_a == rating_b:
        return chart.even_race, chart.even_race

    diff = abs(rating_a - rating_b)
    higher, lower = chart.races[closest_differential(chart.races, diff)]
    if rating_a > rating_b:
        return higher, lower
    return lower, higher


validate_charts(HANDICAP_CHARTS)
