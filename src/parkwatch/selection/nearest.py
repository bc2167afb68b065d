"""
Nearest-city selection.

Ranks the supported cities by great-circle distance from the user. Sorting is
stable, so cities at exactly the same distance keep their input order and the
earliest one wins.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from parkwatch.core.geo import Coordinate, haversine_m
from parkwatch.domain.models import City

DistanceFn = Callable[[Coordinate, Coordinate], float]


class EmptyCityListError(ValueError):
    """Raised when asked to pick from an empty city catalog."""


def rank_by_distance(
    cities: Sequence[City],
    origin: Coordinate,
    *,
    distance: DistanceFn = haversine_m,
) -> list[tuple[City, float]]:
    """Return `(city, distance_m)` pairs, nearest first (ties keep input order)."""
    scored = [(city, distance(origin, city.coordinate)) for city in cities]
    return sorted(scored, key=lambda pair: pair[1])


def select_nearest(
    cities: Sequence[City],
    origin: Coordinate,
    *,
    distance: DistanceFn = haversine_m,
) -> City:
    """Return the city closest to `origin`.

    Raises:
        EmptyCityListError: If `cities` is empty.
    """
    if not cities:
        raise EmptyCityListError("select_nearest() needs at least one city")
    return rank_by_distance(cities, origin, distance=distance)[0][0]
