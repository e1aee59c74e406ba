"""Geospatial helper functions."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Sequence

from shapely.geometry import Point, box
from shapely.geometry.base import BaseGeometry

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
METERS_PER_SECOND_PER_MPH = 0.44704


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(origin: Coordinate, destination: Coordinate) -> float:
    return haversine_km(origin[0], origin[1], destination[0], destination[1])


def chain_distance_km(coordinates: Sequence[Coordinate]) -> float:
    """Straight-line length of the polyline through the coordinates, in order."""

    if len(coordinates) < 2:
        return 0.0
    return sum(distance_km(coordinates[i], coordinates[i + 1]) for i in range(len(coordinates) - 1))


def straight_line_travel_seconds(distance: float, speed_mph: float) -> float:
    """Seconds needed to cover `distance` km at a constant speed given in mph."""

    return (distance * 1000.0) / (speed_mph * METERS_PER_SECOND_PER_MPH)


@lru_cache(maxsize=8)
def _bounding_box(bounds: tuple[float, float, float, float]) -> BaseGeometry:
    min_lat, min_lon, max_lat, max_lon = bounds
    return box(min_lon, min_lat, max_lon, max_lat)


def point_in_bounds(lat: float, lon: float, bounds: tuple[float, float, float, float]) -> bool:
    """Return True if the point lies strictly inside the (min_lat, min_lon, max_lat, max_lon) box."""

    return _bounding_box(tuple(bounds)).contains(Point(lon, lat))
