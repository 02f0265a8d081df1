"""Geospatial helpers for interpolating and projecting map positions."""
from __future__ import annotations

import math
from typing import Tuple

Coordinate = Tuple[float, float]
WorldPoint = Tuple[float, float]


def lerp(a: float, b: float, fraction: float) -> float:
    """Linear interpolation that returns ``b`` exactly at ``fraction == 1``."""

    if fraction >= 1.0:
        return b
    return a + (b - a) * fraction


def interpolate_planar(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Interpolate latitude and longitude independently."""

    return lerp(a[0], b[0], fraction), lerp(a[1], b[1], fraction)


def interpolate_great_circle(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Interpolate along the great-circle path between two coordinates."""

    if fraction <= 0.0:
        return a
    if fraction >= 1.0:
        return b

    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)

    delta = 2.0 * math.asin(
        math.sqrt(
            math.sin((lat2 - lat1) / 2.0) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2.0) ** 2
        )
    )

    if delta == 0.0:
        return a

    sin_delta = math.sin(delta)
    factor_a = math.sin((1 - fraction) * delta) / sin_delta
    factor_b = math.sin(fraction * delta) / sin_delta

    x = factor_a * math.cos(lat1) * math.cos(lon1) + factor_b * math.cos(lat2) * math.cos(lon2)
    y = factor_a * math.cos(lat1) * math.sin(lon1) + factor_b * math.cos(lat2) * math.sin(lon2)
    z = factor_a * math.sin(lat1) + factor_b * math.sin(lat2)

    lat = math.atan2(z, math.sqrt(x**2 + y**2))
    lon = math.atan2(y, x)

    return math.degrees(lat), math.degrees(lon)


def to_world(coordinate: Coordinate) -> WorldPoint:
    """Project a lat/lon pair onto the unit Web-Mercator square.

    ``x`` grows eastwards and ``y`` southwards, both in ``[0, 1]``.
    """

    lat, lon = coordinate
    x = 0.5 + lon / 360.0
    y = (math.pi - math.log(math.tan(math.pi / 4.0 + math.radians(lat) / 2.0))) / (2.0 * math.pi)
    return x, y


def world_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean distance between two coordinates in world units."""

    ax, ay = to_world(a)
    bx, by = to_world(b)
    return math.hypot(bx - ax, by - ay)


def smoother_step(x: float, edge0: float, edge1: float) -> float:
    t = min(1.0, max(0.0, (x - edge0) / (edge1 - edge0)))
    return t * t * t * (t * (6.0 * t - 15.0) + 10.0)
