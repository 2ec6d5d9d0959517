"""
Geometry helpers for hit testing and bump matching.

All points are plain ``(x, y)`` tuples in canvas pixel coordinates.
"""

import math
from typing import Callable, Iterable, Optional, Tuple, TypeVar

Point = Tuple[float, float]

T = TypeVar("T")


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p[0] - q[0], p[1] - q[1])


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """
    Distance from point ``p`` to the closed segment ``a``-``b``.

    The point is projected onto the segment's supporting line and the
    projection parameter is clamped to [0, 1], so points beyond either end
    measure to the nearest endpoint. A zero-length segment degenerates to
    the distance to ``a``.
    """
    cx = b[0] - a[0]
    cy = b[1] - a[1]
    length_sq = cx * cx + cy * cy
    if length_sq == 0:
        return distance(p, a)

    t = ((p[0] - a[0]) * cx + (p[1] - a[1]) * cy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(p, (a[0] + t * cx, a[1] + t * cy))


def nearest(
    point: Point, candidates: Iterable[T], key: Callable[[T], Point]
) -> Optional[T]:
    """
    Return the candidate whose position is closest to ``point``.

    Ties keep the first candidate in iteration order. Returns None when
    there are no candidates.
    """
    best = None
    best_dist = math.inf
    for candidate in candidates:
        dist = distance(point, key(candidate))
        if dist < best_dist:
            best_dist = dist
            best = candidate
    return best


def rect_contains(
    x: float,
    y: float,
    width: float,
    height: float,
    point: Point,
    margin: float = 0,
) -> bool:
    """Inclusive containment test with the rectangle grown by ``margin``."""
    px, py = point
    return (
        x - margin <= px <= x + width + margin
        and y - margin <= py <= y + height + margin
    )


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)
