"""
Small 2D vector helpers.

Points and vectors are plain ``(x, y)`` tuples so they can be stored in
frozen dataclasses and compared directly in tests.
"""

from __future__ import annotations

import math

from .constants import NORMALIZE_EPSILON, POINT_TOLERANCE

Point = tuple[float, float]


def sub(a: Point, b: Point) -> Point:
    return (a[0] - b[0], a[1] - b[1])


def add(a: Point, b: Point) -> Point:
    return (a[0] + b[0], a[1] + b[1])


def scale(a: Point, s: float) -> Point:
    return (a[0] * s, a[1] * s)


def length(a: Point) -> float:
    return math.hypot(a[0], a[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalize(a: Point) -> Point:
    """Unit vector in the direction of ``a``, or (0, 0) for a null vector."""
    n = length(a)
    if n <= NORMALIZE_EPSILON:
        return (0.0, 0.0)
    return (a[0] / n, a[1] / n)


def perp(a: Point) -> Point:
    """Perpendicular vector (rotated 90 degrees CCW)."""
    return (-a[1], a[0])


def dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def points_close(p1: Point | None, p2: Point | None, tolerance: float = POINT_TOLERANCE) -> bool:
    """True if both points exist and lie within ``tolerance`` of each other."""
    if p1 is None or p2 is None:
        return False
    return distance(p1, p2) < tolerance


def are_collinear(
    p1: Point | None,
    p2: Point | None,
    p3: Point | None,
    tolerance: float = POINT_TOLERANCE,
) -> bool:
    """
    Check whether three points lie on one line.

    Axis-aligned runs are caught first. Otherwise the doubled triangle area
    is divided by the length of the p1-p3 base, giving the distance of p2
    from that base, which is compared against the tolerance.
    """
    if p1 is None or p2 is None or p3 is None:
        return False

    if abs(p1[0] - p2[0]) < tolerance and abs(p2[0] - p3[0]) < tolerance:
        return True
    if abs(p1[1] - p2[1]) < tolerance and abs(p2[1] - p3[1]) < tolerance:
        return True

    area = abs((p2[0] - p1[0]) * (p3[1] - p1[1]) - (p3[0] - p1[0]) * (p2[1] - p1[1]))
    base_sq = (p3[0] - p1[0]) ** 2 + (p3[1] - p1[1]) ** 2
    if base_sq < tolerance * tolerance:
        return True
    return area / math.sqrt(base_sq) < tolerance
