"""Planar geometry helpers shared by the frontier engine and loop closer."""

import math
from typing import Optional, Tuple

Coord = Tuple[float, float]


def dist2(p: Coord, q: Coord) -> float:
    """Squared distance between two points."""
    dx = p[0] - q[0]
    dy = p[1] - q[1]
    return dx * dx + dy * dy


def cross(o: Coord, a: Coord, b: Coord) -> float:
    """Z component of (a - o) x (b - o).

    Negative when b lies on the outward side of the directed edge o -> a,
    which is the side new triangles are grown on.
    """
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def heading(origin: Coord, target: Coord) -> float:
    """Direction of the vector origin -> target in radians."""
    return math.atan2(target[1] - origin[1], target[0] - origin[0])


def normalize_angle(angle: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    angle = math.fmod(angle, 2 * math.pi)
    if angle <= -math.pi:
        angle += 2 * math.pi
    elif angle > math.pi:
        angle -= 2 * math.pi
    return angle


def in_bounds(width: float, height: float, x: float, y: float) -> bool:
    """True when (x, y) lies inside the half-open canvas [0, w) x [0, h)."""
    return 0 <= x < width and 0 <= y < height


def tangent_point(
    p1: Coord, r1: float, p2: Coord, r2: float, add_radius: float
) -> Optional[Coord]:
    """
    Center of a circle of radius add_radius touching both given circles.

    Solves the intersection of the circles (p1, r1 + add_radius) and
    (p2, r2 + add_radius) and returns the solution on the outward side of
    the directed edge p1 -> p2 (see `cross`).

    Args:
        p1, r1: First circle center and radius
        p2, r2: Second circle center and radius
        add_radius: Radius of the circle being placed

    Returns:
        (x, y) of the tangent circle, or None if the centers coincide or
        the enlarged circles do not intersect
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    d2 = dx * dx + dy * dy
    if d2 == 0:
        return None

    ra = r1 + add_radius
    rb = r2 + add_radius
    a = (ra * ra - rb * rb) / d2
    base_x = (p1[0] + p2[0]) / 2 + a / 2 * dx
    base_y = (p1[1] + p2[1]) / 2 + a / 2 * dy

    disc = 2 * (ra * ra + rb * rb) / d2 - a * a - 1
    if disc < 0:
        return None
    b = math.sqrt(disc) / 2
    return (base_x + b * dy, base_y - b * dx)


def triangle_area(a: Coord, b: Coord, c: Coord) -> float:
    """Unsigned area of a triangle."""
    return abs(cross(a, b, c)) / 2


def polygon_area(points) -> float:
    """Unsigned area of a simple polygon (shoelace formula)."""
    n = len(points)
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i][0] * points[j][1] - points[j][0] * points[i][1]
    return abs(area) / 2
