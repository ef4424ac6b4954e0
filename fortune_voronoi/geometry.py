"""Planar primitives used by the sweep: points, circles and parabolas."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

Vector = Tuple[float, float]


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Point({self.x:.6g}, {self.y:.6g})"


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float

    @property
    def bottom(self) -> float:
        """Y of the lowest point; the sweep position at which the circle event fires."""

        return self.center.y - self.radius


def cross(p1: Point, p2: Point, p3: Point) -> float:
    """Signed doubled area of the triangle ``p1 p2 p3`` (positive when counter-clockwise)."""

    return (p2.x - p1.x) * (p3.y - p1.y) - (p2.y - p1.y) * (p3.x - p1.x)


def orientation(p1: Point, p2: Point, p3: Point, eps: float = 0.0) -> int:
    """Return ``1`` for a left turn, ``-1`` for a right (clockwise) turn, ``0`` when collinear."""

    value = cross(p1, p2, p3)
    if value > eps:
        return 1
    if value < -eps:
        return -1
    return 0


def midpoint(p1: Point, p2: Point) -> Point:
    return Point((p1.x + p2.x) * 0.5, (p1.y + p2.y) * 0.5)


def perpendicular_direction(p1: Point, p2: Point) -> Vector:
    """Direction of the bisector of ``p1 p2``, the segment rotated a quarter turn clockwise."""

    return (p1.y - p2.y, p2.x - p1.x)


def circumcircle(p1: Point, p2: Point, p3: Point) -> Circle:
    # solve relative to p1 to keep the system well scaled
    bx, by = p2.x - p1.x, p2.y - p1.y
    cx, cy = p3.x - p1.x, p3.y - p1.y
    matrix = np.array([[bx, by], [cx, cy]], dtype=float)
    rhs = 0.5 * np.array([bx * bx + by * by, cx * cx + cy * cy], dtype=float)
    try:
        ux, uy = np.linalg.solve(matrix, rhs)
    except np.linalg.LinAlgError as exc:
        raise ValueError(f"collinear points {p1}, {p2}, {p3} have no circumcircle") from exc
    center = Point(p1.x + float(ux), p1.y + float(uy))
    return Circle(center=center, radius=math.hypot(float(ux), float(uy)))


def parabola_y(focus: Point, directrix: float, x: float) -> float:
    """Height of the parabola with ``focus`` and horizontal ``directrix`` above ``x``."""

    p = focus.y - directrix
    if p == 0.0:
        return math.inf
    dx = x - focus.x
    return (dx * dx + focus.y * focus.y - directrix * directrix) / (2.0 * p)


def parabola_intersection(focus1: Point, focus2: Point, directrix: float) -> Tuple[float, ...]:
    """Return the sorted x-coordinates where the two parabolas meet.

    Both foci must lie strictly above ``directrix``. Foci at equal height give a
    single root on their vertical bisector; otherwise two roots are returned.
    """

    pa = focus1.y - directrix
    pb = focus2.y - directrix
    if pa <= 0.0 or pb <= 0.0:
        raise ValueError("parabola foci must lie above the directrix")

    a = pb - pa
    if a == 0.0:
        return ((focus1.x + focus2.x) * 0.5,)

    b = 2.0 * (pa * focus2.x - pb * focus1.x)
    c = pb * focus1.x * focus1.x - pa * focus2.x * focus2.x + pa * pb * (focus1.y - focus2.y)
    disc = max(b * b - 4.0 * a * c, 0.0)
    q = -0.5 * (b + math.copysign(math.sqrt(disc), b))
    if q == 0.0:
        return (0.0, 0.0)
    r1 = q / a
    r2 = c / q
    return (r1, r2) if r1 <= r2 else (r2, r1)


__all__ = [
    "Point",
    "Circle",
    "Vector",
    "circumcircle",
    "cross",
    "midpoint",
    "orientation",
    "parabola_intersection",
    "parabola_y",
    "perpendicular_direction",
]
