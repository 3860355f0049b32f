"""
Math helper utilities for 2D vector operations.
"""
import math
import random
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]
Vector = Tuple[float, float]


def distance(a: Point, b: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2)


def magnitude(v: Vector) -> float:
    """Length of a vector."""
    return math.sqrt(v[0] ** 2 + v[1] ** 2)


def heading_of(v: Vector) -> float:
    """Heading of a velocity vector in radians (0 = +x)."""
    return math.atan2(v[1], v[0])


def limit(v: Vector, max_length: float) -> Vector:
    """Scale a vector down so its length does not exceed max_length."""
    mag = magnitude(v)
    if mag <= max_length or mag == 0:
        return v
    return (v[0] / mag * max_length, v[1] / mag * max_length)


def point_on_circle(center: Point, radius: float, angle: float) -> Point:
    """Point at `angle` radians on a circle around center."""
    return (
        center[0] + math.cos(angle) * radius,
        center[1] + math.sin(angle) * radius,
    )


@dataclass(frozen=True)
class Bounds:
    """
    Axis-aligned rectangle on the floor plane.

    `top` is the smaller y value; y grows toward `bottom`.
    """
    left: float
    right: float
    top: float
    bottom: float

    @property
    def center(self) -> Point:
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    def inflate(self, buffer: float) -> 'Bounds':
        """Grow the rectangle by `buffer` on every side."""
        return Bounds(
            self.left - buffer,
            self.right + buffer,
            self.top - buffer,
            self.bottom + buffer,
        )

    def contains(self, position: Point) -> bool:
        """Check if a position is within the bounds."""
        x, y = position
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def clamp(self, position: Point) -> Point:
        """Clip a position into the bounds."""
        x = max(self.left, min(self.right, position[0]))
        y = max(self.top, min(self.bottom, position[1]))
        return (x, y)

    def near_edge(self, position: Point, margin: float) -> bool:
        """True when the position is within `margin` of any edge."""
        x, y = position
        return (
            x <= self.left + margin or x >= self.right - margin or
            y <= self.top + margin or y >= self.bottom - margin
        )

    def random_point(self, rng: random.Random) -> Point:
        """Uniformly random point inside the bounds."""
        return (
            rng.uniform(self.left, self.right),
            rng.uniform(self.top, self.bottom),
        )
