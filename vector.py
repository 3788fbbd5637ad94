"""
Spinning Hexagon: 2D Vector Kernel
Immutable Vector2 value type and point-to-segment projection.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D vector (screen coordinates, +y points down)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Vector2":
        return Vector2(self.x * s, self.y * s)

    __rmul__ = __mul__

    def dot(self, other: "Vector2") -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> "Vector2":
        """Unit vector in the same direction; the zero vector maps to itself."""
        n = self.length()
        if n == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / n, self.y / n)

    def perp(self) -> "Vector2":
        """Rotate 90° counter-clockwise: (x, y) -> (-y, x)."""
        return Vector2(-self.y, self.x)

    @classmethod
    def from_iterable(cls, values) -> "Vector2":
        x, y = values
        return cls(float(x), float(y))


def closest_point_on_segment(a: Vector2, b: Vector2, p: Vector2) -> Vector2:
    """Return the point on segment AB closest to P.

    t = dot(P-A, B-A) / |B-A|² is clamped to [0, 1]. A != B is assumed
    (hexagon edges always have positive length).
    """
    ab = b - a
    t = (p - a).dot(ab) / ab.dot(ab)
    t = max(0.0, min(1.0, t))
    return a + ab * t
