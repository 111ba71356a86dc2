"""2D vector value type for the kinematics kernel."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Vector2:
    """Immutable 2D vector. Every operation returns a new instance."""
    x: float = 0.0
    y: float = 0.0

    @staticmethod
    def zero() -> Vector2:
        return Vector2(0.0, 0.0)

    def clone(self) -> Vector2:
        return Vector2(self.x, self.y)

    def add(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def sub(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def scale(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    def dot(self, other: Vector2) -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> Vector2:
        """
        Unit vector in the same direction.

        The zero vector normalizes to the zero vector, so a degenerate
        direction contributes no displacement instead of NaN.
        """
        length = self.length()
        if length == 0.0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / length, self.y / length)

    def rotate(self, angle: float) -> Vector2:
        """Rotate counter-clockwise by `angle` radians (right-handed, Y up)."""
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return Vector2(
            self.x * cos_a - self.y * sin_a,
            self.x * sin_a + self.y * cos_a,
        )

    def distance_to(self, other: Vector2) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def angle(self) -> float:
        """Angle in radians from the positive X axis."""
        return math.atan2(self.y, self.x)

    def is_close(self, other: Vector2, abs_tol: float = 1e-9) -> bool:
        return (
            math.isclose(self.x, other.x, abs_tol=abs_tol)
            and math.isclose(self.y, other.y, abs_tol=abs_tol)
        )

    def to_list(self) -> List[float]:
        return [self.x, self.y]

    def __add__(self, other: Vector2) -> Vector2:
        return self.add(other)

    def __sub__(self, other: Vector2) -> Vector2:
        return self.sub(other)

    def __mul__(self, scalar: float) -> Vector2:
        return self.scale(scalar)

    def __rmul__(self, scalar: float) -> Vector2:
        return self.scale(scalar)

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)
