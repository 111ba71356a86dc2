"""
Homogeneous 3x3 transforms for 2D.

Storage is row-major (9 floats) and points are column vectors, so
`parent.multiply(local)` places `local` inside the parent's frame:

    | a b tx |   | x |
    | c d ty | * | y |
    | 0 0 1  |   | 1 |
"""
from __future__ import annotations

import math
from typing import List, NamedTuple, Optional, Sequence

from rig2d.kinematics.vector import Vector2

_IDENTITY = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


class HomogeneousPoint(NamedTuple):
    """Result of applying a Matrix3 to a point. Callers read x and y."""
    x: float
    y: float
    w: float = 1.0

    def to_vector(self) -> Vector2:
        return Vector2(self.x, self.y)


class Matrix3:
    __slots__ = ("data",)

    def __init__(self, data: Optional[Sequence[float]] = None):
        if data is None:
            data = _IDENTITY
        if len(data) != 9:
            raise ValueError(f"Matrix3 needs 9 values, got {len(data)}")
        self.data = tuple(float(v) for v in data)

    @classmethod
    def identity(cls) -> Matrix3:
        return cls()

    @classmethod
    def from_translation(cls, tx: float, ty: float) -> Matrix3:
        return cls((1.0, 0.0, tx, 0.0, 1.0, ty, 0.0, 0.0, 1.0))

    @classmethod
    def from_rotation(cls, theta: float) -> Matrix3:
        c = math.cos(theta)
        s = math.sin(theta)
        return cls((c, -s, 0.0, s, c, 0.0, 0.0, 0.0, 1.0))

    @classmethod
    def from_scale(cls, sx: float, sy: float) -> Matrix3:
        return cls((sx, 0.0, 0.0, 0.0, sy, 0.0, 0.0, 0.0, 1.0))

    def multiply(self, other: Matrix3) -> Matrix3:
        """Return `self * other` (apply `other` first, then `self`)."""
        a = self.data
        b = other.data
        out = []
        for row in range(3):
            r0, r1, r2 = a[row * 3], a[row * 3 + 1], a[row * 3 + 2]
            for col in range(3):
                out.append(r0 * b[col] + r1 * b[3 + col] + r2 * b[6 + col])
        return Matrix3(out)

    def apply_to(self, point: Vector2) -> HomogeneousPoint:
        m = self.data
        x, y = point.x, point.y
        return HomogeneousPoint(
            m[0] * x + m[1] * y + m[2],
            m[3] * x + m[4] * y + m[5],
            m[6] * x + m[7] * y + m[8],
        )

    def to_list(self) -> List[float]:
        return list(self.data)

    def __mul__(self, other: Matrix3) -> Matrix3:
        return self.multiply(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3):
            return NotImplemented
        return self.data == other.data

    def __repr__(self) -> str:
        return f"Matrix3({list(self.data)!r})"
