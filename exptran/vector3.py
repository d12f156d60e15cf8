"""Small 3D geometry value types: points, colours and vectors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, List


@dataclass
class Point3:
    """A point in 3D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z


@dataclass
class Point2:
    """A point in the plane, e.g. a texture coordinate."""

    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y


@dataclass
class Color3:
    """An RGB colour with float channels."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.r
        yield self.g
        yield self.b


@dataclass
class Vector3:
    """A mutable 3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def between(cls, p1: Point3, p2: Point3) -> "Vector3":
        """Return the vector pointing from ``p1`` to ``p2`` (``p2 - p1``)."""
        return cls(p2.x - p1.x, p2.y - p1.y, p2.z - p1.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: object) -> "Vector3":
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: object) -> "Vector3":
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        if isinstance(scalar, Vector3):
            return NotImplemented
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __iadd__(self, other: "Vector3") -> "Vector3":
        if not isinstance(other, Vector3):
            return NotImplemented
        self.x += other.x
        self.y += other.y
        self.z += other.z
        return self

    def __itruediv__(self, scalar: float) -> "Vector3":
        self.x /= scalar
        self.y /= scalar
        self.z /= scalar
        return self

    def cross(self, other: "Vector3") -> "Vector3":
        """Return the cross product ``self x other``."""
        return Vector3(
            self.y * other.z - other.y * self.z,
            -(self.x * other.z - other.x * self.z),
            self.x * other.y - other.x * self.y,
        )

    def length(self) -> float:
        """Return the Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Return a unit vector in the same direction.

        Raises ZeroDivisionError for the zero vector.
        """
        size = self.length()
        if size == 0.0:
            raise ZeroDivisionError("cannot normalize a zero-length vector")
        return Vector3(self.x / size, self.y / size, self.z / size)

    def __str__(self) -> str:
        return f"vector = ({self.x:g}, {self.y:g}, {self.z:g})"


def normalize_values(values: Iterable[float]) -> List[float]:
    """Scale a sequence of numbers to unit Euclidean norm.

    A sequence whose norm is zero is returned unchanged.
    """
    items = [float(v) for v in values]
    norm = math.sqrt(sum(v * v for v in items))
    if norm == 0.0:
        return items
    return [v / norm for v in items]