"""Immutable 3D vector type and vector utilities.

Vec3 is the value type used for points, directions and normals throughout
the renderer. Every operation returns a new vector; instances are never
mutated, so they can be shared freely between primitives, hit records and
the serialization layer.

All arithmetic is plain IEEE-754 double precision. Rendering is required to
be bit-identical between single-process and multi-process runs, so the
operations below are written out component by component in a fixed order
rather than delegated to a vectorized backend.

Example:
    >>> from src.ribtrace.core.vector import Vec3
    >>> a = Vec3(1.0, 0.0, 0.0)
    >>> b = Vec3(0.0, 1.0, 0.0)
    >>> a.cross(b)
    Vec3(x=0.0, y=0.0, z=1.0)
    >>> (a + b).normalize().length()
    1.0
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec3:
    """A three-component vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Vec3:
        """Build a vector from the first three items of a sequence.

        Args:
            values: Any sequence holding at least three numbers.

        Returns:
            A new Vec3.

        Raises:
            ValueError: If fewer than three values are given.
        """
        if len(values) < 3:
            raise ValueError(f"Expected 3 components, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec3:
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vec3) -> float:
        """Compute the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        """Compute the cross product self x other."""
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        """Compute the squared Euclidean length."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        """Compute the Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        Returns:
            The normalized vector, or the zero vector if this vector has
            zero length.
        """
        length = self.length()
        if length > 0.0:
            return Vec3(self.x / length, self.y / length, self.z / length)
        return Vec3()

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this direction about a unit normal.

        Args:
            normal: The surface normal (should be normalized).

        Returns:
            self - 2 * dot(self, normal) * normal.
        """
        return self - normal * (2.0 * self.dot(normal))

    def near_zero(self, eps: float = 1e-8) -> bool:
        """Check whether every component is smaller than eps in magnitude."""
        return abs(self.x) < eps and abs(self.y) < eps and abs(self.z) < eps

    def component_min(self, other: Vec3) -> Vec3:
        """Component-wise minimum of two vectors."""
        return Vec3(min(self.x, other.x), min(self.y, other.y), min(self.z, other.z))

    def component_max(self, other: Vec3) -> Vec3:
        """Component-wise maximum of two vectors."""
        return Vec3(max(self.x, other.x), max(self.y, other.y), max(self.z, other.z))

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as a plain tuple."""
        return (self.x, self.y, self.z)


# Frequently used constants
ZERO = Vec3(0.0, 0.0, 0.0)
UNIT_Y = Vec3(0.0, 1.0, 0.0)
