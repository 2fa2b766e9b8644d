"""4x4 affine transformation matrices.

Matrix4 stores its 16 elements in column-major order, so the translation
lives in elements 12, 13 and 14 and a point is transformed as a column
vector. This is also the memory layout of a RenderMan row-vector matrix,
which lets the RIB parser feed ``ConcatTransform`` arrays straight into
``Matrix4.from_elements``.

``rotate`` and ``scale`` post-multiply, so they act in the local frame and
are applied to points before everything composed earlier. ``translate``
pre-multiplies: it adds straight onto elements 12, 13 and 14 and moves the
result in the world frame, whatever rotation precedes it.

Matrices are immutable; each operation returns a new matrix.

Example:
    >>> from src.ribtrace.core.transform import Matrix4
    >>> from src.ribtrace.core.vector import Vec3
    >>> m = Matrix4.identity().translate(1.0, 0.0, 0.0).scale(2.0, 2.0, 2.0)
    >>> m.transform_point(Vec3(1.0, 1.0, 1.0))
    Vec3(x=3.0, y=2.0, z=2.0)
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from src.ribtrace.core.vector import Vec3

_IDENTITY = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)  # fmt: skip


class Matrix4:
    """An immutable 4x4 matrix in column-major storage.

    Attributes:
        m: The 16 matrix elements, column-major.
    """

    __slots__ = ("m",)

    def __init__(self, elements: Sequence[float] = _IDENTITY) -> None:
        """Create a matrix from 16 column-major elements.

        Args:
            elements: The matrix elements. Defaults to the identity.

        Raises:
            ValueError: If the sequence does not hold exactly 16 values.
        """
        if len(elements) != 16:
            raise ValueError(f"Matrix4 needs 16 elements, got {len(elements)}")
        self.m: tuple[float, ...] = tuple(float(e) for e in elements)

    @classmethod
    def identity(cls) -> Matrix4:
        """Return the identity matrix."""
        return cls(_IDENTITY)

    @classmethod
    def from_elements(cls, elements: Sequence[float]) -> Matrix4:
        """Build a matrix from 16 column-major elements."""
        return cls(elements)

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> Matrix4:
        """Return a pure translation matrix."""
        m = list(_IDENTITY)
        m[12], m[13], m[14] = x, y, z
        return cls(m)

    @classmethod
    def scaling(cls, sx: float, sy: float, sz: float) -> Matrix4:
        """Return a pure scale matrix."""
        m = list(_IDENTITY)
        m[0], m[5], m[10] = sx, sy, sz
        return cls(m)

    @classmethod
    def rotation(cls, angle: float, axis: Vec3) -> Matrix4:
        """Return a rotation about an arbitrary axis through the origin.

        Args:
            angle: Rotation angle in radians (right-handed).
            axis: Rotation axis; normalized internally. A zero axis gives
                the identity.

        Returns:
            The rotation matrix (Rodrigues' formula).
        """
        a = axis.normalize()
        if a.near_zero():
            return cls.identity()
        c = math.cos(angle)
        s = math.sin(angle)
        t = 1.0 - c
        x, y, z = a.x, a.y, a.z
        return cls(
            (
                t * x * x + c, t * x * y + s * z, t * x * z - s * y, 0.0,
                t * x * y - s * z, t * y * y + c, t * y * z + s * x, 0.0,
                t * x * z + s * y, t * y * z - s * x, t * z * z + c, 0.0,
                0.0, 0.0, 0.0, 1.0,
            )
        )  # fmt: skip

    def copy(self) -> Matrix4:
        """Return an equal, independent matrix."""
        return Matrix4(self.m)

    def multiply(self, other: Matrix4) -> Matrix4:
        """Return the product self * other (other is applied first)."""
        a = self.m
        b = other.m
        result = [0.0] * 16
        for col in range(4):
            for row in range(4):
                result[col * 4 + row] = (
                    a[row] * b[col * 4]
                    + a[4 + row] * b[col * 4 + 1]
                    + a[8 + row] * b[col * 4 + 2]
                    + a[12 + row] * b[col * 4 + 3]
                )
        return Matrix4(result)

    __matmul__ = multiply

    def translate(self, x: float, y: float, z: float) -> Matrix4:
        """Compose a translation in the world frame."""
        return Matrix4.translation(x, y, z).multiply(self)

    def scale(self, sx: float, sy: float, sz: float) -> Matrix4:
        """Compose a scale in the local frame."""
        return self.multiply(Matrix4.scaling(sx, sy, sz))

    def rotate(self, angle: float, axis: Vec3) -> Matrix4:
        """Compose a rotation (radians) about an axis in the local frame."""
        return self.multiply(Matrix4.rotation(angle, axis))

    def rotate_x(self, angle: float) -> Matrix4:
        """Compose a rotation (radians) about the X axis."""
        return self.rotate(angle, Vec3(1.0, 0.0, 0.0))

    def rotate_y(self, angle: float) -> Matrix4:
        """Compose a rotation (radians) about the Y axis."""
        return self.rotate(angle, Vec3(0.0, 1.0, 0.0))

    def rotate_z(self, angle: float) -> Matrix4:
        """Compose a rotation (radians) about the Z axis."""
        return self.rotate(angle, Vec3(0.0, 0.0, 1.0))

    def transform_point(self, point: Vec3) -> Vec3:
        """Transform a point (w = 1), including translation."""
        m = self.m
        x, y, z = point.x, point.y, point.z
        return Vec3(
            m[0] * x + m[4] * y + m[8] * z + m[12],
            m[1] * x + m[5] * y + m[9] * z + m[13],
            m[2] * x + m[6] * y + m[10] * z + m[14],
        )

    def transform_direction(self, direction: Vec3) -> Vec3:
        """Transform a direction (w = 0), ignoring translation."""
        m = self.m
        x, y, z = direction.x, direction.y, direction.z
        return Vec3(
            m[0] * x + m[4] * y + m[8] * z,
            m[1] * x + m[5] * y + m[9] * z,
            m[2] * x + m[6] * y + m[10] * z,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return self.m == other.m

    def __hash__(self) -> int:
        return hash(self.m)

    def __repr__(self) -> str:
        return f"Matrix4({list(self.m)!r})"
