"""Triangle primitive with Moller-Trumbore intersection.

The Moller-Trumbore algorithm solves

    ray_origin + t * ray_direction = (1 - u - v) * v0 + u * v1 + v * v2

directly for (t, u, v) using two cross products, without building the
triangle's plane first. A hit requires u >= 0, v >= 0 and u + v <= 1.
The bounds are inclusive so a ray through an edge shared by two triangles
never falls into a gap between them.

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.triangle import Triangle
    >>> tri = Triangle(Vec3(-1, -1, 0), Vec3(1, -1, 0), Vec3(0, 1, 0))
    >>> tri.intersect(Ray(Vec3(0, 0, 1), Vec3(0, 0, -1)), 0.001, 100.0).t
    1.0
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3
from src.ribtrace.geometry.primitive import HitRecord, Material, make_hit

# Determinants smaller than this mean the ray is parallel or the triangle degenerate
DETERMINANT_EPSILON = 1e-8


@dataclass(frozen=True)
class Triangle:
    """A triangle defined by three vertices.

    The geometric normal follows the right-hand rule over (v0, v1, v2).

    Attributes:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        material: Surface material.
        normal: Unit geometric normal (derived).
    """

    v0: Vec3
    v1: Vec3
    v2: Vec3
    material: Material = field(default_factory=Material)
    normal: Vec3 = field(init=False, repr=False)
    edge1: Vec3 = field(init=False, repr=False, compare=False)
    edge2: Vec3 = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        edge1 = self.v1 - self.v0
        edge2 = self.v2 - self.v0
        object.__setattr__(self, "edge1", edge1)
        object.__setattr__(self, "edge2", edge2)
        object.__setattr__(self, "normal", edge1.cross(edge2).normalize())

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Test for ray-triangle intersection.

        Args:
            ray: The ray to test.
            t_min: Minimum accepted distance.
            t_max: Maximum accepted distance.

        Returns:
            The hit record, or None on a miss, a parallel ray or a
            degenerate triangle.
        """
        edge1 = self.edge1
        edge2 = self.edge2
        h = ray.direction.cross(edge2)
        det = edge1.dot(h)

        if -DETERMINANT_EPSILON < det < DETERMINANT_EPSILON:
            return None

        inv_det = 1.0 / det
        s = ray.origin - self.v0
        u = inv_det * s.dot(h)
        if u < 0.0 or u > 1.0:
            return None

        q = s.cross(edge1)
        v = inv_det * ray.direction.dot(q)
        if v < 0.0 or u + v > 1.0:
            return None

        t = inv_det * edge2.dot(q)
        if t < t_min or t > t_max:
            return None

        return make_hit(ray, t, self.normal, self.material)

    def barycentric(self, point: Vec3) -> tuple[float, float, float]:
        """Compute barycentric weights (w0, w1, w2) of a point in the triangle plane.

        Returns (1/3, 1/3, 1/3) for a degenerate triangle.
        """
        v2 = point - self.v0
        d00 = self.edge1.dot(self.edge1)
        d01 = self.edge1.dot(self.edge2)
        d11 = self.edge2.dot(self.edge2)
        d20 = v2.dot(self.edge1)
        d21 = v2.dot(self.edge2)
        denom = d00 * d11 - d01 * d01
        if abs(denom) < DETERMINANT_EPSILON:
            return (1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0)
        w1 = (d11 * d20 - d01 * d21) / denom
        w2 = (d00 * d21 - d01 * d20) / denom
        return (1.0 - w1 - w2, w1, w2)
