"""Infinite plane primitive.

A plane is defined by any point on it and its normal. The ray-plane
intersection is found by solving:
    dot(normal, ray_origin + t * ray_direction - point) = 0

which gives:
    t = dot(point - ray_origin, normal) / dot(normal, ray_direction)

Rays closer to parallel than 1e-8 are treated as misses.

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.plane import Plane
    >>> floor = Plane(point=Vec3(0, -0.5, 0), normal=Vec3(0, 1, 0))
    >>> floor.intersect(Ray(Vec3(0, 1, 0), Vec3(0, -1, 0)), 0.001, 100.0).t
    1.5
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3
from src.ribtrace.geometry.primitive import HitRecord, Material, make_hit

# Below this |dot(normal, direction)| the ray is considered parallel
PARALLEL_EPSILON = 1e-8


@dataclass(frozen=True)
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane.
        normal: Unit plane normal (normalized on construction).
        material: Surface material.
    """

    point: Vec3
    normal: Vec3
    material: Material = field(default_factory=Material)

    def __post_init__(self) -> None:
        object.__setattr__(self, "normal", self.normal.normalize())

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Test for ray-plane intersection.

        Args:
            ray: The ray to test.
            t_min: Minimum accepted distance.
            t_max: Maximum accepted distance.

        Returns:
            The hit record, or None if the ray is parallel to the plane or
            the hit lies outside [t_min, t_max].
        """
        denom = self.normal.dot(ray.direction)
        if abs(denom) < PARALLEL_EPSILON:
            return None

        t = (self.point - ray.origin).dot(self.normal) / denom
        if t < t_min or t > t_max:
            return None

        return make_hit(ray, t, self.normal, self.material)
