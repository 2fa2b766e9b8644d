"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |ray_origin + t * ray_direction - center|^2 = radius^2

Expanding and rearranging gives the quadratic equation:
    a*t^2 + b*t + c = 0

where:
    a = dot(direction, direction)
    b = 2 * dot(oc, direction)
    c = dot(oc, oc) - radius^2
    oc = origin - center

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.sphere import Sphere
    >>> sphere = Sphere(center=Vec3(0, 0, -1), radius=0.5)
    >>> hit = sphere.intersect(Ray(Vec3(0, 0, 0), Vec3(0, 0, -1)), 0.001, 100.0)
    >>> hit.t
    0.5
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3
from src.ribtrace.geometry.primitive import HitRecord, Material, make_hit


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material: Surface material.
    """

    center: Vec3
    radius: float
    material: Material = field(default_factory=Material)

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Test for ray-sphere intersection.

        The smaller root is taken when it lies in [t_min, t_max]; otherwise
        the larger root is tried, which covers rays starting inside the
        sphere.

        Args:
            ray: The ray to test.
            t_min: Minimum accepted distance (avoids self-intersection).
            t_max: Maximum accepted distance.

        Returns:
            The hit record, or None if the ray misses.
        """
        oc = ray.origin - self.center
        a = ray.direction.dot(ray.direction)
        b = 2.0 * oc.dot(ray.direction)
        c = oc.dot(oc) - self.radius * self.radius
        discriminant = b * b - 4.0 * a * c

        if discriminant < 0.0:
            return None

        sqrt_d = math.sqrt(discriminant)
        root = (-b - sqrt_d) / (2.0 * a)
        if root < t_min or root > t_max:
            root = (-b + sqrt_d) / (2.0 * a)
            if root < t_min or root > t_max:
                return None

        # Outward normal: points from center to hit point
        outward_normal = (ray.at(root) - self.center) * (1.0 / self.radius)
        return make_hit(ray, root, outward_normal, self.material)
