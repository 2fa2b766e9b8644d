"""Materials, hit records and the primitive protocol.

Every geometric primitive exposes a single capability:

    intersect(ray, t_min, t_max) -> HitRecord | None

The hit record is returned by value and never mutated afterwards, so the
nearest-hit loop in the scene can keep a reference to the best record
without it being overwritten by the next test.

Example:
    >>> from src.ribtrace.core.color import Color
    >>> from src.ribtrace.geometry.primitive import Material
    >>> red = Material(color=Color(0.8, 0.2, 0.2), reflectivity=0.1)
    >>> red.shininess
    32.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from src.ribtrace.core.color import Color
from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3


@dataclass(frozen=True)
class Material:
    """Phong surface description attached to a primitive.

    Attributes:
        color: Base surface color.
        ambient: Weight of the ambient term.
        diffuse: Weight of the Lambertian diffuse term.
        specular: Weight of the Phong specular term.
        shininess: Phong exponent; higher values give tighter highlights.
        reflectivity: Fraction of the mirror-reflected color added, in [0, 1].
    """

    color: Color = field(default_factory=lambda: Color(0.5, 0.5, 0.5))
    ambient: float = 0.1
    diffuse: float = 0.7
    specular: float = 0.2
    shininess: float = 32.0
    reflectivity: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity must be in [0, 1], got {self.reflectivity}")


@dataclass(frozen=True, slots=True)
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        t: Distance along the ray to the hit.
        point: World-space hit point.
        normal: Unit surface normal, flipped to face the incoming ray.
        material: Material of the primitive that was hit.
        front_face: True if the ray hit the outward-facing side.
    """

    t: float
    point: Vec3
    normal: Vec3
    material: Material
    front_face: bool


def make_hit(ray: Ray, t: float, outward_normal: Vec3, material: Material) -> HitRecord:
    """Build a hit record, orienting the normal against the ray.

    Args:
        ray: The incoming ray.
        t: Hit distance along the ray.
        outward_normal: The geometric normal pointing out of the surface.
        material: The primitive's material.

    Returns:
        A HitRecord whose normal faces the ray origin.
    """
    front_face = ray.direction.dot(outward_normal) < 0.0
    normal = outward_normal if front_face else -outward_normal
    return HitRecord(t=t, point=ray.at(t), normal=normal, material=material, front_face=front_face)


@runtime_checkable
class Primitive(Protocol):
    """Anything that can be intersected by a ray."""

    material: Material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> HitRecord | None:
        """Return the nearest hit with t in [t_min, t_max], or None."""
        ...
