"""Scene container and nearest-hit query.

A Scene is an ordered list of primitives, an ordered list of point lights
and a background color. Intersection is a linear scan: each primitive is
tested with the closest distance found so far as its upper bound, so the
final record is the nearest hit. Order matters only for exact ties, where
the primitive added last wins.

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.sphere import Sphere
    >>> from src.ribtrace.scene.scene import Light, Scene
    >>> scene = Scene()
    >>> scene.add(Sphere(Vec3(0, 0, -1), 0.5))
    >>> scene.add_light(Light(Vec3(2, 2, 0)))
    >>> scene.intersect(Ray(Vec3(0, 0, 0), Vec3(0, 0, -1))).t
    0.5
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.ribtrace.core.color import BLACK, WHITE, Color
from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3
from src.ribtrace.geometry.primitive import HitRecord, Primitive


@dataclass(frozen=True)
class Light:
    """A point light.

    Attributes:
        position: World-space position.
        color: Emitted color.
        intensity: Scalar multiplier on the diffuse and specular terms.
    """

    position: Vec3
    color: Color = WHITE
    intensity: float = 1.0


@dataclass
class Scene:
    """Primitives, lights and background of a render.

    Attributes:
        objects: Primitives in insertion order.
        lights: Lights in insertion order.
        background: Color returned for rays that hit nothing.
    """

    objects: list[Primitive] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)
    background: Color = BLACK

    def add(self, primitive: Primitive) -> None:
        """Append a primitive."""
        self.objects.append(primitive)

    def add_light(self, light: Light) -> None:
        """Append a light."""
        self.lights.append(light)

    def intersect(
        self, ray: Ray, t_min: float | None = None, t_max: float | None = None
    ) -> HitRecord | None:
        """Find the nearest hit along a ray.

        Args:
            ray: The ray to trace.
            t_min: Minimum accepted distance; defaults to ``ray.t_min``.
            t_max: Maximum accepted distance; defaults to ``ray.t_max``.

        Returns:
            The nearest HitRecord, or None if nothing is hit.
        """
        lo = ray.t_min if t_min is None else t_min
        closest = ray.t_max if t_max is None else t_max

        best: HitRecord | None = None
        for primitive in self.objects:
            hit = primitive.intersect(ray, lo, closest)
            # closest is an inclusive bound, so a later primitive at equal t wins
            if hit is not None:
                best = hit
                closest = hit.t
        return best
