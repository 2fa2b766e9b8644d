"""Axis-aligned bounding boxes.

Used as a cheap reject in front of the NURBS tessellation: a ray that
misses the box of a surface's control points cannot hit the surface (the
convex-hull property of NURBS with positive weights).

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> from src.ribtrace.geometry.aabb import AABB
    >>> box = AABB(Vec3(-1, -1, -1), Vec3(1, 1, 1))
    >>> box.hit(Ray(Vec3(0, 0, 5), Vec3(0, 0, -1)), 0.001, 100.0)
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3

# Axes thinner than this are inflated so flat surfaces keep a usable slab
DEGENERATE_EXTENT = 1e-6
INFLATE_EPSILON = 1e-3


@dataclass(frozen=True, slots=True)
class AABB:
    """An axis-aligned box.

    Attributes:
        minimum: Lower corner.
        maximum: Upper corner.
    """

    minimum: Vec3
    maximum: Vec3

    @classmethod
    def from_points(cls, points: Iterable[Vec3]) -> AABB:
        """Build the tightest box around a set of points.

        Any axis whose extent is below DEGENERATE_EXTENT is grown by
        INFLATE_EPSILON on both sides.

        Raises:
            ValueError: If no points are given.
        """
        iterator = iter(points)
        try:
            first = next(iterator)
        except StopIteration:
            raise ValueError("Cannot build a bounding box from zero points") from None

        lo = first
        hi = first
        for p in iterator:
            lo = lo.component_min(p)
            hi = hi.component_max(p)

        lo_c = list(lo.to_tuple())
        hi_c = list(hi.to_tuple())
        for axis in range(3):
            if hi_c[axis] - lo_c[axis] < DEGENERATE_EXTENT:
                lo_c[axis] -= INFLATE_EPSILON
                hi_c[axis] += INFLATE_EPSILON
        return cls(Vec3(*lo_c), Vec3(*hi_c))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Slab test: does the ray pass through the box within [t_min, t_max]?"""
        interval = self.entry_distance(ray, t_min, t_max)
        return interval is not None

    def entry_distance(self, ray: Ray, t_min: float, t_max: float) -> float | None:
        """Return the distance at which the ray enters the box, or None on a miss.

        The returned value is clipped to t_min (a ray starting inside the
        box enters at t_min).
        """
        origin = ray.origin.to_tuple()
        direction = ray.direction.to_tuple()
        lo = self.minimum.to_tuple()
        hi = self.maximum.to_tuple()

        for axis in range(3):
            d = direction[axis]
            o = origin[axis]
            if d == 0.0:
                # Parallel to this slab: must already be inside it
                if o < lo[axis] or o > hi[axis]:
                    return None
                continue
            inv_d = 1.0 / d
            t0 = (lo[axis] - o) * inv_d
            t1 = (hi[axis] - o) * inv_d
            if inv_d < 0.0:
                t0, t1 = t1, t0
            t_min = max(t_min, t0)
            t_max = min(t_max, t1)
            if t_max < t_min:
                return None
        return t_min

    def diagonal(self) -> float:
        """Length of the box diagonal."""
        return (self.maximum - self.minimum).length()

    def center(self) -> Vec3:
        """Center point of the box."""
        return (self.minimum + self.maximum) * 0.5
