"""Ray data structure.

A ray is a half-line with an origin, a unit direction and the parametric
interval in which hits are accepted. The direction is normalized when the
ray is built, so ``t`` always measures world-space distance along the ray.

Rays are immutable and cheap; shading builds a fresh one for every shadow
and reflection query.

Example:
    >>> from src.ribtrace.core.ray import Ray
    >>> from src.ribtrace.core.vector import Vec3
    >>> ray = Ray(Vec3(0.0, 0.0, 0.0), Vec3(0.0, 0.0, -2.0))
    >>> ray.direction
    Vec3(x=0.0, y=0.0, z=-1.0)
    >>> ray.at(5.0)  # Point 5 units along the ray
    Vec3(x=0.0, y=0.0, z=-5.0)
"""

from __future__ import annotations

import math

from src.ribtrace.core.vector import Vec3

# Default parametric interval; t_min keeps secondary rays off their own surface
DEFAULT_T_MIN = 0.001
DEFAULT_T_MAX = math.inf


class Ray:
    """A ray with an origin, a normalized direction and a valid interval.

    Attributes:
        origin: The starting point of the ray.
        direction: The unit direction of the ray.
        t_min: Smallest accepted hit distance.
        t_max: Largest accepted hit distance.
    """

    __slots__ = ("origin", "direction", "t_min", "t_max")

    def __init__(
        self,
        origin: Vec3,
        direction: Vec3,
        t_min: float = DEFAULT_T_MIN,
        t_max: float = DEFAULT_T_MAX,
    ) -> None:
        self.origin = origin
        self.direction = direction.normalize()
        self.t_min = t_min
        self.t_max = t_max

    def at(self, t: float) -> Vec3:
        """Compute the point along the ray at parameter t.

        Args:
            t: The parameter value. Positive values are in front of the origin.

        Returns:
            The point origin + t * direction.
        """
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return (
            f"Ray(origin={self.origin!r}, direction={self.direction!r}, "
            f"t_min={self.t_min!r}, t_max={self.t_max!r})"
        )
