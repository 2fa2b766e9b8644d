"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis from its view parameters:
- forward: from the camera position toward the target
- right: points right in the image plane
- up: points up in the image plane

The image plane sits at unit distance along ``forward``. Its lower-left
corner and the two spans across it are computed once when the camera is
built; every primary ray is then a single interpolation over the plane.

Example:
    >>> from src.ribtrace.camera.pinhole import Camera
    >>> from src.ribtrace.core.vector import Vec3
    >>> camera = Camera(
    ...     position=Vec3(0.0, 0.0, 2.0),
    ...     target=Vec3(0.0, 0.0, -1.0),
    ...     vup=Vec3(0.0, 1.0, 0.0),
    ...     fov=45.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> camera.get_ray(0.5, 0.5).direction
    Vec3(x=0.0, y=0.0, z=-1.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from src.ribtrace.core.ray import Ray
from src.ribtrace.core.vector import Vec3

# =============================================================================
# Camera
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """An immutable pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space.
        target: Point the camera is looking at.
        vup: Up direction used to orient the camera (typically (0, 1, 0)).
        fov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        forward: Unit view direction (derived).
        right: Unit right vector of the image plane (derived).
        up: Unit up vector of the image plane (derived).
        lower_left: Lower-left corner of the image plane (derived).
        horizontal: Full width span of the image plane (derived).
        vertical: Full height span of the image plane (derived).
    """

    position: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, 0.0))
    target: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, -1.0))
    vup: Vec3 = field(default_factory=lambda: Vec3(0.0, 1.0, 0.0))
    fov: float = 45.0
    aspect_ratio: float = 16.0 / 9.0

    forward: Vec3 = field(init=False, repr=False, compare=False)
    right: Vec3 = field(init=False, repr=False, compare=False)
    up: Vec3 = field(init=False, repr=False, compare=False)
    lower_left: Vec3 = field(init=False, repr=False, compare=False)
    horizontal: Vec3 = field(init=False, repr=False, compare=False)
    vertical: Vec3 = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        half_height = math.tan(math.radians(self.fov) / 2.0)
        half_width = half_height * self.aspect_ratio

        forward = (self.target - self.position).normalize()
        right = forward.cross(self.vup).normalize()
        up = right.cross(forward).normalize()

        derived = {
            "forward": forward,
            "right": right,
            "up": up,
            "lower_left": self.position - right * half_width - up * half_height + forward,
            "horizontal": right * (2.0 * half_width),
            "vertical": up * (2.0 * half_height),
        }
        for name, value in derived.items():
            object.__setattr__(self, name, value)

    def get_ray(self, u: float, v: float) -> Ray:
        """Generate a ray through normalized image coordinates (u, v).

        The coordinates are normalized:
        - u = 0: left edge, u = 1: right edge
        - v = 0: bottom edge, v = 1: top edge

        Args:
            u: Horizontal coordinate in [0, 1].
            v: Vertical coordinate in [0, 1].

        Returns:
            A Ray from the camera position through the image-plane point.
        """
        point = self.lower_left + self.horizontal * u + self.vertical * v
        return Ray(self.position, point - self.position)

    def with_changes(self, **changes: object) -> Camera:
        """Return a copy with some fields replaced and the basis recomputed.

        Example:
            >>> wide = camera.with_changes(fov=90.0)  # doctest: +SKIP
        """
        return replace(self, **changes)
