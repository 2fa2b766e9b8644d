"""Built-in scenes.

This module provides factory functions for the scenes the renderer ships
with:

- ``create_default_scene``: three colored spheres in a row, a small mirror
  sphere above them, a grey floor plane and two point lights under a sky
  blue background. Rendered when no scene file is given.
- ``create_reference_scene``: a single red sphere lit by one light, small
  enough to render in tests and pinned as a reference image.

Example:
    >>> from src.ribtrace.scene.default_scene import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> len(scene.objects), len(scene.lights)
    (5, 2)
"""

from __future__ import annotations

from src.ribtrace.camera.pinhole import Camera
from src.ribtrace.core.color import Color
from src.ribtrace.core.vector import Vec3
from src.ribtrace.geometry.plane import Plane
from src.ribtrace.geometry.primitive import Material
from src.ribtrace.geometry.sphere import Sphere
from src.ribtrace.scene.scene import Light, Scene

# =============================================================================
# Scene Constants
# =============================================================================

SKY_BLUE = Color(0.5, 0.7, 1.0)
DEFAULT_FOV = 45.0
DEFAULT_ASPECT_RATIO = 16.0 / 9.0


def create_default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> Camera:
    """Camera at (0, 0, 2) looking toward (0, 0, -1)."""
    return Camera(
        position=Vec3(0.0, 0.0, 2.0),
        target=Vec3(0.0, 0.0, -1.0),
        vup=Vec3(0.0, 1.0, 0.0),
        fov=DEFAULT_FOV,
        aspect_ratio=aspect_ratio,
    )


def create_default_scene(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> tuple[Scene, Camera]:
    """Create the demonstration scene.

    Objects, in order:
        1. Red sphere at (0, 0, -1), radius 0.5, slightly reflective
        2. Green sphere at (-1, 0, -1), radius 0.5
        3. Blue sphere at (1, 0, -1), radius 0.5
        4. Mirror sphere at (0, 1, -1), radius 0.3
        5. Matte floor plane through (0, -0.5, 0)

    Lights: white at (2, 2, 0) and dim blue-white at (-2, 2, 0).

    Args:
        aspect_ratio: Camera aspect ratio (width / height of the image).

    Returns:
        A tuple of (Scene, Camera).
    """
    scene = Scene(background=SKY_BLUE)

    scene.add(
        Sphere(
            Vec3(0.0, 0.0, -1.0),
            0.5,
            Material(Color(0.8, 0.2, 0.2), 0.1, 0.7, 0.2, 32.0, 0.1),
        )
    )
    scene.add(
        Sphere(
            Vec3(-1.0, 0.0, -1.0),
            0.5,
            Material(Color(0.2, 0.8, 0.2), 0.1, 0.7, 0.2, 32.0, 0.0),
        )
    )
    scene.add(
        Sphere(
            Vec3(1.0, 0.0, -1.0),
            0.5,
            Material(Color(0.2, 0.2, 0.8), 0.1, 0.7, 0.2, 32.0, 0.0),
        )
    )
    scene.add(
        Sphere(
            Vec3(0.0, 1.0, -1.0),
            0.3,
            Material(Color(0.9, 0.9, 0.9), 0.05, 0.1, 0.9, 128.0, 0.9),
        )
    )
    scene.add(
        Plane(
            Vec3(0.0, -0.5, 0.0),
            Vec3(0.0, 1.0, 0.0),
            Material(Color(0.8, 0.8, 0.8), 0.2, 0.8, 0.0, 1.0, 0.0),
        )
    )

    scene.add_light(Light(Vec3(2.0, 2.0, 0.0), Color(1.0, 1.0, 1.0), 1.0))
    scene.add_light(Light(Vec3(-2.0, 2.0, 0.0), Color(0.8, 0.8, 1.0), 0.5))

    return scene, create_default_camera(aspect_ratio)


def create_reference_scene(aspect_ratio: float = 1.0) -> tuple[Scene, Camera]:
    """Create the single red sphere scene used as a regression reference.

    A red (0.8, 0.2, 0.2) sphere of radius 0.5 at (0, 0, -1) with default
    Phong weights, one white light at (2, 2, 0) and the sky blue
    background. The camera matches the default scene's.

    Args:
        aspect_ratio: Camera aspect ratio; the reference render is square.

    Returns:
        A tuple of (Scene, Camera).
    """
    scene = Scene(background=SKY_BLUE)
    scene.add(Sphere(Vec3(0.0, 0.0, -1.0), 0.5, Material(color=Color(0.8, 0.2, 0.2))))
    scene.add_light(Light(Vec3(2.0, 2.0, 0.0)))
    return scene, create_default_camera(aspect_ratio)
