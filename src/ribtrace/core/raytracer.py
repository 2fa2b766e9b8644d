"""Whitted-style recursive ray tracer with Phong shading.

This module implements the single-process rendering algorithm:
    - Per-pixel sampling (single center ray, stratified or plain random)
    - Recursive ray tracing with mirror reflection
    - Phong shading with hard shadows from point lights
    - Gamma correction of the final pixel

Randomness comes from a generator built fresh for every pixel (see
``core.sampler``), so the color of a pixel depends only on the scene, the
camera, the settings and the pixel's own coordinates. Rendering a strip of
rows gives exactly the rows a full render would.

Example:
    >>> from src.ribtrace.core.raytracer import Raytracer
    >>> from src.ribtrace.core.settings import RenderSettings
    >>> from src.ribtrace.scene.default_scene import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> tracer = Raytracer(scene, camera, RenderSettings(width=32, height=18))
    >>> image = tracer.render()
    >>> image.shape
    (18, 32, 3)
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from src.ribtrace.camera.pinhole import Camera
from src.ribtrace.core.color import BLACK, Color
from src.ribtrace.core.ray import Ray
from src.ribtrace.core.sampler import create_pixel_random
from src.ribtrace.core.settings import RenderSettings
from src.ribtrace.geometry.primitive import HitRecord
from src.ribtrace.scene.scene import Scene

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Shadow rays start and stop this far from the hit point and the light
SHADOW_EPSILON = 0.001

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Raytracer:
    """Renders a scene through a camera with fixed settings.

    Attributes:
        scene: The scene to render.
        camera: The camera generating primary rays.
        settings: Resolution, sampling, depth, gamma and seed.
    """

    def __init__(self, scene: Scene, camera: Camera, settings: RenderSettings | None = None) -> None:
        self.scene = scene
        self.camera = camera
        self.settings = (settings or RenderSettings()).validate()

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    # =========================================================================
    # Image rendering
    # =========================================================================

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.float64]:
        """Render the full image.

        Args:
            callback: Optional function called after every row with
                (rows_done, total_rows).

        Returns:
            Float64 array of shape (height, width, 3), top row first, with
            gamma applied.
        """
        logger.info(
            "Rendering %dx%d, %d sample(s) per pixel, depth %d",
            self.width,
            self.height,
            self.settings.effective_samples,
            self.settings.max_depth,
        )
        start = time.perf_counter()
        image = self.render_rows(0, self.height, callback=callback)
        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return image

    def render_rows(
        self, start_y: int, end_y: int, callback: ProgressCallback | None = None
    ) -> npt.NDArray[np.float64]:
        """Render the strip of camera-space rows [start_y, end_y).

        Rows are produced from end_y - 1 down to start_y, so the first row
        of the returned array is the topmost row of the strip.

        Args:
            start_y: First row of the strip (0 = bottom of the image).
            end_y: One past the last row of the strip.
            callback: Optional progress function, see ``render``.

        Returns:
            Float64 array of shape (end_y - start_y, width, 3).
        """
        if not 0 <= start_y <= end_y <= self.height:
            raise ValueError(f"Invalid row range [{start_y}, {end_y}) for height {self.height}")

        total = end_y - start_y
        rows = np.zeros((total, self.width, 3), dtype=np.float64)
        gamma = self.settings.gamma

        for row_index, y in enumerate(range(end_y - 1, start_y - 1, -1)):
            for x in range(self.width):
                color = self.render_pixel(x, y)
                if gamma != 1.0:
                    color = color.gamma_correct(gamma)
                rows[row_index, x] = color.to_tuple()
            if callback is not None:
                callback(row_index + 1, total)
        return rows

    # =========================================================================
    # Per-pixel sampling
    # =========================================================================

    def render_pixel(self, x: int, y: int) -> Color:
        """Compute the linear (pre-gamma) color of one pixel.

        Args:
            x: Pixel column (0 = left).
            y: Pixel row (0 = bottom).

        Returns:
            The averaged pixel color.
        """
        settings = self.settings
        width = self.width
        height = self.height
        rng = create_pixel_random(settings.seed, x, y, width, height)

        if settings.samples == 1:
            ray = self.camera.get_ray((x + 0.5) / width, (y + 0.5) / height)
            return self.trace_ray(ray, settings.max_depth)

        # Each add clamps, so bright samples saturate before the mean
        pixel = BLACK
        if settings.stratified:
            n = math.ceil(math.sqrt(settings.samples))
            count = n * n
            for sy in range(n):
                for sx in range(n):
                    offset_x = (sx + rng.next()) / n
                    offset_y = (sy + rng.next()) / n
                    ray = self.camera.get_ray((x + offset_x) / width, (y + offset_y) / height)
                    pixel = pixel + self.trace_ray(ray, settings.max_depth)
        else:
            count = settings.samples
            for _ in range(count):
                u = (x + rng.next()) / width
                v = (y + rng.next()) / height
                pixel = pixel + self.trace_ray(self.camera.get_ray(u, v), settings.max_depth)

        return pixel * (1.0 / count)

    # =========================================================================
    # Ray tracing and shading
    # =========================================================================

    def trace_ray(self, ray: Ray, depth: int) -> Color:
        """Trace a ray into the scene.

        Returns black once the depth budget is spent and the background
        color when nothing is hit.
        """
        if depth <= 0:
            return BLACK
        hit = self.scene.intersect(ray)
        if hit is None:
            return self.scene.background
        return self.shade(hit, ray, depth)

    def shade(self, hit: HitRecord, ray: Ray, depth: int) -> Color:
        """Phong shading at a hit point, plus mirror reflection.

        Args:
            hit: The surface hit being shaded.
            ray: The ray that produced the hit.
            depth: Remaining recursion depth.

        Returns:
            The clamped color leaving the hit point along -ray.direction.
        """
        material = hit.material
        color = material.color * material.ambient
        view_dir = -ray.direction

        for light in self.scene.lights:
            to_light = light.position - hit.point
            distance = to_light.length()
            light_dir = to_light.normalize()

            shadow_ray = Ray(hit.point, light_dir, SHADOW_EPSILON, distance - SHADOW_EPSILON)
            if self.scene.intersect(shadow_ray) is not None:
                continue

            n_dot_l = max(0.0, hit.normal.dot(light_dir))
            diffuse = material.color.blend(light.color) * (
                material.diffuse * n_dot_l * light.intensity
            )
            color = color + diffuse

            reflect_dir = (-light_dir).reflect(hit.normal)
            highlight = math.pow(max(0.0, view_dir.dot(reflect_dir)), material.shininess)
            color = color + light.color * (material.specular * highlight * light.intensity)

        if material.reflectivity > 0.0 and depth > 1:
            reflect_ray = Ray(hit.point, ray.direction.reflect(hit.normal))
            reflect_color = self.trace_ray(reflect_ray, depth - 1)
            color = color + reflect_color * material.reflectivity

        return color
