"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: Immutable 3D vectors
    transform: Column-major 4x4 affine transforms
    ray: Ray data structure
    color: Clamped RGB colors
    sampler: Seeded per-pixel random number generation
    settings: Render configuration and antialiasing presets
    raytracer: Whitted-style single-process renderer
    parallel: Multi-process tile scheduler
"""

from .color import BLACK, WHITE, Color
from .ray import DEFAULT_T_MAX, DEFAULT_T_MIN, Ray
from .sampler import DEFAULT_SEED, SeededRandom, create_pixel_random, derive_pixel_seed
from .settings import AntialiasingQuality, RenderSettings
from .transform import Matrix4
from .vector import UNIT_Y, ZERO, Vec3

# Note: raytracer and parallel are NOT imported here to avoid circular imports.
# Import directly from src.ribtrace.core.raytracer or src.ribtrace.core.parallel.

__all__ = [
    "Vec3",
    "ZERO",
    "UNIT_Y",
    "Matrix4",
    "Ray",
    "DEFAULT_T_MIN",
    "DEFAULT_T_MAX",
    "Color",
    "BLACK",
    "WHITE",
    "SeededRandom",
    "DEFAULT_SEED",
    "derive_pixel_seed",
    "create_pixel_random",
    "RenderSettings",
    "AntialiasingQuality",
]
