"""Deterministic CPU ray tracer for RenderMan (RIB) scenes.

This package renders scenes of spheres, planes, triangles and NURBS patches
with Whitted-style ray tracing and Phong shading, in parallel worker
processes, producing byte-identical images for any worker count.

Subpackages:
    core: Vector math, transforms, colors, seeded sampling, settings,
        the raytracer and the tile scheduler
    geometry: Primitives and their ray intersection routines
    scene: Scene container, serialization, built-in scenes, RIB parser
    camera: Pinhole camera with ray generation
    preview: Image export, comparison and preview display
"""

__version__ = "0.1.0"
