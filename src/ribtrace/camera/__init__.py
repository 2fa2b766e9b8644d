"""Camera models for primary ray generation.

Components:
    pinhole: Perspective pinhole camera (look-at, vertical field of view)
"""

from .pinhole import Camera

__all__ = ["Camera"]
