"""Output and preview utilities.

Components:
    export: PPM/PNG writers, PPM reader, byte-level image comparison, RMSE
    display: Matplotlib preview and comparison windows
"""

from .export import (
    ImageDiff,
    compare_images,
    compute_rmse,
    image_to_uint8,
    read_ppm,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    "image_to_uint8",
    "write_ppm",
    "read_ppm",
    "save_png",
    "save_image",
    "ImageDiff",
    "compare_images",
    "compute_rmse",
]
