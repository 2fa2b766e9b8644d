"""Image export and comparison utilities for rendered images.

Rendered images are float64 arrays of shape (H, W, 3), top row first, with
gamma already applied. This module quantizes them and writes them to disk.

Supported formats:
    - PPM (plain "P3" text, the renderer's reference format)
    - PNG (8-bit via Pillow)

It also compares rendered files byte for byte, which is how regression
tests and determinism checks decide whether two renders are the same.

Example:
    >>> from src.ribtrace.preview.export import compare_images, write_ppm
    >>> write_ppm(image, "a.ppm")  # doctest: +SKIP
    >>> compare_images("a.ppm", "b.ppm").identical  # doctest: +SKIP
    True
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def _check_image(image: npt.NDArray[np.float64]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("Image must have at least one pixel")


def image_to_uint8(image: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """Quantize a [0, 1] float image to 8 bits.

    Each channel becomes floor(clip(c * 255, 0, 255)), the same rule as
    ``Color.to_rgb8``.

    Args:
        image: Float image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    _check_image(image)
    scaled = np.clip(image.astype(np.float64) * 255.0, 0.0, 255.0)
    return np.floor(scaled).astype(np.uint8)


# =============================================================================
# PPM
# =============================================================================


def format_ppm(image: npt.NDArray[np.float64]) -> str:
    """Return the plain PPM text of an image.

    Layout: "P3", "W H" and "255" header lines, then one line per image row
    holding "r g b " for every pixel (each triple followed by a space).
    """
    pixels = image_to_uint8(image)
    height, width, _ = pixels.shape
    parts = [f"{PPM_MAGIC}\n{width} {height}\n{PPM_MAX_VALUE}\n"]
    for row in pixels:
        parts.append("".join(f"{r} {g} {b} " for r, g, b in row.tolist()))
        parts.append("\n")
    return "".join(parts)


def write_ppm(image: npt.NDArray[np.float64], filepath: str | os.PathLike[str]) -> None:
    """Write an image as a plain (P3) PPM file.

    Args:
        image: Float image array of shape (H, W, 3), top row first.
        filepath: Output file path.
    """
    text = format_ppm(image)
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        f.write(text)
    logger.info("Image written to %s", filepath)


def read_ppm(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read a plain (P3) PPM file.

    Comments (from ``#`` to the end of a line) are skipped.

    Returns:
        uint8 array of shape (H, W, 3).

    Raises:
        ValueError: If the file is not a well-formed P3 image.
    """
    with open(filepath, encoding="ascii") as f:
        content = f.read()

    tokens: list[str] = []
    for line in content.splitlines():
        tokens.extend(line.split("#", 1)[0].split())

    if len(tokens) < 4 or tokens[0] != PPM_MAGIC:
        raise ValueError(f"{filepath} is not a P3 PPM file")

    try:
        width, height, max_value = (int(t) for t in tokens[1:4])
        values = np.array([int(t) for t in tokens[4:]], dtype=np.int64)
    except ValueError as exc:
        raise ValueError(f"{filepath}: invalid number in PPM data") from exc

    if values.size != width * height * 3:
        raise ValueError(
            f"{filepath}: expected {width * height * 3} samples, got {values.size}"
        )
    if max_value != PPM_MAX_VALUE:
        values = values * PPM_MAX_VALUE // max_value
    return values.reshape((height, width, 3)).astype(np.uint8)


# =============================================================================
# PNG
# =============================================================================


def save_png(image: npt.NDArray[np.float64], filepath: str | os.PathLike[str]) -> None:
    """Save an image as an 8-bit PNG file.

    Args:
        image: Float image array of shape (H, W, 3), gamma already applied.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)
    logger.info("Image written to %s", filepath)


def save_image(image: npt.NDArray[np.float64], filepath: str | os.PathLike[str]) -> None:
    """Save as PNG when the path ends in .png, otherwise as PPM."""
    if os.fspath(filepath).lower().endswith(".png"):
        save_png(image, filepath)
    else:
        write_ppm(image, filepath)


# =============================================================================
# Comparison
# =============================================================================


@dataclass(frozen=True)
class ImageDiff:
    """Result of a byte-level comparison of two image files.

    Attributes:
        identical: True if both files hold exactly the same bytes.
        reason: Why the files differ (empty when identical).
        different_bytes: Number of byte positions that differ.
        total_bytes: Size of the files when their sizes match.
        percent: different_bytes as a percentage of total_bytes.
        first_difference_offset: Offset of the first differing byte, or -1.
        size_difference: Size of the second file minus size of the first.
    """

    identical: bool
    reason: str = ""
    different_bytes: int = 0
    total_bytes: int = 0
    percent: float = 0.0
    first_difference_offset: int = -1
    size_difference: int = 0


def compare_images(
    path_a: str | os.PathLike[str], path_b: str | os.PathLike[str]
) -> ImageDiff:
    """Compare two image files byte for byte.

    Unreadable files are reported as a difference rather than raised.
    """
    try:
        with open(path_a, "rb") as f:
            data_a = f.read()
        with open(path_b, "rb") as f:
            data_b = f.read()
    except OSError as exc:
        return ImageDiff(identical=False, reason=f"Error reading files: {exc}")

    if len(data_a) != len(data_b):
        return ImageDiff(
            identical=False,
            reason="Different file sizes",
            size_difference=len(data_b) - len(data_a),
        )

    a = np.frombuffer(data_a, dtype=np.uint8)
    b = np.frombuffer(data_b, dtype=np.uint8)
    mismatches = np.flatnonzero(a != b)
    if mismatches.size == 0:
        return ImageDiff(identical=True, total_bytes=len(data_a))

    return ImageDiff(
        identical=False,
        reason="Pixel data differs",
        different_bytes=int(mismatches.size),
        total_bytes=len(data_a),
        percent=round(mismatches.size / len(data_a) * 100.0, 2),
        first_difference_offset=int(mismatches[0]),
    )


def compute_rmse(
    image_a: npt.NDArray[np.float64],
    image_b: npt.NDArray[np.float64],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
