"""Deterministic random numbers for reproducible sampling.

Rendering must produce the same image no matter how rows are split between
workers. To get that, nothing random is global: every pixel builds its own
generator, seeded from the render's base seed and the pixel coordinates,
and consumes it in a fixed order (x jitter before y jitter, sub-cells in
row-major order). Which worker rendered the pixel, and in what order the
pixels were visited, cannot influence the numbers drawn.

The generator is a 32-bit linear congruential generator with the
Numerical Recipes constants.

Example:
    >>> from src.ribtrace.core.sampler import SeededRandom, derive_pixel_seed
    >>> rng = SeededRandom(42)
    >>> 0.0 <= rng.next() < 1.0
    True
    >>> derive_pixel_seed(42, 1, 0, 10, 10)
    9298
"""

from __future__ import annotations

# Numerical Recipes LCG constants
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32

# Weights mixing pixel coordinates into the base seed
PIXEL_INDEX_WEIGHT = 1337
PIXEL_X_WEIGHT = 7919
PIXEL_Y_WEIGHT = 3571

DEFAULT_SEED = 12345


class SeededRandom:
    """A seeded linear congruential generator.

    state = (a * state + c) mod 2^32, and each draw returns state / 2^32.

    Attributes:
        state: The current generator state.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int = 1) -> None:
        self.state = int(seed)

    def seed(self, value: int) -> None:
        """Reset the generator to a new seed."""
        self.state = int(value)

    def next(self) -> float:
        """Advance the generator and return a float in [0, 1)."""
        self.state = (LCG_MULTIPLIER * self.state + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def get_seed(self) -> int:
        """Return the current state (the seed of the next draw)."""
        return self.state

    def __repr__(self) -> str:
        return f"SeededRandom(state={self.state})"


def derive_pixel_seed(base_seed: int, x: int, y: int, width: int, height: int) -> int:
    """Derive the seed for one pixel.

    The result depends only on the arguments, so any tile partitioning
    hands a pixel the same seed a single-process render would.

    Args:
        base_seed: The render's base seed.
        x: Pixel column (0 = left).
        y: Pixel row in camera space (0 = bottom).
        width: Full image width in pixels.
        height: Full image height in pixels. Part of the signature so the
            derivation can depend on the full raster; unused by the
            current mixing function.

    Returns:
        base_seed + (y * width + x) * 1337 + x * 7919 + y * 3571.
    """
    pixel_index = y * width + x
    return base_seed + pixel_index * PIXEL_INDEX_WEIGHT + x * PIXEL_X_WEIGHT + y * PIXEL_Y_WEIGHT


def create_pixel_random(base_seed: int, x: int, y: int, width: int, height: int) -> SeededRandom:
    """Create a fresh generator seeded for one pixel."""
    return SeededRandom(derive_pixel_seed(base_seed, x, y, width, height))
