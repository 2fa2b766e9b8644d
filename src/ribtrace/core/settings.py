"""Render configuration.

RenderSettings collects every knob that changes the pixels of a render:
resolution, sampling, recursion depth, gamma and the base seed. It is a
plain frozen dataclass so it can be pickled to worker processes and
compared in tests.

Example:
    >>> from src.ribtrace.core.settings import RenderSettings
    >>> settings = RenderSettings(width=64, height=48).with_antialiasing("low")
    >>> settings.samples, settings.stratified
    (4, True)
    >>> RenderSettings(samples=5).effective_samples
    9
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from enum import Enum

logger = logging.getLogger(__name__)


class AntialiasingQuality(str, Enum):
    """Named antialiasing presets."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


# Samples per pixel for each preset
ANTIALIASING_SAMPLES: dict[AntialiasingQuality, int] = {
    AntialiasingQuality.NONE: 1,
    AntialiasingQuality.LOW: 4,
    AntialiasingQuality.MEDIUM: 9,
    AntialiasingQuality.HIGH: 16,
    AntialiasingQuality.ULTRA: 25,
}


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Requested samples per pixel.
        max_depth: Maximum recursion depth for reflections.
        stratified: Use jittered sub-grid sampling when samples > 1.
        gamma: Gamma applied to each final pixel (1.0 disables it).
        seed: Base seed mixed into every pixel's generator.
        threads: Worker process count, or None for one per CPU.
    """

    width: int = 400
    height: int = 300
    samples: int = 1
    max_depth: int = 10
    stratified: bool = True
    gamma: float = 2.2
    seed: int = 12345
    threads: int | None = None

    def validate(self) -> RenderSettings:
        """Check the settings and return them unchanged.

        Raises:
            ValueError: If a dimension or the sample count is below 1, the
                depth is negative or gamma is not positive.
        """
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be at least 1x1, got {self.width}x{self.height}")
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be > 0, got {self.gamma}")
        if self.threads is not None and self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        return self

    def with_antialiasing(self, quality: AntialiasingQuality | str) -> RenderSettings:
        """Return a copy configured for an antialiasing preset.

        "none" sets one sample and leaves ``stratified`` alone; every other
        preset turns stratified sampling on. Names are case-insensitive; an
        unknown name falls back to "medium" with a warning.
        """
        if not isinstance(quality, AntialiasingQuality):
            quality = str(quality).lower()
        try:
            preset = AntialiasingQuality(quality)
        except ValueError:
            logger.warning("Unknown antialiasing quality %r, using 'medium'", quality)
            preset = AntialiasingQuality.MEDIUM

        samples = ANTIALIASING_SAMPLES[preset]
        if preset is AntialiasingQuality.NONE:
            return replace(self, samples=samples)
        return replace(self, samples=samples, stratified=True)

    @property
    def effective_samples(self) -> int:
        """Number of rays actually traced per pixel.

        Stratified sampling rounds the request up to a full square grid.
        """
        if self.samples <= 1:
            return 1
        if self.stratified:
            n = math.ceil(math.sqrt(self.samples))
            return n * n
        return self.samples

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def resolved_threads(self) -> int:
        """Worker count with the CPU default applied, never below 1."""
        if self.threads is not None:
            return max(1, self.threads)
        return max(1, os.cpu_count() or 1)
