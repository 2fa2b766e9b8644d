"""Clamped RGB color.

Every Color keeps its channels inside [0, 1]: the constructor clamps, and
every operation that produces a Color goes through the constructor. Shading
sums many light contributions into a single Color; the clamp bounds that
sum so a pixel can never carry more than full intensity into the output.

Example:
    >>> from src.ribtrace.core.color import Color
    >>> Color(1.5, -0.2, 0.5)
    Color(r=1.0, g=0.0, b=0.5)
    >>> Color(0.6, 0.6, 0.6) + Color(0.6, 0.0, 0.0)
    Color(r=1.0, g=0.6, b=0.6)
"""

from __future__ import annotations

import math
from collections.abc import Sequence


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class Color:
    """An RGB color with channels clamped to [0, 1].

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    __slots__ = ("r", "g", "b")

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0) -> None:
        self.r = _clamp01(r)
        self.g = _clamp01(g)
        self.b = _clamp01(b)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Color:
        """Build a color from the first three items of a sequence.

        Raises:
            ValueError: If fewer than three values are given.
        """
        if len(values) < 3:
            raise ValueError(f"Expected 3 channels, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def __add__(self, other: Color) -> Color:
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, scalar: float) -> Color:
        return Color(self.r * scalar, self.g * scalar, self.b * scalar)

    __rmul__ = __mul__

    def blend(self, other: Color) -> Color:
        """Multiply two colors channel by channel."""
        return Color(self.r * other.r, self.g * other.g, self.b * other.b)

    def gamma_correct(self, gamma: float) -> Color:
        """Apply gamma encoding: each channel becomes c ** (1 / gamma).

        A gamma of exactly 1.0 returns the color unchanged.
        """
        if gamma == 1.0:
            return self
        inv = 1.0 / gamma
        return Color(math.pow(self.r, inv), math.pow(self.g, inv), math.pow(self.b, inv))

    def to_rgb8(self) -> tuple[int, int, int]:
        """Quantize to 8-bit channels with floor(c * 255)."""
        return (
            int(math.floor(max(0.0, min(255.0, self.r * 255.0)))),
            int(math.floor(max(0.0, min(255.0, self.g * 255.0)))),
            int(math.floor(max(0.0, min(255.0, self.b * 255.0)))),
        )

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the channels as a plain tuple."""
        return (self.r, self.g, self.b)

    def __iter__(self):
        yield self.r
        yield self.g
        yield self.b

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.r == other.r and self.g == other.g and self.b == other.b

    def __hash__(self) -> int:
        return hash((self.r, self.g, self.b))

    def __repr__(self) -> str:
        return f"Color(r={self.r!r}, g={self.g!r}, b={self.b!r})"


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
