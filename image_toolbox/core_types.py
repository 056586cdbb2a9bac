# image_toolbox/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA pixel buffer

# Value objects


@dataclass(frozen=True)
class PaletteColor:
    """Finalised palette entry: uppercase '#RRGGBB' plus integer channels."""

    hex: HexStr
    r: int
    g: int
    b: int

    @classmethod
    def from_rgb(cls, rgb: RGBTuple) -> "PaletteColor":
        r, g, b = coerce_to_rgb_tuple(rgb)
        return cls(rgb_to_hex((r, g, b)), r, g, b)

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {"hex": self.hex, "r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class ColorBucket:
    """Quantisation cell with running channel sums and a sample count."""

    key: RGBTuple
    sum_r: int
    sum_g: int
    sum_b: int
    count: int

    def mean(self) -> RGBTuple:
        """Bucket average, rounded half-up per channel."""
        if self.count <= 0:
            raise ValueError("empty bucket has no mean")
        return (
            round_half_up(self.sum_r / self.count),
            round_half_up(self.sum_g / self.count),
            round_half_up(self.sum_b / self.count),
        )


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +inf (0.5 -> 1, 2.5 -> 3)."""
    return int(np.floor(float(value) + 0.5))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to uppercase hex string '#RRGGBB'."""
    return f"#{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError:
        raise ValueError(f"invalid hex colour: {hex_str!r}") from None


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple,
    clamping each channel to [0, 255].
    """
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        v = value.reshape(-1)
    else:
        if len(value) < 3:
            raise ValueError("sequence too small for RGB")
        v = value  # type: ignore[assignment]
    return (
        int(clamp_value(int(v[0]), 0, 255)),
        int(clamp_value(int(v[1]), 0, 255)),
        int(clamp_value(int(v[2]), 0, 255)),
    )


def assert_u8_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) pixel buffer and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) RGBA buffer")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    # value objects
    "PaletteColor",
    "ColorBucket",
    # helpers
    "clamp_value",
    "round_half_up",
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "assert_u8_rgba",
]
