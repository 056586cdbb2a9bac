# image_toolbox/pixel_ops.py
from __future__ import annotations

"""
Pixel-buffer helpers shared by the background matte and the palette quantizer.

All functions take numpy views of a (H, W, 4) or (N, 4) uint8 buffer and never
write to them.
"""

from typing import List

import numpy as np

from .core_types import RGBTuple, round_half_up


def color_distance_sq(rgb: np.ndarray, ref: RGBTuple) -> np.ndarray:
    """Squared Euclidean RGB distance of every row/pixel in `rgb` to `ref` (int64)."""
    diff = rgb[..., :3].astype(np.int64) - np.asarray(ref, dtype=np.int64)
    return np.sum(diff * diff, axis=-1)


def mean_rgb(rows: np.ndarray) -> RGBTuple:
    """Mean colour of (N, >=3) rows, rounded half-up per channel."""
    if rows.shape[0] == 0:
        raise ValueError("cannot average zero rows")
    sums = rows[:, :3].astype(np.int64).sum(axis=0)
    n = rows.shape[0]
    return (
        round_half_up(sums[0] / n),
        round_half_up(sums[1] / n),
        round_half_up(sums[2] / n),
    )


def average_colors(colors: List[RGBTuple]) -> RGBTuple:
    """Unweighted mean of RGB tuples, rounded half-up."""
    return mean_rgb(np.asarray(colors, dtype=np.int64).reshape(-1, 3))


def quantize_channels(rgb: np.ndarray, bucket_size: int) -> np.ndarray:
    """Snap each channel to the nearest multiple of bucket_size (halves round up)."""
    if bucket_size <= 0:
        raise ValueError("bucket_size must be positive")
    scaled = rgb[..., :3].astype(np.float64) / float(bucket_size)
    return (np.floor(scaled + 0.5) * bucket_size).astype(np.int64)


__all__ = [
    "color_distance_sq",
    "mean_rgb",
    "average_colors",
    "quantize_channels",
]
