# image_toolbox/palette.py
from __future__ import annotations

"""
Approximate palette extraction by bucketed averaging.

Pipeline:
  1) Cap the analysis raster so its longest side is <= PALETTE_MAX_DIMENSION.
  2) Take every PALETTE_SAMPLE_STRIDE-th pixel (flat row-major index), skip
     samples with alpha < PALETTE_MIN_ALPHA.
  3) Snap each sample to the nearest multiple of PALETTE_BUCKET_SIZE per channel
     and accumulate channel sums + counts per bucket.
  4) Rank buckets by count (desc; ties keep first-seen order), keep the top K
     and report each bucket's mean colour.

An image with no qualifying samples yields a single black entry, so callers
always get a non-empty palette.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .constants import (
    PALETTE_BUCKET_SIZE,
    PALETTE_DEFAULT_SIZE,
    PALETTE_MAX_DIMENSION,
    PALETTE_MIN_ALPHA,
    PALETTE_SAMPLE_STRIDE,
    RESAMPLE_DEFAULT,
)
from .core_types import ColorBucket, PaletteColor, U8Image, assert_u8_rgba, round_half_up
from .errors import InvalidImageDimensions, PaletteExtractionFailed, SurfaceUnavailable
from .image_io import decode_image, encode, pillow_resample_from_name, rasterize, to_data_url
from .pixel_ops import quantize_channels
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string, warn

EMPTY_PALETTE_COLOR = PaletteColor("#000000", 0, 0, 0)


@dataclass(frozen=True)
class PaletteResult:
    colors: List[PaletteColor]
    preview_url: str
    width: int
    height: int


def capped_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """Uniform downscale so max(w, h) <= max_dimension; never upscales, never below 1."""
    if width <= 0 or height <= 0:
        raise InvalidImageDimensions(width, height)
    scale = min(1.0, max_dimension / float(max(width, height)))
    return (
        max(1, round_half_up(width * scale)),
        max(1, round_half_up(height * scale)),
    )


def collect_buckets(
    pixels: U8Image,
    *,
    stride: int = PALETTE_SAMPLE_STRIDE,
    min_alpha: int = PALETTE_MIN_ALPHA,
    bucket_size: int = PALETTE_BUCKET_SIZE,
) -> List[ColorBucket]:
    """
    Strided samples grouped into colour buckets, most populated first.

    Ties are ordered by the position of the bucket's first sample.
    """
    assert_u8_rgba(pixels)
    if stride <= 0:
        raise ValueError("stride must be positive")

    samples = pixels.reshape(-1, 4)[::stride]
    samples = samples[samples[:, 3] >= min_alpha]
    if samples.shape[0] == 0:
        return []

    keys = quantize_channels(samples, bucket_size)
    uniq, first_idx, inverse, counts = np.unique(
        keys, axis=0, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = inverse.reshape(-1)
    rgb = samples[:, :3].astype(np.int64)
    sums = np.stack(
        [np.bincount(inverse, weights=rgb[:, c], minlength=uniq.shape[0]) for c in range(3)],
        axis=1,
    )

    order = np.lexsort((first_idx, -counts))
    return [
        ColorBucket(
            key=(int(uniq[i, 0]), int(uniq[i, 1]), int(uniq[i, 2])),
            sum_r=int(round(sums[i, 0])),
            sum_g=int(round(sums[i, 1])),
            sum_b=int(round(sums[i, 2])),
            count=int(counts[i]),
        )
        for i in order
    ]


def quantize_palette(
    pixels: U8Image,
    palette_size: int = PALETTE_DEFAULT_SIZE,
    *,
    stride: int = PALETTE_SAMPLE_STRIDE,
    min_alpha: int = PALETTE_MIN_ALPHA,
    bucket_size: int = PALETTE_BUCKET_SIZE,
) -> List[PaletteColor]:
    """Top `palette_size` bucket averages, most represented first."""
    if palette_size < 1:
        raise ValueError("palette_size must be >= 1")
    buckets = collect_buckets(
        pixels, stride=stride, min_alpha=min_alpha, bucket_size=bucket_size
    )
    if not buckets:
        return [EMPTY_PALETTE_COLOR]
    return [PaletteColor.from_rgb(b.mean()) for b in buckets[:palette_size]]


def extract_palette(
    data: bytes,
    palette_size: int = PALETTE_DEFAULT_SIZE,
    *,
    max_dimension: int = PALETTE_MAX_DIMENSION,
    stride: int = PALETTE_SAMPLE_STRIDE,
    min_alpha: int = PALETTE_MIN_ALPHA,
    bucket_size: int = PALETTE_BUCKET_SIZE,
    resample: Optional[str] = None,
    debug: bool = False,
) -> PaletteResult:
    """
    Decode, cap to max_dimension, quantize and render the preview PNG.

    Failures are logged and re-raised as PaletteExtractionFailed (raw cause
    chained), except SurfaceUnavailable which propagates as is.
    """
    if palette_size < 1:
        raise ValueError("palette_size must be >= 1")
    if max_dimension < 1:
        raise ValueError("max_dimension must be >= 1")

    t_start = time.perf_counter()
    try:
        image = decode_image(data)
        width, height = capped_size(image.width, image.height, max_dimension)
        pixels = rasterize(
            image, width, height, pillow_resample_from_name(resample or RESAMPLE_DEFAULT)
        )
        image.close()

        colors = quantize_palette(
            pixels,
            palette_size,
            stride=stride,
            min_alpha=min_alpha,
            bucket_size=bucket_size,
        )
        preview = encode(pixels, "image/png")
    except SurfaceUnavailable:
        raise
    except Exception as exc:
        warn(f"palette extraction failed: {exc!r}")
        raise PaletteExtractionFailed() from exc

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Analysed", f"{width}x{height}"),
                    ("Colours", len(colors)),
                    ("Time", format_seconds_compact(time.perf_counter() - t_start)),
                ]
            )
        )

    return PaletteResult(
        colors=colors,
        preview_url=to_data_url(preview, "image/png"),
        width=width,
        height=height,
    )


__all__ = [
    "EMPTY_PALETTE_COLOR",
    "PaletteResult",
    "capped_size",
    "collect_buckets",
    "quantize_palette",
    "extract_palette",
]
