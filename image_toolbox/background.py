# image_toolbox/background.py
from __future__ import annotations

"""
Colour-key background removal.

Samples the four corners of the image to estimate a dominant background colour,
then makes every pixel within MATTE_THRESHOLD (RGB distance) of it transparent.
Works for solid or near-uniform backgrounds only; there is no soft edge and no
segmentation model.

Exports:
- sample_corner(pixels, x, y, *, sample_size, opaque_alpha) -> RGBTuple
- estimate_background_color(pixels, *, sample_size, opaque_alpha) -> RGBTuple
- apply_color_key(pixels, background, *, threshold) -> int
- remove_background(data, *, threshold, sample_size, opaque_alpha, debug) -> BackgroundRemovalResult
"""

import time
from dataclasses import dataclass

import numpy as np

from .constants import CORNER_OPAQUE_ALPHA, CORNER_SAMPLE_SIZE, MATTE_THRESHOLD
from .core_types import RGBTuple, U8Image, assert_u8_rgba, rgb_to_hex
from .errors import BackgroundRemovalFailed, InvalidImageDimensions, SurfaceUnavailable
from .image_io import decode_image, encode, rasterize, sniff_mime_type, to_data_url
from .pixel_ops import average_colors, color_distance_sq, mean_rgb
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string, warn


@dataclass(frozen=True)
class BackgroundRemovalResult:
    original_url: str
    processed_url: str
    processed: bytes  # PNG
    background: RGBTuple
    width: int
    height: int
    keyed_pixels: int


def _check_dimensions(pixels: U8Image) -> None:
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        raise InvalidImageDimensions(width, height)


def sample_corner(
    pixels: U8Image,
    x: int,
    y: int,
    *,
    sample_size: int = CORNER_SAMPLE_SIZE,
    opaque_alpha: int = CORNER_OPAQUE_ALPHA,
) -> RGBTuple:
    """
    Mean colour of the block at (x, y) sized min(sample_size, W) x min(sample_size, H).

    Only pixels with alpha >= opaque_alpha count. If none qualify the raw colour
    of the block's first pixel is returned instead.
    """
    height, width = pixels.shape[:2]
    block_w = min(sample_size, width)
    block_h = min(sample_size, height)
    block = pixels[y : y + block_h, x : x + block_w].reshape(-1, 4)
    if block.shape[0] == 0:
        raise ValueError(f"corner anchor {(x, y)} is outside a {width}x{height} buffer")

    opaque = block[block[:, 3] >= opaque_alpha]
    if opaque.shape[0] == 0:
        first = block[0]
        return (int(first[0]), int(first[1]), int(first[2]))
    return mean_rgb(opaque)


def estimate_background_color(
    pixels: U8Image,
    *,
    sample_size: int = CORNER_SAMPLE_SIZE,
    opaque_alpha: int = CORNER_OPAQUE_ALPHA,
) -> RGBTuple:
    """Unweighted mean of the four corner samples (TL, TR, BL, BR)."""
    assert_u8_rgba(pixels)
    _check_dimensions(pixels)
    if sample_size <= 0:
        raise ValueError("sample_size must be positive")

    height, width = pixels.shape[:2]
    right = max(width - sample_size, 0)
    bottom = max(height - sample_size, 0)
    corners = [
        sample_corner(pixels, x, y, sample_size=sample_size, opaque_alpha=opaque_alpha)
        for x, y in ((0, 0), (right, 0), (0, bottom), (right, bottom))
    ]
    return average_colors(corners)


def apply_color_key(
    pixels: U8Image, background: RGBTuple, *, threshold: float = MATTE_THRESHOLD
) -> int:
    """
    Zero the alpha of every visible pixel closer than `threshold` to `background`.

    Mutates `pixels` in place and returns how many pixels were keyed out.
    Pixels that are already fully transparent are left alone.
    """
    assert_u8_rgba(pixels)
    alpha = pixels[..., 3]  # view
    dist2 = color_distance_sq(pixels, background)
    keyed = (alpha != 0) & (dist2 < float(threshold) * float(threshold))
    alpha[keyed] = 0
    return int(np.count_nonzero(keyed))


def remove_background(
    data: bytes,
    *,
    threshold: float = MATTE_THRESHOLD,
    sample_size: int = CORNER_SAMPLE_SIZE,
    opaque_alpha: int = CORNER_OPAQUE_ALPHA,
    debug: bool = False,
) -> BackgroundRemovalResult:
    """
    Decode -> estimate background -> colour-key matte -> PNG.

    All or nothing: any failure is logged and re-raised as BackgroundRemovalFailed
    (raw cause chained), except SurfaceUnavailable which propagates as is.
    """
    t_start = time.perf_counter()
    try:
        image = decode_image(data)
        width, height = image.size
        if not width or not height:
            raise InvalidImageDimensions(width, height)

        pixels = rasterize(image, width, height)
        image.close()

        background = estimate_background_color(
            pixels, sample_size=sample_size, opaque_alpha=opaque_alpha
        )
        keyed = apply_color_key(pixels, background, threshold=threshold)
        processed = encode(pixels, "image/png")
    except SurfaceUnavailable:
        raise
    except Exception as exc:
        warn(f"background removal failed: {exc!r}")
        raise BackgroundRemovalFailed() from exc

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Size", f"{width}x{height}"),
                    ("Background", rgb_to_hex(background)),
                    ("Keyed", keyed),
                    ("Share", f"{keyed / float(width * height):.1%}"),
                    ("Time", format_seconds_compact(time.perf_counter() - t_start)),
                ]
            )
        )

    return BackgroundRemovalResult(
        original_url=to_data_url(data, sniff_mime_type(data)),
        processed_url=to_data_url(processed, "image/png"),
        processed=processed,
        background=background,
        width=width,
        height=height,
        keyed_pixels=keyed,
    )


__all__ = [
    "BackgroundRemovalResult",
    "sample_corner",
    "estimate_background_color",
    "apply_color_key",
    "remove_background",
]
