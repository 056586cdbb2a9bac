# image_toolbox/transforms.py
from __future__ import annotations

"""
Whole-image raster tools: resize, compress, format conversion and favicon sets.

Each tool decodes its input once, renders into a fresh RGBA buffer and encodes
the result. Errors are the raster I/O ones (UnsupportedFormat, DecodeError,
EncodeError, SurfaceUnavailable) plus ValueError for bad arguments.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from .constants import (
    COMPRESS_DEFAULT_QUALITY,
    COMPRESS_MIN_QUALITY,
    FAVICON_BACKGROUND,
    FAVICON_SIZES,
    LOSSY_DEFAULT_QUALITY,
    LOSSY_MIME_TYPES,
    MIME_FORMATS,
)
from .core_types import clamp_value, hex_to_rgb, round_half_up
from .errors import UnsupportedFormat
from .image_io import (
    decode_image,
    encode,
    extension_for,
    rasterize,
    sniff_mime_type,
    to_data_url,
)


@dataclass(frozen=True)
class ResizeResult:
    data: bytes
    url: str
    width: int
    height: int
    mime_type: str


@dataclass(frozen=True)
class CompressionResult:
    data: bytes
    url: str
    width: int
    height: int
    original_size: int
    compressed_size: int
    mime_type: str


@dataclass(frozen=True)
class FormatConvertResult:
    data: bytes
    url: str
    mime_type: str
    extension: str


@dataclass(frozen=True)
class FaviconResult:
    size: int
    data: bytes
    url: str


# Sizing


def fit_dimensions(
    width: int,
    height: int,
    target_width: Optional[int],
    target_height: Optional[int],
    preserve_aspect_ratio: bool,
) -> Tuple[int, int]:
    """
    Resolve requested resize dimensions.

    Missing sides fall back to the original size. With aspect preservation a
    single given side derives the other; two given sides fit inside that box.
    """
    out_w = target_width or width
    out_h = target_height or height
    if not preserve_aspect_ratio:
        return out_w, out_h

    aspect = width / float(height)
    if target_width and not target_height:
        out_h = round_half_up(out_w / aspect)
    elif target_height and not target_width:
        out_w = round_half_up(out_h * aspect)
    elif target_width and target_height:
        if out_w / float(out_h) > aspect:
            out_w = round_half_up(out_h * aspect)
        else:
            out_h = round_half_up(out_w / aspect)
    return max(1, out_w), max(1, out_h)


def bounded_dimensions(
    width: int, height: int, max_width: Optional[int], max_height: Optional[int]
) -> Tuple[int, int]:
    """Shrink to max_width first, then to max_height; never enlarges."""
    w, h = float(width), float(height)
    if max_width and w > max_width:
        ratio = max_width / w
        w, h = round_half_up(w * ratio), round_half_up(h * ratio)
    if max_height and h > max_height:
        ratio = max_height / float(h)
        w, h = round_half_up(w * ratio), round_half_up(h * ratio)
    return max(1, int(w)), max(1, int(h))


# Tools


def resize_image(
    data: bytes,
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
    preserve_aspect_ratio: bool = True,
    mime_type: str = "image/png",
) -> ResizeResult:
    if mime_type not in ("image/png", "image/jpeg"):
        raise UnsupportedFormat(f"resize output must be PNG or JPEG, got {mime_type}")
    image = decode_image(data)
    out_w, out_h = fit_dimensions(
        image.width, image.height, width, height, preserve_aspect_ratio
    )
    pixels = rasterize(image, out_w, out_h, Image.Resampling.LANCZOS)
    image.close()
    quality = LOSSY_DEFAULT_QUALITY if mime_type == "image/jpeg" else None
    out = encode(pixels, mime_type, quality)
    return ResizeResult(out, to_data_url(out, mime_type), out_w, out_h, mime_type)


def compress_image(
    data: bytes,
    *,
    quality: float = COMPRESS_DEFAULT_QUALITY,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    mime_type: str = "image/jpeg",
) -> CompressionResult:
    """Re-encode as lossy JPEG/WEBP with quality clamped to [0.1, 1]."""
    if mime_type not in LOSSY_MIME_TYPES:
        raise UnsupportedFormat(f"compression needs JPEG or WEBP output, got {mime_type}")
    image = decode_image(data)
    out_w, out_h = bounded_dimensions(image.width, image.height, max_width, max_height)
    pixels = rasterize(image, out_w, out_h, Image.Resampling.LANCZOS)
    image.close()

    safe_quality = clamp_value(float(quality), COMPRESS_MIN_QUALITY, 1.0)
    out = encode(pixels, mime_type, safe_quality)
    return CompressionResult(
        data=out,
        url=to_data_url(out, mime_type),
        width=out_w,
        height=out_h,
        original_size=len(data),
        compressed_size=len(out),
        mime_type=mime_type,
    )


def convert_format(
    data: bytes, target: str, *, quality: Optional[float] = None
) -> FormatConvertResult:
    """Convert to PNG, JPEG or WEBP at native size. SVG input is rejected."""
    if target not in MIME_FORMATS:
        raise UnsupportedFormat(f"unsupported target format: {target}")
    if sniff_mime_type(data) == "image/svg+xml":
        raise UnsupportedFormat("SVG conversion is not supported yet.")

    image = decode_image(data)
    pixels = rasterize(image)
    image.close()

    q: Optional[float] = None
    if target in LOSSY_MIME_TYPES:
        q = LOSSY_DEFAULT_QUALITY if quality is None else clamp_value(quality, 0.0, 1.0)
    out = encode(pixels, target, q)
    return FormatConvertResult(out, to_data_url(out, target), target, extension_for(target))


def _render_favicon(
    image: Image.Image, size: int, padding: float, background: Tuple[int, int, int]
) -> np.ndarray:
    canvas = np.zeros((size, size, 4), dtype=np.uint8)
    canvas[..., :3] = background
    canvas[..., 3] = 255

    # padding ring keeps the background, the inner square starts transparent
    pad = round_half_up(padding)
    canvas[pad : size - pad, pad : size - pad] = 0

    inner = size - 2.0 * padding
    if inner <= 0:
        return canvas

    ratio = min(inner / image.width, inner / image.height)
    render_w = max(1, round_half_up(image.width * ratio))
    render_h = max(1, round_half_up(image.height * ratio))
    offset_x = round_half_up((size - render_w) / 2.0)
    offset_y = round_half_up((size - render_h) / 2.0)

    scaled = rasterize(image, render_w, render_h, Image.Resampling.LANCZOS)
    out = Image.fromarray(canvas)
    out.alpha_composite(Image.fromarray(scaled), dest=(offset_x, offset_y))
    return np.array(out, dtype=np.uint8)


def generate_favicons(
    data: bytes,
    *,
    sizes: Sequence[int] = FAVICON_SIZES,
    background_color: str = FAVICON_BACKGROUND,
    padding: float = 0,
) -> List[FaviconResult]:
    """One square PNG per size: background ring of `padding` px, image fitted and centred."""
    if not sizes:
        raise ValueError("at least one favicon size is required")
    if any(int(s) < 1 for s in sizes):
        raise ValueError("favicon sizes must be >= 1")
    background = hex_to_rgb(background_color)

    image = decode_image(data)
    results: List[FaviconResult] = []
    try:
        for size in sizes:
            size = int(size)
            pad = clamp_value(float(padding), 0.0, size / 2.0)
            pixels = _render_favicon(image, size, pad, background)
            out = encode(pixels, "image/png")
            results.append(FaviconResult(size, out, to_data_url(out, "image/png")))
    finally:
        image.close()
    return results


__all__ = [
    "ResizeResult",
    "CompressionResult",
    "FormatConvertResult",
    "FaviconResult",
    "fit_dimensions",
    "bounded_dimensions",
    "resize_image",
    "compress_image",
    "convert_format",
    "generate_favicons",
]
