# image_toolbox/image_io.py
from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .constants import LOSSY_DEFAULT_QUALITY, LOSSY_MIME_TYPES, MIME_FORMATS
from .core_types import U8Image, assert_u8_rgba, clamp_value
from .errors import (
    DecodeError,
    EncodeError,
    FileAccessError,
    SurfaceUnavailable,
    UnsupportedFormat,
)

"""
Raster I/O: bytes -> RGBA image (sRGB), image -> RGBA pixel buffer,
pixel buffer -> PNG/JPEG/WEBP bytes, and data-URL helpers.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except Exception:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def pillow_resample_from_name(name: str) -> int:
    """Map a string to a Pillow resampling filter enum."""
    if name == "nearest":
        return Image.Resampling.NEAREST
    if name == "bilinear":
        return Image.Resampling.BILINEAR
    if name == "bicubic":
        return Image.Resampling.BICUBIC
    if name == "lanczos":
        return Image.Resampling.LANCZOS
    return Image.Resampling.BILINEAR  # default


def sniff_mime_type(data: bytes) -> str:
    """Best-effort MIME type from magic bytes; 'application/octet-stream' if unknown."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if data.startswith(b"BM"):
        return "image/bmp"
    head = data[:256].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "image/svg+xml"
    return "application/octet-stream"


def extension_for(mime_type: str) -> str:
    """File extension (no dot) for a supported output MIME type."""
    try:
        return MIME_FORMATS[mime_type][1]
    except KeyError:
        raise UnsupportedFormat(f"unsupported output type: {mime_type}") from None


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except Exception:
            # broken or unsupported profile: keep the raw pixels
            return im.convert("RGBA")

    return im.convert("RGBA")


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raster bytes into a detached RGBA image in sRGB.

    Raises:
      UnsupportedFormat: bytes are not a raster format Pillow can read (incl. SVG).
      DecodeError: format recognised but the data is corrupt or truncated.
    """
    if sniff_mime_type(data) == "image/svg+xml":
        raise UnsupportedFormat("SVG input is not supported")
    try:
        with Image.open(io.BytesIO(data)) as im0:
            im0.load()
            return _convert_to_srgb_rgba(im0)
    except UnidentifiedImageError as exc:
        raise UnsupportedFormat(f"not a supported raster image: {exc}") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(str(exc)) from exc
    except (OSError, ValueError, SyntaxError) as exc:
        raise DecodeError(f"failed to decode image: {exc}") from exc


def rasterize(
    image: Image.Image,
    width: Optional[int] = None,
    height: Optional[int] = None,
    resample: int = Image.Resampling.BILINEAR,
) -> U8Image:
    """
    Render `image` into a fresh, writable (H, W, 4) uint8 buffer.

    The image is resized when (width, height) differs from its own size.
    """
    dst_w = image.width if width is None else int(width)
    dst_h = image.height if height is None else int(height)
    if dst_w <= 0 or dst_h <= 0:
        raise ValueError(f"invalid raster size {dst_w}x{dst_h}")
    try:
        im = image if image.mode == "RGBA" else image.convert("RGBA")
        if im.size != (dst_w, dst_h):
            im = im.resize((dst_w, dst_h), resample=resample)
        return np.array(im, dtype=np.uint8)
    except MemoryError as exc:
        raise SurfaceUnavailable(
            f"cannot allocate a {dst_w}x{dst_h} raster surface"
        ) from exc


def _flatten_on_black(pixels: U8Image) -> np.ndarray:
    """Composite RGBA over opaque black, as a canvas does for JPEG export."""
    alpha = pixels[..., 3:4].astype(np.uint16)
    rgb = (pixels[..., :3].astype(np.uint16) * alpha + 127) // 255
    return rgb.astype(np.uint8)


def encode(
    pixels: U8Image, mime_type: str = "image/png", quality: Optional[float] = None
) -> bytes:
    """
    Serialise an RGBA buffer. `quality` in [0, 1] applies to JPEG/WEBP only
    (default LOSSY_DEFAULT_QUALITY).
    """
    assert_u8_rgba(pixels)
    if mime_type not in MIME_FORMATS:
        raise UnsupportedFormat(f"unsupported output type: {mime_type}")
    pil_format = MIME_FORMATS[mime_type][0]

    params = {}
    if mime_type in LOSSY_MIME_TYPES:
        q = LOSSY_DEFAULT_QUALITY if quality is None else float(quality)
        params["quality"] = int(round(clamp_value(q, 0.0, 1.0) * 100))

    if mime_type == "image/jpeg":
        im = Image.fromarray(_flatten_on_black(pixels))
    else:
        im = Image.fromarray(np.ascontiguousarray(pixels))

    buf = io.BytesIO()
    try:
        im.save(buf, format=pil_format, **params)
    except (OSError, KeyError, ValueError) as exc:
        raise EncodeError(f"failed to encode {mime_type}: {exc}") from exc
    return buf.getvalue()


def to_data_url(data: bytes, mime_type: Optional[str] = None) -> str:
    """Wrap bytes as a base64 data URL; the MIME type is sniffed when omitted."""
    mime = mime_type or sniff_mime_type(data)
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def load_bytes(path: Path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileAccessError(f"cannot read {path}: {exc.strerror or exc}") from exc


def save_bytes(path: Path, data: bytes) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise FileAccessError(f"cannot write {path}: {exc.strerror or exc}") from exc
    return path


__all__ = [
    "pillow_resample_from_name",
    "sniff_mime_type",
    "extension_for",
    "decode_image",
    "rasterize",
    "encode",
    "to_data_url",
    "load_bytes",
    "save_bytes",
]
