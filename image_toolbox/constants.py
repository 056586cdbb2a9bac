# image_toolbox/constants.py
"""
Tunables used across the project.

- Background matte constants (CORNER_*, MATTE_*)
- Palette quantizer constants (PALETTE_*)
- Encoder and tool defaults (LOSSY_*, FAVICON_*, RESAMPLE_*)
"""
from __future__ import annotations

from typing import Dict, Tuple

# =========================
# Background estimate/matte
# =========================
CORNER_SAMPLE_SIZE: int = 4  # side of the square block read at each corner
CORNER_OPAQUE_ALPHA: int = 200  # corner pixels below this alpha are ignored
MATTE_THRESHOLD: int = 45  # RGB distance under which a pixel is keyed out

BACKGROUND_REMOVAL_MESSAGE: str = (
    "Background removal failed. Please try a different image or simpler background."
)

# =================
# Palette quantizer
# =================
PALETTE_MAX_DIMENSION: int = 400  # longest side of the analysis raster
PALETTE_SAMPLE_STRIDE: int = 10  # take every Nth pixel
PALETTE_MIN_ALPHA: int = 50  # near-transparent samples are skipped
PALETTE_BUCKET_SIZE: int = 24  # RGB grid cell size
PALETTE_DEFAULT_SIZE: int = 6

PALETTE_EXTRACTION_MESSAGE: str = (
    "Palette extraction failed. Please try a different image."
)

# ==============
# Encoder / tools
# ==============
LOSSY_DEFAULT_QUALITY: float = 0.9
COMPRESS_DEFAULT_QUALITY: float = 0.8
COMPRESS_MIN_QUALITY: float = 0.1

FAVICON_SIZES: Tuple[int, ...] = (16, 32, 48, 64, 128, 256)
FAVICON_BACKGROUND: str = "#FFFFFF"

RESAMPLE_DEFAULT: str = "bilinear"

# mime -> (Pillow format, file extension)
MIME_FORMATS: Dict[str, Tuple[str, str]] = {
    "image/png": ("PNG", "png"),
    "image/jpeg": ("JPEG", "jpg"),
    "image/webp": ("WEBP", "webp"),
}
LOSSY_MIME_TYPES: Tuple[str, ...] = ("image/jpeg", "image/webp")

__all__ = [
    "CORNER_SAMPLE_SIZE",
    "CORNER_OPAQUE_ALPHA",
    "MATTE_THRESHOLD",
    "BACKGROUND_REMOVAL_MESSAGE",
    "PALETTE_MAX_DIMENSION",
    "PALETTE_SAMPLE_STRIDE",
    "PALETTE_MIN_ALPHA",
    "PALETTE_BUCKET_SIZE",
    "PALETTE_DEFAULT_SIZE",
    "PALETTE_EXTRACTION_MESSAGE",
    "LOSSY_DEFAULT_QUALITY",
    "COMPRESS_DEFAULT_QUALITY",
    "COMPRESS_MIN_QUALITY",
    "FAVICON_SIZES",
    "FAVICON_BACKGROUND",
    "RESAMPLE_DEFAULT",
    "MIME_FORMATS",
    "LOSSY_MIME_TYPES",
]
