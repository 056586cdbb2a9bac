# image_toolbox/errors.py
"""
Exception taxonomy.

  ToolboxError
    InvalidImageDimensions   decoded image has zero width or height
    SurfaceUnavailable       no raster surface could be allocated (fatal for a run)
    RasterIOError
      UnsupportedFormat      bytes are not a raster format we can read or write
      DecodeError            recognised but corrupt or truncated data
      EncodeError            writer failed
      FileAccessError        file could not be read or written
    BackgroundRemovalFailed  user-facing wrapper for remove_background
    PaletteExtractionFailed  user-facing wrapper for extract_palette
"""
from __future__ import annotations

from typing import Optional

from .constants import BACKGROUND_REMOVAL_MESSAGE, PALETTE_EXTRACTION_MESSAGE


class ToolboxError(Exception):
    """Base class for every error raised by image_toolbox."""


class InvalidImageDimensions(ToolboxError, ValueError):
    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"image has invalid dimensions {width}x{height}")
        self.width = width
        self.height = height


class SurfaceUnavailable(ToolboxError, RuntimeError):
    pass


class RasterIOError(ToolboxError):
    pass


class UnsupportedFormat(RasterIOError):
    pass


class DecodeError(RasterIOError):
    pass


class EncodeError(RasterIOError):
    pass


class FileAccessError(RasterIOError):
    pass


class _UserFacingError(ToolboxError):
    """Carries a message that is safe to show; the raw cause stays on __cause__."""

    default_message = "Image processing failed."

    def __init__(self, user_message: Optional[str] = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class BackgroundRemovalFailed(_UserFacingError):
    default_message = BACKGROUND_REMOVAL_MESSAGE


class PaletteExtractionFailed(_UserFacingError):
    default_message = PALETTE_EXTRACTION_MESSAGE


__all__ = [
    "ToolboxError",
    "InvalidImageDimensions",
    "SurfaceUnavailable",
    "RasterIOError",
    "UnsupportedFormat",
    "DecodeError",
    "EncodeError",
    "FileAccessError",
    "BackgroundRemovalFailed",
    "PaletteExtractionFailed",
]
