# image_toolbox/__init__.py
"""
image_toolbox package.

Purpose:
  Local image utilities: colour-key background removal, palette extraction,
  resize / compress / format conversion and favicon sets. See
  image_toolbox_cli.py for the CLI.

Public API:
  remove_background : corner-estimated colour-key matte -> PNG.
  extract_palette   : bucketed palette of the dominant colours.
  background        : estimate_background_color, apply_color_key, sample_corner.
  palette           : quantize_palette, collect_buckets, capped_size.
  transforms        : resize_image, compress_image, convert_format, generate_favicons.
  image_io          : decode_image, rasterize, encode, to_data_url.
  batch             : run_sequential for one-at-a-time processing.
  core_types        : shared aliases and value objects (U8Image, PaletteColor, ...).
  errors            : exception taxonomy rooted at ToolboxError.

Quick start:
  from image_toolbox import remove_background, extract_palette
  result = extract_palette(open("photo.jpg", "rb").read(), 8)
  print([c.hex for c in result.colors])
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import constants
from . import core_types
from . import errors
from . import image_io
from . import background
from . import palette
from . import transforms
from . import batch
from . import utils

from .background import remove_background  # noqa: E402,F401
from .palette import extract_palette  # noqa: E402,F401
from .core_types import PaletteColor  # noqa: E402,F401
from .errors import (  # noqa: E402,F401
    BackgroundRemovalFailed,
    PaletteExtractionFailed,
    ToolboxError,
)

__all__ = [
    "__version__",
    "constants",
    "core_types",
    "errors",
    "image_io",
    "background",
    "palette",
    "transforms",
    "batch",
    "utils",
    "remove_background",
    "extract_palette",
    "PaletteColor",
    "BackgroundRemovalFailed",
    "PaletteExtractionFailed",
    "ToolboxError",
]
