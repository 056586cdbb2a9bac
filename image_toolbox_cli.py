#!/usr/bin/env python3
"""
image_toolbox_cli.py
Local image utilities on the command line.

Usage:
  python image_toolbox_cli.py remove-bg INPUT [--threshold T] [--outdir DIR] [--debug]
  python image_toolbox_cli.py palette   INPUT [--colors K] [--json] [--outdir DIR]
  python image_toolbox_cli.py resize    INPUT [--width W] [--height H] [--no-aspect] [--format png|jpeg]
  python image_toolbox_cli.py compress  INPUT [--quality Q] [--max-width W] [--max-height H] [--format jpeg|webp]
  python image_toolbox_cli.py convert   INPUT --to png|jpeg|webp [--quality Q]
  python image_toolbox_cli.py favicon   INPUT [--sizes 16,32,48] [--background #RRGGBB] [--padding P]

Input:
  An image file or a folder. Folders are processed one file at a time; a file
  that fails is reported and the run continues.

Output:
  Written next to INPUT (or into --outdir) as <stem>_<tool>.<ext>.

Exit codes:
  0 all files succeeded, 1 at least one file failed, 2 INPUT not found.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from image_toolbox.background import remove_background
from image_toolbox.batch import BatchItem, run_sequential
from image_toolbox.constants import (
    COMPRESS_DEFAULT_QUALITY,
    CORNER_OPAQUE_ALPHA,
    CORNER_SAMPLE_SIZE,
    FAVICON_BACKGROUND,
    FAVICON_SIZES,
    MATTE_THRESHOLD,
    PALETTE_BUCKET_SIZE,
    PALETTE_DEFAULT_SIZE,
    PALETTE_MAX_DIMENSION,
    PALETTE_MIN_ALPHA,
    PALETTE_SAMPLE_STRIDE,
    RESAMPLE_DEFAULT,
)
from image_toolbox.core_types import hex_to_rgb, rgb_to_hex
from image_toolbox.errors import SurfaceUnavailable
from image_toolbox.image_io import extension_for, load_bytes, save_bytes
from image_toolbox.palette import extract_palette
from image_toolbox.transforms import (
    compress_image,
    convert_format,
    generate_favicons,
    resize_image,
)
from image_toolbox.utils import (
    debug_log,
    error,
    format_bytes_compact,
    format_seconds_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}
OUTPUT_SUFFIXES = ("_nobg", "_resized", "_compressed", "_converted")

FORMAT_MIME = {"png": "image/png", "jpeg": "image/jpeg", "jpg": "image/jpeg", "webp": "image/webp"}


# CLI args & small helpers


def _parse_sizes(text: str) -> List[int]:
    try:
        sizes = [int(part) for part in text.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid size list: {text!r}") from None
    if not sizes or any(s < 1 for s in sizes):
        raise argparse.ArgumentTypeError("sizes must be positive integers")
    return sizes


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _hex_colour(text: str) -> str:
    try:
        hex_to_rgb(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None
    return text


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with the common fields
        command: tool name
        src: Path to image or folder
        outdir: optional Path for outputs
        debug: bool for verbose details
      plus the chosen tool's own options.
    """
    parser = argparse.ArgumentParser(
        prog="image_toolbox",
        description="Local image utilities with tidy, readable output.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("src", type=Path, help="Input image or folder")
    common.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    common.add_argument("--debug", action="store_true", help="Verbose details")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("remove-bg", parents=[common], help="Colour-key background removal")
    p.add_argument(
        "--threshold",
        type=float,
        default=MATTE_THRESHOLD,
        help="RGB distance below which a pixel counts as background.",
    )
    p.add_argument(
        "--corner", type=_positive_int, default=CORNER_SAMPLE_SIZE, help="Corner sample size (px)"
    )
    p.add_argument(
        "--opaque-alpha",
        type=int,
        default=CORNER_OPAQUE_ALPHA,
        help="Corner pixels below this alpha are ignored.",
    )

    p = sub.add_parser("palette", parents=[common], help="Dominant colour palette")
    p.add_argument("--colors", type=_positive_int, default=PALETTE_DEFAULT_SIZE, help="Palette size")
    p.add_argument(
        "--max-dimension",
        type=_positive_int,
        default=PALETTE_MAX_DIMENSION,
        help="Longest side of the analysis raster.",
    )
    p.add_argument("--stride", type=_positive_int, default=PALETTE_SAMPLE_STRIDE, help="Sample every Nth pixel")
    p.add_argument("--min-alpha", type=int, default=PALETTE_MIN_ALPHA, help="Skip samples below this alpha")
    p.add_argument("--bucket", type=_positive_int, default=PALETTE_BUCKET_SIZE, help="RGB bucket size")
    p.add_argument(
        "--resample",
        choices=["nearest", "bilinear", "bicubic", "lanczos"],
        default=RESAMPLE_DEFAULT,
        help="Scaling filter for the analysis raster.",
    )
    p.add_argument("--json", action="store_true", help="Also write <stem>_palette.json")

    p = sub.add_parser("resize", parents=[common], help="Resize an image")
    p.add_argument("--width", type=_positive_int, default=None)
    p.add_argument("--height", type=_positive_int, default=None)
    p.add_argument("--no-aspect", action="store_true", help="Do not preserve aspect ratio")
    p.add_argument("--format", choices=["png", "jpeg"], default="png")

    p = sub.add_parser("compress", parents=[common], help="Lossy re-encode")
    p.add_argument("--quality", type=float, default=COMPRESS_DEFAULT_QUALITY, help="0.1 - 1.0")
    p.add_argument("--max-width", type=_positive_int, default=None)
    p.add_argument("--max-height", type=_positive_int, default=None)
    p.add_argument("--format", choices=["jpeg", "webp"], default="jpeg")

    p = sub.add_parser("convert", parents=[common], help="Change image format")
    p.add_argument("--to", dest="target", choices=["png", "jpeg", "webp"], required=True)
    p.add_argument("--quality", type=float, default=None, help="0 - 1 for lossy formats")

    p = sub.add_parser("favicon", parents=[common], help="Square favicon set")
    p.add_argument(
        "--sizes",
        type=_parse_sizes,
        default=list(FAVICON_SIZES),
        help="Comma-separated sizes, e.g. 16,32,48",
    )
    p.add_argument("--background", type=_hex_colour, default=FAVICON_BACKGROUND, help="Ring colour #RRGGBB")
    p.add_argument("--padding", type=float, default=0.0, help="Padding in px")

    return parser.parse_args(argv)


def _collect_sources(src: Path) -> List[Path]:
    if not src.is_dir():
        return [src]
    files = [
        p
        for p in src.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(OUTPUT_SUFFIXES)
        and "_favicon_" not in p.stem
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


def _output_path(src: Path, outdir: Optional[Path], suffix: str, ext: str) -> Path:
    base = outdir if outdir is not None else src.parent
    return base / f"{src.stem}{suffix}.{ext}"


# Per-tool processing


def _run_remove_bg(path: Path, args: argparse.Namespace) -> Path:
    result = remove_background(
        load_bytes(path),
        threshold=args.threshold,
        sample_size=args.corner,
        opaque_alpha=args.opaque_alpha,
        debug=args.debug,
    )
    out = save_bytes(_output_path(path, args.outdir, "_nobg", "png"), result.processed)
    log(f"Background {rgb_to_hex(result.background)}")
    log(
        f"Wrote {out.name} | size={result.width}x{result.height} | keyed={result.keyed_pixels:,}"
    )
    return out


def _run_palette(path: Path, args: argparse.Namespace) -> List[str]:
    result = extract_palette(
        load_bytes(path),
        args.colors,
        max_dimension=args.max_dimension,
        stride=args.stride,
        min_alpha=args.min_alpha,
        bucket_size=args.bucket,
        resample=args.resample,
        debug=args.debug,
    )
    log(f"Palette ({len(result.colors)}) from {result.width}x{result.height}:")
    for c in result.colors:
        log(f"  {c.hex}  rgb({c.r}, {c.g}, {c.b})")
    if args.json:
        out = _output_path(path, args.outdir, "_palette", "json")
        payload = {
            "source": path.name,
            "width": result.width,
            "height": result.height,
            "colors": [c.to_dict() for c in result.colors],
        }
        save_bytes(out, json.dumps(payload, indent=2).encode("utf-8"))
        log(f"Wrote {out.name}")
    return [c.hex for c in result.colors]


def _run_resize(path: Path, args: argparse.Namespace) -> Path:
    mime = FORMAT_MIME[args.format]
    result = resize_image(
        load_bytes(path),
        width=args.width,
        height=args.height,
        preserve_aspect_ratio=not args.no_aspect,
        mime_type=mime,
    )
    out = save_bytes(
        _output_path(path, args.outdir, "_resized", extension_for(mime)), result.data
    )
    log(f"Wrote {out.name} | size={result.width}x{result.height}")
    return out


def _run_compress(path: Path, args: argparse.Namespace) -> Path:
    mime = FORMAT_MIME[args.format]
    result = compress_image(
        load_bytes(path),
        quality=args.quality,
        max_width=args.max_width,
        max_height=args.max_height,
        mime_type=mime,
    )
    out = save_bytes(
        _output_path(path, args.outdir, "_compressed", extension_for(mime)), result.data
    )
    saved = 1.0 - (result.compressed_size / float(result.original_size or 1))
    log(
        key_value_pairs_to_string(
            [
                ("Wrote", out.name),
                ("Size", f"{result.width}x{result.height}"),
                ("Before", format_bytes_compact(result.original_size)),
                ("After", format_bytes_compact(result.compressed_size)),
                ("Saved", f"{saved:.1%}"),
            ]
        )
    )
    return out


def _run_convert(path: Path, args: argparse.Namespace) -> Path:
    mime = FORMAT_MIME[args.target]
    result = convert_format(load_bytes(path), mime, quality=args.quality)
    dst = _output_path(path, args.outdir, "", result.extension)
    if dst.resolve() == path.resolve():
        dst = _output_path(path, args.outdir, "_converted", result.extension)
    out = save_bytes(dst, result.data)
    log(f"Wrote {out.name} | type={result.mime_type}")
    return out


def _run_favicon(path: Path, args: argparse.Namespace) -> List[Path]:
    results = generate_favicons(
        load_bytes(path),
        sizes=args.sizes,
        background_color=args.background,
        padding=args.padding,
    )
    outs: List[Path] = []
    for fav in results:
        out = save_bytes(
            _output_path(path, args.outdir, f"_favicon_{fav.size}", "png"), fav.data
        )
        outs.append(out)
        log(f"Wrote {out.name}")
    return outs


TOOLS: Dict[str, Callable[[Path, argparse.Namespace], object]] = {
    "remove-bg": _run_remove_bg,
    "palette": _run_palette,
    "resize": _run_resize,
    "compress": _run_compress,
    "convert": _run_convert,
    "favicon": _run_favicon,
}


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file or a folder; folders are processed strictly in order.
    """
    args = parse_cli_args(argv)
    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    files = _collect_sources(src)
    print_config_line("run", [("Tool", args.command), ("Files", len(files))], debug=False)
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [("Source", str(src)), ("Outdir", str(args.outdir or "-"))]
            )
        )

    tool = TOOLS[args.command]

    def _process(path: Path) -> object:
        print_banner(path.name)
        t0 = time.perf_counter()
        out = tool(path, args)
        if args.debug:
            debug_log(f"done in {format_seconds_compact(time.perf_counter() - t0)}")
        return out

    def _report(item: BatchItem) -> None:
        if not item.ok:
            error(f"{item.source.name}: {item.error}")

    try:
        items = run_sequential(files, _process, on_item=_report)
    except SurfaceUnavailable as exc:
        error(f"aborting: {exc}")
        return 1

    failed = sum(1 for it in items if not it.ok)
    log(f"\nProcessed {len(items)} file(s), {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
