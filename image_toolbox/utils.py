# image_toolbox/utils.py
from __future__ import annotations

"""
Shared utilities for image_toolbox.

Compact duration / size formatting and tidy print-based logging used by the
tools and the CLI.
"""

import sys
from typing import Any, Iterable, List, Tuple


#  Time / size formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_bytes_compact(size: int) -> str:
    """Byte count as 'N B', 'N.N KB' or 'N.N MB'."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024.0:.1f} KB"
    return f"{size / (1024.0 * 1024.0):.1f} MB"


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """Format (name, value) pairs as 'Name: value' blocks separated by sep."""
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [palette] Colours: 8  Cap: 400  Stride: 10  Bucket: 24
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "format_bytes_compact",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
