# texture_recolor/utils.py
from __future__ import annotations

"""
Console output helpers for the CLI and the debug paths of the core.

Log lines go to stdout with a short tag ([debug], [warn]); errors go to
stderr. Values in one-line summaries are rendered by format_value.
"""

import sys
from typing import Any, Iterable, Tuple


def format_duration(seconds: float, precise: bool = False) -> str:
    """
    '12.3ms', '4.2s' or '2m 5s'. `precise` keeps milliseconds on the
    seconds form ('4.213s') for per-stage timings.
    """
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        return f"{minutes}m {int(round(seconds - 60 * minutes))}s"
    if seconds >= 1.0:
        return f"{seconds:.3f}s" if precise else f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


def format_percentage(share: float, decimals: int = 1) -> str:
    """0..1 share as '42.0%'."""
    return f"{share * 100.0:.{decimals}f}%"


def format_value(value: Any) -> str:
    """on/off for bools, 1,234 for ints, up to 3 decimals for floats."""
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(pairs: Iterable[Tuple[str, Any]], sep: str = "  ") -> str:
    return sep.join(f"{name}: {format_value(value)}" for name, value in pairs)


# Logging


def enable_line_buffered_stdout() -> None:
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (TypeError, ValueError):
            pass


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """'[regions] Regions: 3  Sharpness: 0.8  Hard mask: off', as debug when `debug`."""
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    print(message, flush=True)


def debug_log(message: str) -> None:
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_duration",
    "format_percentage",
    "format_value",
    "key_value_pairs_to_string",
    "enable_line_buffered_stdout",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
