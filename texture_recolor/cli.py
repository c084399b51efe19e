# texture_recolor/cli.py
"""
Recolour RGBA textures toward chosen target colours.

Usage:
  texture-recolor INPUT [--outdir DIR] --mode [global|regions|replace] [options] [--debug]

Modes:
  global  : shift the whole image so its dominant colour lands on --target.
  regions : detect 2-4 colour regions, print them, and recolour the regions
            given with --region-target ID=HEX (soft or --hard-mask blending).
  replace : recolour pixels near sampled colours, --replace SRC=TARGET[@TOL].

Input:
  Any Pillow-readable image, or a folder of png/jpg/jpeg/webp images.
  Alpha is preserved; pixels with alpha < 128 are never analysed.

Output:
  PNG. Writes <stem>_recolor.png next to INPUT unless --outdir is given.
  --save-masks also writes one mask preview per region or replacement.
"""

from __future__ import annotations

import argparse
import io
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from contextlib import redirect_stdout
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .composite import apply_multi_region_adjustment
from .constants import (
    REGION_COUNT_DEFAULT,
    REGION_COUNT_MAX,
    REGION_COUNT_MIN,
    SELECTION_MASK_BACKGROUND,
    SELECTION_MASK_COLOUR,
    TOLERANCE_DEFAULT,
)
from .core_types import (
    ColorReplacement,
    PixelBuffer,
    UnknownRegionError,
    clamp_value,
    is_hex_colour,
    rgb_to_hex,
)
from .dominant import apply_global_adjustment, get_dominant_color
from .image_io import load_image, save_image
from .masks import generate_region_masks, generate_selection_mask, visualize_mask
from .regions import assign_region_targets, centroid_to_hex, detect_color_regions, region_share
from .selection import apply_replacements, calculate_average_source_color
from .utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_duration,
    format_percentage,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)

OUTPUT_TAG = "_recolor"
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp"}


# CLI args & small helpers


def _hex_arg(value: str) -> str:
    if not is_hex_colour(value):
        raise argparse.ArgumentTypeError(f"not a hex colour: {value!r}")
    return value if value.startswith("#") else f"#{value}"


def _region_target_arg(value: str) -> Tuple[str, str]:
    """'region-0=#ff8800' -> ('region-0', '#ff8800')."""
    region_id, sep, hex_str = value.partition("=")
    if not sep or not region_id:
        raise argparse.ArgumentTypeError(f"expected ID=HEX, got {value!r}")
    return region_id.strip(), _hex_arg(hex_str.strip())


def _replacement_arg(value: str) -> Tuple[str, str, Optional[float]]:
    """'#aabbcc=#112233@40' -> ('#aabbcc', '#112233', 40.0); '@TOL' is optional."""
    pair, _at, tol_text = value.partition("@")
    source, sep, target = pair.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected SRC=TARGET[@TOL], got {value!r}")
    tolerance: Optional[float] = None
    if tol_text:
        try:
            tolerance = float(tol_text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"bad tolerance in {value!r}") from None
    return _hex_arg(source.strip()), _hex_arg(target.strip()), tolerance


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texture-recolor",
        description="Recolour texture image(s) by dominant colour, detected regions, or sampled colours.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "--mode",
        choices=["global", "regions", "replace"],
        default="regions",
        help="Recolouring mode.",
    )
    parser.add_argument(
        "--target", type=_hex_arg, default=None, help="Global mode target colour"
    )
    parser.add_argument(
        "--regions",
        type=int,
        default=REGION_COUNT_DEFAULT,
        help=f"Regions to detect ({REGION_COUNT_MIN}-{REGION_COUNT_MAX})",
    )
    parser.add_argument(
        "--region-target",
        type=_region_target_arg,
        action="append",
        default=[],
        metavar="ID=HEX",
        help="Target colour for a detected region, e.g. region-0=#aa5522",
    )
    parser.add_argument(
        "--sharpness",
        type=float,
        default=80.0,
        help="Soft mask sharpness 0-100 (higher = sharper region edges)",
    )
    parser.add_argument(
        "--hard-mask", action="store_true", help="Assign each pixel to one region only"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for region detection"
    )
    parser.add_argument(
        "--replace",
        type=_replacement_arg,
        action="append",
        default=[],
        metavar="SRC=TARGET[@TOL]",
        help="Sampled colour replacement; repeatable",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=TOLERANCE_DEFAULT,
        help="Default replacement tolerance 0-100",
    )
    parser.add_argument(
        "--save-masks", action="store_true", help="Also write mask previews"
    )
    parser.add_argument(
        "--jobs", type=int, default=1, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse and cross-check CLI arguments.

    Returns:
      argparse.Namespace; sharpness is already mapped to 0..1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.mode == "global" and args.target is None:
        parser.error("--mode global needs --target")
    if args.mode == "replace" and not args.replace:
        parser.error("--mode replace needs at least one --replace")
    args.sharpness = clamp_value(args.sharpness, 0.0, 100.0) / 100.0
    return args


def _replacements_from_args(args: argparse.Namespace) -> List[ColorReplacement]:
    return [
        ColorReplacement(
            id=f"replacement-{i}",
            source_color=source,
            target_color=target,
            tolerance=clamp_value(
                args.tolerance if tolerance is None else tolerance, 0.0, 100.0
            ),
        )
        for i, (source, target, tolerance) in enumerate(args.replace)
    ]


def _mask_path(out_path: Path, label: str) -> Path:
    return out_path.with_name(f"{out_path.stem}_mask_{label}.png")


# Per-mode processing


def _run_global(buffer: PixelBuffer, args: argparse.Namespace) -> PixelBuffer:
    dominant = get_dominant_color(buffer)
    log(f"Dominant colour: {rgb_to_hex(dominant)}  ->  {args.target}")
    return apply_global_adjustment(buffer, args.target, debug=args.debug)


def _run_regions(
    buffer: PixelBuffer, args: argparse.Namespace, out_path: Path
) -> PixelBuffer:
    print_config_line(
        "regions",
        [
            ("Regions", args.regions),
            ("Sharpness", args.sharpness),
            ("Hard mask", bool(args.hard_mask)),
            ("Seed", "-" if args.seed is None else args.seed),
        ],
        debug=args.debug,
    )
    regions = detect_color_regions(
        buffer, args.regions, seed=args.seed, debug=args.debug
    )
    if not regions:
        log("No opaque pixels; nothing to recolour.")
        return buffer.copy()

    shares = region_share(regions)
    log("Regions:")
    for region in regions:
        log(
            f"  {region.id}  {centroid_to_hex(region.centroid_hsl)}  {region.name}: "
            f"samples={region.pixel_count:,}  share={format_percentage(shares[region.id])}"
        )

    regions = assign_region_targets(regions, dict(args.region_target))

    if args.save_masks:
        masks = generate_region_masks(buffer, regions, args.sharpness, args.hard_mask)
        for region_id, mask in masks.items():
            path = save_image(
                _mask_path(out_path, region_id),
                visualize_mask(mask, buffer.width, buffer.height),
            )
            log(f"Wrote {path.name}")

    return apply_multi_region_adjustment(
        buffer, regions, args.sharpness, args.hard_mask, debug=args.debug
    )


def _run_replace(
    buffer: PixelBuffer, args: argparse.Namespace, out_path: Path
) -> PixelBuffer:
    replacements = _replacements_from_args(args)
    for r in replacements:
        avg = calculate_average_source_color(buffer, r.source_color, r.tolerance)
        log(
            f"  {r.id}  {r.source_color} -> {r.target_color}  "
            f"tolerance={r.tolerance:g}  selection avg={centroid_to_hex(avg.as_tuple())}"
        )
        if args.save_masks:
            mask = generate_selection_mask(buffer, r.source_color, r.tolerance)
            path = save_image(
                _mask_path(out_path, r.id),
                visualize_mask(
                    mask,
                    buffer.width,
                    buffer.height,
                    SELECTION_MASK_COLOUR,
                    SELECTION_MASK_BACKGROUND,
                ),
            )
            log(f"Wrote {path.name}")
    return apply_replacements(buffer, replacements, debug=args.debug)


def _process_single_image(
    src_path: Path, out_path: Optional[Path], args: argparse.Namespace
) -> bool:
    """
    Process a single image end-to-end: load -> recolour -> save -> report.
    Returns False when the run for this file failed.
    """
    t_start = time.perf_counter()
    if out_path is None:
        out_path = src_path.with_name(f"{src_path.stem}{OUTPUT_TAG}.png")

    print_banner(src_path.name)

    try:
        buffer = load_image(src_path)
    except Exception as e:
        error(f"cannot read {src_path.name}: {e}")
        return False
    t_loaded = time.perf_counter()

    if args.debug:
        visible = int(buffer.opaque_mask().sum())
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{buffer.width}x{buffer.height}"),
                    ("Analysed pixels", visible),
                    ("Mode", args.mode),
                ]
            )
        )

    try:
        if args.mode == "global":
            result = _run_global(buffer, args)
        elif args.mode == "replace":
            result = _run_replace(buffer, args, out_path)
        else:
            result = _run_regions(buffer, args, out_path)
    except UnknownRegionError as e:
        error(f"{src_path.name}: {e.args[0]}")
        return False
    except Exception as e:
        error(f"{src_path.name}: recolour failed: {e}")
        return False
    t_recoloured = time.perf_counter()

    try:
        path = save_image(out_path, result)
    except (OSError, ValueError) as e:
        error(f"cannot write {out_path.name}: {e}")
        return False
    t_saved = time.perf_counter()

    log(f"Wrote {path.name} | size={buffer.width}x{buffer.height} | mode={args.mode}")
    if args.debug:
        debug_log(
            f"Total {format_duration(t_saved - t_start)}  "
            f"(load={format_duration(t_loaded - t_start, precise=True)}, "
            f"recolour={format_duration(t_recoloured - t_loaded, precise=True)}, "
            f"save={format_duration(t_saved - t_recoloured, precise=True)})"
        )
    else:
        log(f"Total time {format_duration(t_saved - t_start)}")
    return True


def _output_for(path: Path, outdir: Optional[Path]) -> Optional[Path]:
    return (outdir / f"{path.stem}{OUTPUT_TAG}.png") if outdir else None


def _process_one_captured(
    path: Path, args: argparse.Namespace
) -> Tuple[bool, str, str]:
    """
    Process a single file with stdout/stderr capture.

    Runs in a worker process so output can be printed in order afterwards.
    """
    out_buf = io.StringIO()
    err_buf = io.StringIO()
    with redirect_stdout(out_buf):
        old_err, sys.stderr = sys.stderr, err_buf
        try:
            ok = _process_single_image(path, _output_for(path, args.outdir), args)
        finally:
            sys.stderr = old_err
    return ok, out_buf.getvalue(), err_buf.getvalue()


def _is_output_artifact(path: Path) -> bool:
    """Recoloured image or mask preview written by an earlier run."""
    stem = path.stem
    return stem.endswith(OUTPUT_TAG) or f"{OUTPUT_TAG}_mask_" in stem


def _collect_folder(src: Path) -> List[Path]:
    files = [
        p
        for p in src.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not _is_output_artifact(p)
    ]
    files.sort(key=lambda p: p.name.lower())
    return files


# Entry point


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file or a folder. In folder mode supports --jobs
    parallelism while keeping output in file order. Returns the exit code.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2
    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)

    if not src.is_dir():
        return 0 if _process_single_image(src, _output_for(src, args.outdir), args) else 1

    files = _collect_folder(src)
    print_config_line(
        "run", [("Images", len(files)), ("Jobs", args.jobs)], debug=args.debug
    )

    results: List[bool] = []
    if args.jobs <= 1 or len(files) <= 1:
        for p in files:
            results.append(_process_single_image(p, _output_for(p, args.outdir), args))
    else:
        with ProcessPoolExecutor(max_workers=args.jobs) as ex:
            futures = [ex.submit(_process_one_captured, p, args) for p in files]
            for p, fu in zip(files, futures):
                try:
                    ok, out_text, err_text = fu.result()
                except Exception as e:
                    error(f"{p.name}: worker failed: {e}")
                    results.append(False)
                    continue
                print(out_text, end="", flush=True)
                if err_text:
                    print(err_text, end="", file=sys.stderr, flush=True)
                results.append(ok)

    failed = results.count(False)
    if failed:
        error(f"{failed} of {len(results)} image(s) failed")
        return 1
    return 0


__all__ = ["build_parser", "parse_cli_args", "main"]
