# texture_recolor/selection.py
from __future__ import annotations

"""
Sampled-colour replacement.

Each ColorReplacement selects pixels near a click-sampled source colour.
The shift is derived from the average colour of that selection rather than
the single sampled pixel, which keeps it stable on noisy textures. Pixels
pick the single closest replacement (no blending between replacements) and
fade toward the original near the tolerance edge.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .colour_convert import (
    circular_mean_degrees,
    hsl_distance,
    hsl_to_rgb_array,
    rgb_to_hsl,
    round_half_up,
)
from .constants import EDGE_BLEND_CURVE
from .core_types import (
    ColorReplacement,
    HexStr,
    HSLColor,
    HSLTuple,
    HslArray,
    PixelBuffer,
    hex_to_rgb,
)
from .masks import buffer_hsl, max_distance_for, selection_strength
from .shift import HslShift, apply_hsl_shift
from .utils import debug_log, key_value_pairs_to_string


def _average_hsl(
    hsl: HslArray, opaque: np.ndarray, source_hsl: np.ndarray, max_distance: float
) -> HSLTuple:
    weight = selection_strength(hsl_distance(hsl, source_hsl[None, :]), max_distance)
    weight = np.where(opaque, weight, 0.0)
    total = float(weight.sum())
    if total == 0.0:
        return (float(source_hsl[0]), float(source_hsl[1]), float(source_hsl[2]))

    # grey pixels have no meaningful hue, so hue is also weighted by saturation
    return (
        circular_mean_degrees(hsl[:, 0], weight * hsl[:, 1]),
        float(np.sum(hsl[:, 1] * weight) / total),
        float(np.sum(hsl[:, 2] * weight) / total),
    )


def calculate_average_source_color(
    buffer: PixelBuffer, source_color: HexStr, tolerance: float
) -> HSLColor:
    """
    Match-weighted average HSL of the pixels selected by `source_color` at
    `tolerance`. Falls back to the sampled colour when nothing matches.
    """
    hsl, opaque = buffer_hsl(buffer)
    source_hsl = np.array(rgb_to_hsl(*hex_to_rgb(source_color)), dtype=np.float64)
    return HSLColor(*_average_hsl(hsl, opaque, source_hsl, max_distance_for(tolerance)))


def _prepare(
    hsl: HslArray, opaque: np.ndarray, replacement: ColorReplacement
) -> Tuple[np.ndarray, HslShift, float]:
    source_hsl = np.array(
        rgb_to_hsl(*hex_to_rgb(replacement.source_color)), dtype=np.float64
    )
    max_distance = max_distance_for(replacement.tolerance)
    average = _average_hsl(hsl, opaque, source_hsl, max_distance)
    target = rgb_to_hsl(*hex_to_rgb(replacement.target_color))
    return source_hsl, HslShift.between(average, target), max_distance


def active_replacements(
    replacements: Sequence[ColorReplacement],
) -> List[ColorReplacement]:
    return [r for r in replacements if r.enabled and r.target_color]


def apply_replacements(
    buffer: PixelBuffer,
    replacements: Sequence[ColorReplacement],
    debug: bool = False,
) -> PixelBuffer:
    """
    Apply enabled replacements. Each pixel follows at most one replacement:
    the one whose sampled source is closest, within that replacement's
    tolerance. Returns a copy of the input when nothing is enabled.
    """
    active = active_replacements(replacements)
    if not active:
        return buffer.copy()

    hsl, opaque = buffer_hsl(buffer)
    prepared = [_prepare(hsl, opaque, r) for r in active]

    distances = np.stack(
        [np.asarray(hsl_distance(hsl, src[None, :])) for src, _s, _m in prepared]
    )
    max_distances = np.array([m for _src, _s, m in prepared], dtype=np.float64)
    in_range = distances <= max_distances[:, None]
    masked = np.where(in_range, distances, np.inf)

    best = np.argmin(masked, axis=0)
    best_distance = np.take_along_axis(masked, best[None, :], axis=0)[0]
    matched = np.isfinite(best_distance) & opaque

    strength = np.zeros_like(best_distance)
    for j, (_src, _shift, max_distance) in enumerate(prepared):
        rows = matched & (best == j)
        strength[rows] = selection_strength(best_distance[rows], max_distance)

    src_rgb = buffer.flat_rgba()[:, :3]
    out_rgb = src_rgb.copy()

    for j, (replacement, (_src, shift, _max)) in enumerate(zip(active, prepared)):
        rows = np.nonzero(matched & (best == j) & (strength > 0.0))[0]
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Replacement", replacement.id),
                        ("Source", replacement.source_color),
                        ("Target", replacement.target_color),
                        ("Pixels", int(rows.size)),
                    ]
                )
            )
        if rows.size == 0:
            continue
        recoloured = hsl_to_rgb_array(apply_hsl_shift(hsl[rows], shift, "adopt"))
        blend = np.power(strength[rows], EDGE_BLEND_CURVE)[:, None]
        original = src_rgb[rows].astype(np.float64)
        out_rgb[rows] = round_half_up(
            original + (recoloured.astype(np.float64) - original) * blend
        )

    return buffer.with_rgb(out_rgb)


__all__ = [
    "calculate_average_source_color",
    "active_replacements",
    "apply_replacements",
]
