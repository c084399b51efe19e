# texture_recolor/composite.py
from __future__ import annotations

"""
Multi-region recolouring.

Each region with a target colour gets an HslShift from its centroid to the
target. Every pixel is shifted once per region it belongs to (mask weight
>= MASK_WEIGHT_EPS), with the "scaled" hue damping, and the candidates are
averaged in RGB weighted by the masks. Averaging in RGB rather than HSL
keeps hue interpolation away from the 0/360 seam.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .colour_convert import hsl_to_rgb_array, rgb_to_hsl, round_half_up
from .constants import MASK_WEIGHT_EPS, SHARPNESS_DEFAULT
from .core_types import ColorRegion, PixelBuffer, hex_to_rgb
from .masks import buffer_hsl, generate_region_masks
from .shift import HslShift, apply_hsl_shift
from .utils import debug_log, key_value_pairs_to_string


def region_shifts(regions: Sequence[ColorRegion]) -> List[Tuple[ColorRegion, HslShift]]:
    """(region, shift) for every region carrying a target colour."""
    out: List[Tuple[ColorRegion, HslShift]] = []
    for region in regions:
        if region.target_color is None:
            continue
        target_hsl = rgb_to_hsl(*hex_to_rgb(region.target_color))
        out.append((region, HslShift.between(region.centroid_hsl, target_hsl)))
    return out


def apply_multi_region_adjustment(
    buffer: PixelBuffer,
    regions: Sequence[ColorRegion],
    sharpness: float = SHARPNESS_DEFAULT,
    hard_mask: bool = False,
    debug: bool = False,
) -> PixelBuffer:
    """
    Recolour each region toward its target colour.

    Args:
      buffer: source image
      regions: full region set from detect_color_regions, targets assigned
      sharpness: soft mask sharpness 0..1
      hard_mask: winner-takes-all masks instead of soft blending

    Returns:
      New buffer; identical to the input when no region has a target.
    """
    active = region_shifts(regions)
    if not active:
        return buffer.copy()

    masks = generate_region_masks(buffer, regions, sharpness, hard_mask)
    hsl, opaque = buffer_hsl(buffer)

    n = hsl.shape[0]
    acc = np.zeros((n, 3), dtype=np.float64)
    total = np.zeros((n,), dtype=np.float64)

    for region, shift in active:
        weight = masks[region.id].astype(np.float64)
        rows = np.nonzero(weight >= MASK_WEIGHT_EPS)[0]
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Region", region.id),
                        ("Target", region.target_color),
                        ("Pixels", int(rows.size)),
                        ("Hue shift", shift.hue_shift),
                    ]
                )
            )
        if rows.size == 0:
            continue
        candidate = hsl_to_rgb_array(apply_hsl_shift(hsl[rows], shift, "scaled"))
        w = weight[rows]
        acc[rows] += candidate.astype(np.float64) * w[:, None]
        total[rows] += w

    src_rgb = buffer.flat_rgba()[:, :3]
    out_rgb = src_rgb.copy()
    touched = (total > 0.0) & opaque
    out_rgb[touched] = round_half_up(acc[touched] / total[touched, None])
    return buffer.with_rgb(out_rgb)


__all__ = ["region_shifts", "apply_multi_region_adjustment"]
