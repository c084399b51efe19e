# texture_recolor/masks.py
from __future__ import annotations

"""
Per-pixel influence masks at full resolution.

Exports:
  falloff_divisor(sharpness)
  region_distances(buffer, regions) -> (distances [K,N], opaque [N])
  generate_region_masks(buffer, regions, sharpness, hard_mask) -> {id: mask}
  generate_region_mask(buffer, region, all_regions, sharpness, hard_mask)
  selection_strength(distances, max_distance)
  generate_selection_mask(buffer, source_color, tolerance)
  visualize_mask(mask, width, height, colour, background) -> PixelBuffer

Masks are flat float32 arrays of length width*height. Pixels with
alpha < ALPHA_THRESHOLD always weigh 0.

Soft region masks form a partition of unity over the region set:
  w_r = exp(-(d_r - d_min)^2 / divisor) / sum_k exp(-(d_k - d_min)^2 / divisor)
Hard masks give the nearest region 1 and every other region 0.
"""

from typing import Dict, Sequence, Tuple

import numpy as np

from .colour_convert import hsl_distance, rgb_to_hsl, rgb_to_hsl_array
from .constants import (
    FALLOFF_MIN,
    FALLOFF_RANGE,
    REGION_MASK_BACKGROUND,
    REGION_MASK_COLOUR,
    SELECTION_CURVE,
    SHARPNESS_DEFAULT,
    TOLERANCE_SCALE,
)
from .core_types import (
    ColorRegion,
    FloatMask,
    HexStr,
    HslArray,
    PixelBuffer,
    RGBTuple,
    clamp_value,
    hex_to_rgb,
)
from .regions import find_region


def falloff_divisor(sharpness: float) -> float:
    """50 (sharpness 1, sharp edges) .. 2000 (sharpness 0, soft edges)."""
    return FALLOFF_MIN + (1.0 - clamp_value(float(sharpness), 0.0, 1.0)) * FALLOFF_RANGE


def max_distance_for(tolerance: float) -> float:
    """Largest colour distance still selected at `tolerance` (0..100)."""
    return clamp_value(float(tolerance), 0.0, 100.0) * TOLERANCE_SCALE


def buffer_hsl(buffer: PixelBuffer) -> Tuple[HslArray, np.ndarray]:
    """Flat HSL rows [N,3] and the opaque flag [N] for every pixel."""
    return rgb_to_hsl_array(buffer.flat_rgba()[:, :3]), buffer.opaque_mask()


def region_distances(
    buffer: PixelBuffer, regions: Sequence[ColorRegion]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Distances from every pixel to every region centroid.

    Returns:
      distances: float64 [K,N]
      opaque: bool [N]
    """
    hsl, opaque = buffer_hsl(buffer)
    centroids = np.array([r.centroid_hsl for r in regions], dtype=np.float64)
    distances = np.asarray(hsl_distance(hsl[None, :, :], centroids[:, None, :]))
    return distances, opaque


def generate_region_masks(
    buffer: PixelBuffer,
    regions: Sequence[ColorRegion],
    sharpness: float = SHARPNESS_DEFAULT,
    hard_mask: bool = False,
) -> Dict[str, FloatMask]:
    """Masks for every region in one pass, keyed by region id."""
    if len(regions) == 0:
        return {}

    distances, opaque = region_distances(buffer, regions)

    if hard_mask:
        winner = np.argmin(distances, axis=0)
        weights = (winner[None, :] == np.arange(len(regions))[:, None]).astype(
            np.float64
        )
    else:
        relative = distances - distances.min(axis=0, keepdims=True)
        raw = np.exp(-(relative * relative) / falloff_divisor(sharpness))
        # the nearest region contributes exp(0) = 1, so the sum is >= 1
        weights = raw / raw.sum(axis=0, keepdims=True)

    weights[:, ~opaque] = 0.0
    return {
        region.id: weights[j].astype(np.float32) for j, region in enumerate(regions)
    }


def generate_region_mask(
    buffer: PixelBuffer,
    region: ColorRegion,
    all_regions: Sequence[ColorRegion],
    sharpness: float = SHARPNESS_DEFAULT,
    hard_mask: bool = False,
) -> FloatMask:
    """
    Mask for one region, weighted against all regions.

    Raises:
      UnknownRegionError: `region` is not part of `all_regions`.
    """
    find_region(all_regions, region.id)
    return generate_region_masks(buffer, all_regions, sharpness, hard_mask)[region.id]


# Sampled-colour selection


def selection_strength(distances: np.ndarray, max_distance: float) -> np.ndarray:
    """
    1 - d/max_distance inside the tolerance, 0 outside.
    A pixel exactly at max_distance, or any pixel when max_distance is 0,
    gets 0.
    """
    d = np.asarray(distances, dtype=np.float64)
    if max_distance <= 0.0:
        return np.zeros_like(d)
    return np.where(d <= max_distance, 1.0 - d / max_distance, 0.0)


def generate_selection_mask(
    buffer: PixelBuffer, source_color: HexStr, tolerance: float
) -> FloatMask:
    """Selection strength (curved by SELECTION_CURVE) of each pixel around a sampled colour."""
    hsl, opaque = buffer_hsl(buffer)
    source_hsl = np.array(rgb_to_hsl(*hex_to_rgb(source_color)), dtype=np.float64)
    strength = selection_strength(
        hsl_distance(hsl, source_hsl[None, :]), max_distance_for(tolerance)
    )
    mask = np.power(np.clip(strength, 0.0, 1.0), SELECTION_CURVE)
    mask[~opaque] = 0.0
    return mask.astype(np.float32)


# Visualisation


def visualize_mask(
    mask: np.ndarray,
    width: int,
    height: int,
    colour: RGBTuple = REGION_MASK_COLOUR,
    background: int = REGION_MASK_BACKGROUND,
) -> PixelBuffer:
    """Opaque preview: grey background blended toward `colour` by mask weight."""
    weights = np.asarray(mask, dtype=np.float64).reshape(-1)
    if weights.size != width * height:
        raise ValueError(
            f"mask has {weights.size} weights, expected {width * height}"
        )
    bg = float(background)
    tint = np.array(colour, dtype=np.float64)[None, :]
    rgb = np.floor(bg + (tint - bg) * weights[:, None] + 0.5)
    out = np.empty((height * width, 4), dtype=np.uint8)
    out[:, :3] = np.clip(rgb, 0, 255).astype(np.uint8)
    out[:, 3] = 255
    return PixelBuffer(out.reshape(height, width, 4))


__all__ = [
    "falloff_divisor",
    "max_distance_for",
    "buffer_hsl",
    "region_distances",
    "generate_region_masks",
    "generate_region_mask",
    "selection_strength",
    "generate_selection_mask",
    "visualize_mask",
]
