# texture_recolor/regions.py
from __future__ import annotations

"""
Colour region detection.

Clusters a strided sample of opaque pixels directly in HSL space with a
k-means variant:

  - distance: hsl_distance (hue weighted by mean saturation)
  - seeding: one random sample, then farthest-point picks
  - update: circular mean for hue, arithmetic mean for s and l
  - at most KMEANS_MAX_ITERATIONS passes, early stop once no centroid moves
    more than KMEANS_CONVERGENCE
  - an empty cluster is reseeded with a random sample

Randomness comes from an injectable numpy Generator so runs can be
reproduced; without one, results vary between calls.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .colour_convert import (
    circular_mean_degrees,
    hsl_distance,
    hsl_to_rgb,
    rgb_to_hsl_array,
)
from .constants import (
    ALPHA_THRESHOLD,
    CLUSTER_SAMPLE_STRIDE,
    DARK_L_MAX,
    HUE_NAMES,
    KMEANS_CONVERGENCE,
    KMEANS_MAX_ITERATIONS,
    LIGHT_L_MIN,
    NEUTRAL_SAT_MAX,
    REGION_COUNT_DEFAULT,
    REGION_COUNT_MAX,
    REGION_COUNT_MIN,
)
from .core_types import (
    ColorRegion,
    HexStr,
    HslArray,
    PixelBuffer,
    UnknownRegionError,
    rgb_to_hex,
)
from .utils import debug_log, key_value_pairs_to_string, warn


# Sampling


def sample_pixels_as_hsl(
    buffer: PixelBuffer, stride: int = CLUSTER_SAMPLE_STRIDE
) -> Tuple[HslArray, np.ndarray]:
    """
    Every `stride`-th pixel with alpha >= ALPHA_THRESHOLD, as HSL.

    Returns:
      hsl: float64 [M,3]
      index: int64 [M] flat pixel index of each sample
    """
    flat = buffer.flat_rgba()
    index = np.arange(0, flat.shape[0], max(1, int(stride)), dtype=np.int64)
    index = index[flat[index, 3] >= ALPHA_THRESHOLD]
    return rgb_to_hsl_array(flat[index, :3]), index


# k-means steps


def distance_matrix(pixels: HslArray, centroids: HslArray) -> np.ndarray:
    """Distances [M,K] from each HSL row to each centroid."""
    return np.asarray(hsl_distance(pixels[:, None, :], centroids[None, :, :]))


def initialize_centroids(
    pixels: HslArray, k: int, rng: np.random.Generator
) -> HslArray:
    """Random first centroid, then repeatedly the sample farthest from all chosen."""
    if pixels.shape[0] == 0:
        return np.zeros((0, 3), dtype=np.float64)

    first = int(rng.integers(pixels.shape[0]))
    centroids = [pixels[first].copy()]
    for _ in range(1, k):
        nearest = distance_matrix(pixels, np.array(centroids)).min(axis=1)
        centroids.append(pixels[int(np.argmax(nearest))].copy())
    return np.array(centroids, dtype=np.float64)


def assign_pixels_to_centroids(pixels: HslArray, centroids: HslArray) -> np.ndarray:
    """Index of the nearest centroid per sample (first wins on ties)."""
    return np.argmin(distance_matrix(pixels, centroids), axis=1)


def recalculate_centroids(
    pixels: HslArray,
    assignments: np.ndarray,
    k: int,
    rng: np.random.Generator,
) -> HslArray:
    """Circular-mean hue and mean s/l per cluster; empty clusters get a random sample."""
    out = np.empty((k, 3), dtype=np.float64)
    for j in range(k):
        members = pixels[assignments == j]
        if members.shape[0] == 0:
            out[j] = pixels[int(rng.integers(pixels.shape[0]))]
            continue
        out[j, 0] = circular_mean_degrees(members[:, 0])
        out[j, 1:] = members[:, 1:].mean(axis=0)
    return out


# Naming


def generate_region_name(centroid: Sequence[float]) -> str:
    """Readable name for an HSL centroid, e.g. 'Dark Blue' or 'Light Gray'."""
    h, s, light = (float(v) for v in centroid[:3])

    if s < NEUTRAL_SAT_MAX:
        if light < DARK_L_MAX:
            return "Dark Gray"
        if light > LIGHT_L_MIN:
            return "Light Gray"
        return "Gray"

    hue = h % 360.0
    colour_name = next(name for upper, name in HUE_NAMES if hue < upper)

    if light < DARK_L_MAX:
        return f"Dark {colour_name}"
    if light > LIGHT_L_MIN:
        return f"Light {colour_name}"
    return colour_name


def centroid_to_hex(centroid: Sequence[float]) -> HexStr:
    """Display hex for an HSL centroid."""
    return rgb_to_hex(hsl_to_rgb(*[float(v) for v in centroid[:3]]))


# Detection


def clamp_region_count(region_count: int) -> int:
    k = int(region_count)
    if k < REGION_COUNT_MIN or k > REGION_COUNT_MAX:
        clamped = max(REGION_COUNT_MIN, min(REGION_COUNT_MAX, k))
        warn(f"region count {k} out of range; using {clamped}")
        return clamped
    return k


def detect_color_regions(
    buffer: PixelBuffer,
    region_count: int = REGION_COUNT_DEFAULT,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    debug: bool = False,
) -> List[ColorRegion]:
    """
    Detect `region_count` colour regions (2..4) in the opaque pixels.

    Args:
      buffer: source image
      region_count: clusters to find; clamped into [2, 4]
      rng: random source for seeding and empty-cluster reseeding
      seed: used to build a Generator when `rng` is not given
      debug: print per-iteration movement

    Returns:
      Regions sorted by sampled pixel count, largest first. Empty when the
      image has no opaque samples.
    """
    k = clamp_region_count(region_count)
    pixels, _index = sample_pixels_as_hsl(buffer)
    if pixels.shape[0] == 0:
        if debug:
            debug_log("no opaque samples; no regions")
        return []

    if rng is None:
        rng = np.random.default_rng(seed)

    centroids = initialize_centroids(pixels, k, rng)
    iterations = 0
    for iterations in range(1, KMEANS_MAX_ITERATIONS + 1):
        assignments = assign_pixels_to_centroids(pixels, centroids)
        updated = recalculate_centroids(pixels, assignments, k, rng)
        moved = np.asarray(hsl_distance(centroids, updated))
        centroids = updated
        if debug:
            debug_log(
                key_value_pairs_to_string(
                    [("Iteration", iterations), ("Max move", float(moved.max()))]
                )
            )
        if not np.any(moved > KMEANS_CONVERGENCE):
            break

    counts = np.bincount(assign_pixels_to_centroids(pixels, centroids), minlength=k)
    regions = [
        ColorRegion(
            id=f"region-{j}",
            name=generate_region_name(centroids[j]),
            centroid_hsl=(
                float(centroids[j, 0]),
                float(centroids[j, 1]),
                float(centroids[j, 2]),
            ),
            target_color=None,
            pixel_count=int(counts[j]),
        )
        for j in range(k)
    ]
    regions.sort(key=lambda r: -r.pixel_count)

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [("Samples", int(pixels.shape[0])), ("Regions", k), ("Passes", iterations)]
            )
        )
    return regions


# Region lookup / targets


def find_region(regions: Sequence[ColorRegion], region_id: str) -> ColorRegion:
    """Region with `region_id`; raises UnknownRegionError if absent."""
    for region in regions:
        if region.id == region_id:
            return region
    known = ", ".join(r.id for r in regions) or "none"
    raise UnknownRegionError(f"no region {region_id!r} (known: {known})")


def assign_region_targets(
    regions: Sequence[ColorRegion], targets: Mapping[str, Optional[HexStr]]
) -> List[ColorRegion]:
    """
    New region list with target colours set from `targets` (id -> hex or None).
    Every id in `targets` must exist in `regions`.
    """
    for region_id in targets:
        find_region(regions, region_id)
    return [
        r.with_target(targets[r.id]) if r.id in targets else r for r in regions
    ]


def region_share(regions: Sequence[ColorRegion]) -> Dict[str, float]:
    """Share of sampled pixels per region id (0..1)."""
    total = sum(r.pixel_count for r in regions)
    return {r.id: (r.pixel_count / total if total else 0.0) for r in regions}


__all__ = [
    "sample_pixels_as_hsl",
    "distance_matrix",
    "initialize_centroids",
    "assign_pixels_to_centroids",
    "recalculate_centroids",
    "generate_region_name",
    "centroid_to_hex",
    "clamp_region_count",
    "detect_color_regions",
    "find_region",
    "assign_region_targets",
    "region_share",
]
