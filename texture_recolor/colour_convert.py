# texture_recolor/colour_convert.py
from __future__ import annotations

"""
Colour conversions and metrics in HSL space.

Exports:
  rgb_to_hsl_array(rgb)          # (...,3) uint8/float -> (...,3) float64 HSL
  hsl_to_rgb_array(hsl)          # (...,3) HSL -> (...,3) uint8
  rgb_to_hsl(r, g, b)            # scalar reference
  hsl_to_rgb(h, s, l)            # scalar reference
  hue_distance(h1, h2)           # circular, degrees
  hsl_distance(a, b)             # hue weighted by mean saturation
  normalize_hue(h)                # wrap into [0,360)
  circular_mean_degrees(hues, weights)

Ranges: h in [0,360), s and l in [0,100], RGB in 0..255.
"""

from typing import Optional, Union

import numpy as np

from .core_types import HSLTuple, HslArray, RGBTuple

ArrayOrFloat = Union[float, np.ndarray]


# RGB -> HSL


def rgb_to_hsl_array(rgb: np.ndarray) -> HslArray:
    """
    RGB 0..255 to HSL. Vectorised, preserves shape (...,3). Returns float64.
    Achromatic rows get h = 0, s = 0.
    """
    arr = np.asarray(rgb, dtype=np.float64) / 255.0
    r = arr[..., 0]
    g = arr[..., 1]
    b = arr[..., 2]

    mx = np.maximum(np.maximum(r, g), b)
    mn = np.minimum(np.minimum(r, g), b)
    light = (mx + mn) / 2.0
    delta = mx - mn
    chromatic = delta > 0.0
    safe_delta = np.where(chromatic, delta, 1.0)

    with np.errstate(divide="ignore", invalid="ignore"):
        sat = np.where(
            light > 0.5, delta / (2.0 - mx - mn), delta / np.where(chromatic, mx + mn, 1.0)
        )
    sat = np.where(chromatic, sat, 0.0)

    # Hue branch follows the channel holding the max, red first.
    hue_r = ((g - b) / safe_delta + np.where(g < b, 6.0, 0.0)) / 6.0
    hue_g = ((b - r) / safe_delta + 2.0) / 6.0
    hue_b = ((r - g) / safe_delta + 4.0) / 6.0
    hue = np.select([mx == r, mx == g], [hue_r, hue_g], default=hue_b)
    hue = np.where(chromatic, hue, 0.0)

    out = np.empty(arr.shape, dtype=np.float64)
    out[..., 0] = hue * 360.0
    out[..., 1] = sat * 100.0
    out[..., 2] = light * 100.0
    return out


# HSL -> RGB


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0.0, t + 1.0, t)
    t = np.where(t > 1.0, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """
    HSL to RGB 0..255. Vectorised, preserves shape (...,3). Returns uint8.
    Channels are rounded half-up.
    """
    arr = np.asarray(hsl, dtype=np.float64)
    h = arr[..., 0] / 360.0
    s = arr[..., 1] / 100.0
    light = arr[..., 2] / 100.0

    q = np.where(light < 0.5, light * (1.0 + s), light + s - light * s)
    p = 2.0 * light - q

    out = np.empty(arr.shape, dtype=np.float64)
    out[..., 0] = _hue_to_channel(p, q, h + 1.0 / 3.0)
    out[..., 1] = _hue_to_channel(p, q, h)
    out[..., 2] = _hue_to_channel(p, q, h - 1.0 / 3.0)
    return round_half_up(out * 255.0)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, .5 upward, clipped into uint8."""
    return np.clip(np.floor(values + 0.5), 0.0, 255.0).astype(np.uint8)


# Scalar reference forms


def rgb_to_hsl(r: float, g: float, b: float) -> HSLTuple:
    """Scalar RGB (0..255) to HSL (h 0..360, s/l 0..100)."""
    h, s, light = rgb_to_hsl_array(np.array([r, g, b], dtype=np.float64)).tolist()
    return (h, s, light)


def hsl_to_rgb(h: float, s: float, l: float) -> RGBTuple:  # noqa: E741
    """Scalar HSL to RGB, each channel rounded to the nearest integer."""
    r, g, b = hsl_to_rgb_array(np.array([h, s, l], dtype=np.float64)).tolist()
    return (int(r), int(g), int(b))


# Metrics


def hue_distance(hue_a: ArrayOrFloat, hue_b: ArrayOrFloat) -> ArrayOrFloat:
    """Minimal absolute hue difference in degrees, 0..180."""
    d = np.abs(np.mod(np.asarray(hue_a, dtype=np.float64) - hue_b, 360.0))
    out = np.where(d > 180.0, 360.0 - d, d)
    return float(out) if out.ndim == 0 else out


def hsl_distance(a: np.ndarray, b: np.ndarray) -> ArrayOrFloat:
    """
    Weighted distance between HSL colours, broadcasting over (...,3).

    Hue difference is scaled by the mean saturation / 100, so hue barely
    counts between near-grey colours.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    hue_diff = hue_distance(a[..., 0], b[..., 0])
    hue_weight = (a[..., 1] + b[..., 1]) / 200.0
    sat_diff = a[..., 1] - b[..., 1]
    light_diff = a[..., 2] - b[..., 2]
    out = np.sqrt((hue_diff * hue_weight) ** 2 + sat_diff**2 + light_diff**2)
    return float(out) if np.ndim(out) == 0 else out


def normalize_hue(hue: ArrayOrFloat) -> ArrayOrFloat:
    """
    Wrap hue into [0,360). np.mod(-1e-15, 360.0) rounds to 360.0, which is
    folded back to 0.
    """
    h = np.mod(np.asarray(hue, dtype=np.float64), 360.0)
    h = np.where(h >= 360.0, 0.0, h)
    return float(h) if h.ndim == 0 else h


def circular_mean_degrees(
    hues: np.ndarray, weights: Optional[np.ndarray] = None
) -> float:
    """
    Weighted circular mean of hues in degrees, in [0,360).
    0 when every weight is 0.
    """
    rad = np.radians(np.asarray(hues, dtype=np.float64))
    w = np.ones_like(rad) if weights is None else np.asarray(weights, dtype=np.float64)
    mean = np.degrees(np.arctan2(np.sum(np.sin(rad) * w), np.sum(np.cos(rad) * w)))
    return float(normalize_hue(mean))


__all__ = [
    "rgb_to_hsl_array",
    "hsl_to_rgb_array",
    "round_half_up",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "hue_distance",
    "hsl_distance",
    "normalize_hue",
    "circular_mean_degrees",
]
