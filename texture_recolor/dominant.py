# texture_recolor/dominant.py
from __future__ import annotations

"""
Dominant colour and the global (single target) adjustment.

Exports:
  get_dominant_color(buffer) -> RGBTuple
  global_shift(buffer, target) -> HslShift
  apply_global_adjustment(buffer, target, debug=False) -> PixelBuffer
"""

import numpy as np

from .colour_convert import hsl_to_rgb_array, rgb_to_hsl, rgb_to_hsl_array
from .constants import ALPHA_THRESHOLD, DOMINANT_SAMPLE_STRIDE, MID_GRAY
from .core_types import ColourLike, PixelBuffer, RGBTuple, coerce_to_rgb_tuple
from .shift import HslShift, apply_hsl_shift
from .utils import debug_log, key_value_pairs_to_string


def get_dominant_color(
    buffer: PixelBuffer, stride: int = DOMINANT_SAMPLE_STRIDE
) -> RGBTuple:
    """
    Rounded mean RGB of every `stride`-th opaque pixel.
    Mid-gray when there is nothing opaque to sample.
    """
    samples = buffer.flat_rgba()[:: max(1, int(stride))]
    opaque = samples[samples[:, 3] >= ALPHA_THRESHOLD, :3]
    if opaque.shape[0] == 0:
        return MID_GRAY
    mean = opaque.astype(np.float64).mean(axis=0)
    r, g, b = np.floor(mean + 0.5).astype(int).tolist()
    return (r, g, b)


def global_shift(buffer: PixelBuffer, target: ColourLike) -> HslShift:
    """Shift moving the image's dominant colour onto `target`."""
    dominant_hsl = rgb_to_hsl(*get_dominant_color(buffer))
    target_hsl = rgb_to_hsl(*coerce_to_rgb_tuple(target))
    return HslShift.between(dominant_hsl, target_hsl)


def apply_global_adjustment(
    buffer: PixelBuffer, target: ColourLike, debug: bool = False
) -> PixelBuffer:
    """
    Shift every pixel so the dominant colour lands on `target`, keeping
    relative differences. Alpha is preserved.
    """
    shift = global_shift(buffer, target)
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Hue shift", shift.hue_shift),
                    ("Sat ratio", shift.sat_ratio),
                    ("Light shift", shift.light_shift),
                ]
            )
        )

    hsl = rgb_to_hsl_array(buffer.flat_rgba()[:, :3])
    shifted = apply_hsl_shift(hsl, shift, damping="none")
    return buffer.with_rgb(hsl_to_rgb_array(shifted))


__all__ = ["get_dominant_color", "global_shift", "apply_global_adjustment"]
