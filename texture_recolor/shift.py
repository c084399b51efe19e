# texture_recolor/shift.py
from __future__ import annotations

"""
HSL shift primitive shared by every recolouring path.

A shift moves a source colour onto a target colour: additive hue and
lightness, multiplicative saturation. Applying it to other pixels keeps
their relative differences. Hue damping decides how much of the hue shift a
near-grey pixel receives:

  none   : full hue shift everywhere (global adjustment)
  scaled : shift * min(1, tS/30) * min(1, s/20) (multi-region compositor)
  adopt  : s < 8 takes the target hue, 8..20 blends along the shortest arc,
           s >= 20 gets the full shift (sampled-colour replacement)
"""

from dataclasses import dataclass
from typing import Literal, Sequence

import numpy as np

from .constants import (
    ADOPT_SAT_HIGH,
    ADOPT_SAT_LOW,
    DAMP_PIXEL_SAT,
    DAMP_TARGET_SAT,
)
from .colour_convert import normalize_hue
from .core_types import HslArray

HueDamping = Literal["none", "scaled", "adopt"]


@dataclass(frozen=True)
class HslShift:
    """Shift taking `source` HSL onto a target HSL."""

    hue_shift: float
    sat_ratio: float
    light_shift: float
    target_h: float
    target_s: float

    @classmethod
    def between(cls, source: Sequence[float], target: Sequence[float]) -> "HslShift":
        src_h, src_s, src_l = (float(v) for v in source[:3])
        tgt_h, tgt_s, tgt_l = (float(v) for v in target[:3])
        return cls(
            hue_shift=tgt_h - src_h,
            sat_ratio=tgt_s / src_s if src_s > 0 else 1.0,
            light_shift=tgt_l - src_l,
            target_h=tgt_h,
            target_s=tgt_s,
        )


def _wrap(hue: np.ndarray) -> np.ndarray:
    return np.asarray(normalize_hue(hue))


def _shifted_hue(
    hue: np.ndarray, sat: np.ndarray, shift: HslShift, damping: HueDamping
) -> np.ndarray:
    if damping == "none":
        return _wrap(hue + shift.hue_shift)

    if damping == "scaled":
        target_w = min(1.0, shift.target_s / DAMP_TARGET_SAT)
        pixel_w = np.minimum(1.0, sat / DAMP_PIXEL_SAT)
        return _wrap(hue + shift.hue_shift * target_w * pixel_w)

    if damping == "adopt":
        full = _wrap(hue + shift.hue_shift)
        # signed shortest arc from the target hue to the shifted hue
        diff = np.mod(full - shift.target_h + 180.0, 360.0) - 180.0
        factor = (sat - ADOPT_SAT_LOW) / (ADOPT_SAT_HIGH - ADOPT_SAT_LOW)
        blended = _wrap(shift.target_h + diff * factor)
        return np.select(
            [sat < ADOPT_SAT_LOW, sat < ADOPT_SAT_HIGH],
            [np.full_like(hue, normalize_hue(shift.target_h)), blended],
            default=full,
        )

    raise ValueError(f"unknown hue damping: {damping!r}")


def apply_hsl_shift(
    hsl: np.ndarray, shift: HslShift, damping: HueDamping = "none"
) -> HslArray:
    """
    Apply `shift` to HSL rows (...,3). Saturation and lightness are clamped
    into [0,100]; hue wraps into [0,360).
    """
    arr = np.asarray(hsl, dtype=np.float64)
    out = np.empty(arr.shape, dtype=np.float64)
    out[..., 0] = _shifted_hue(arr[..., 0], arr[..., 1], shift, damping)
    out[..., 1] = np.clip(arr[..., 1] * shift.sat_ratio, 0.0, 100.0)
    out[..., 2] = np.clip(arr[..., 2] + shift.light_shift, 0.0, 100.0)
    return out


__all__ = ["HueDamping", "HslShift", "apply_hsl_shift"]
