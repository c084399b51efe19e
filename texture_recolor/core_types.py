# texture_recolor/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .constants import ALPHA_THRESHOLD, MID_GRAY

# Basic aliases

RGBTuple = Tuple[int, int, int]
HSLTuple = Tuple[float, float, float]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
U8Mask = NDArray[np.uint8]  # (H, W)
FloatMask = NDArray[np.float32]  # (H*W,) weights in [0, 1]
HslArray = NDArray[np.float64]  # (..., 3) h in [0,360), s and l in [0,100]

ColourLike = Union[HexStr, Sequence[int]]


class UnknownRegionError(KeyError):
    """Raised when a caller references a region id that is not in the detection result."""


# Value objects


class PixelBuffer:
    """
    Immutable RGBA image, row-major, uint8 per channel.

    The backing array is copied on construction and flagged read-only, so a
    buffer can be shared freely between calls. Operations build new buffers.
    """

    __slots__ = ("_rgba",)

    def __init__(self, rgba: np.ndarray) -> None:
        arr = np.asarray(rgba)
        if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] not in (3, 4):
            raise TypeError("expected uint8 (H,W,3/4) image")
        if arr.shape[-1] == 3:
            opaque = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, opaque], axis=-1)
        else:
            arr = arr.copy()
        arr.setflags(write=False)
        self._rgba = arr

    @classmethod
    def from_flat(cls, width: int, height: int, data: Sequence[int]) -> "PixelBuffer":
        """Build from flat row-major RGBA samples (len == width*height*4)."""
        flat = np.asarray(data, dtype=np.uint8).reshape(-1)
        if width <= 0 or height <= 0 or flat.size != width * height * 4:
            raise ValueError(
                f"expected {width}x{height}x4 samples, got {flat.size}"
            )
        return cls(flat.reshape(height, width, 4))

    @classmethod
    def from_rgb_alpha(cls, rgb: np.ndarray, alpha: np.ndarray) -> "PixelBuffer":
        """Build from separate (H,W,3) colour and (H,W) alpha planes."""
        if rgb.shape[:2] != alpha.shape[:2]:
            raise ValueError("rgb and alpha shapes differ")
        out = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
        out[..., :3] = rgb
        out[..., 3] = alpha
        return cls(out)

    @property
    def width(self) -> int:
        return int(self._rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgba.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def rgba(self) -> U8Image:
        return self._rgba

    @property
    def rgb(self) -> np.ndarray:
        return self._rgba[..., :3]

    @property
    def alpha(self) -> U8Mask:
        return self._rgba[..., 3]

    def flat_rgba(self) -> np.ndarray:
        """(N,4) view of the pixels in row-major order."""
        return self._rgba.reshape(-1, 4)

    def opaque_mask(self) -> np.ndarray:
        """Flat boolean mask of pixels taking part in colour analysis."""
        return self.flat_rgba()[:, 3] >= ALPHA_THRESHOLD

    def with_rgb(self, flat_rgb: np.ndarray) -> "PixelBuffer":
        """New buffer with replaced colour channels and this buffer's alpha."""
        out = self._rgba.copy()
        out[..., :3] = np.asarray(flat_rgb, dtype=np.uint8).reshape(
            self.height, self.width, 3
        )
        return PixelBuffer(out)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._rgba)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._rgba.shape == other._rgba.shape and bool(
            np.array_equal(self._rgba, other._rgba)
        )

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


@dataclass(frozen=True)
class HSLColor:
    """Hue in degrees [0,360), saturation and lightness in [0,100]."""

    h: float
    s: float
    l: float  # noqa: E741

    def as_tuple(self) -> HSLTuple:
        return (self.h, self.s, self.l)


@dataclass(frozen=True)
class ColorRegion:
    """Cluster of similarly coloured pixels produced by one detection call."""

    id: str
    name: str
    centroid_hsl: HSLTuple
    target_color: Optional[HexStr] = None
    pixel_count: int = 0

    def with_target(self, target_color: Optional[HexStr]) -> "ColorRegion":
        return replace(self, target_color=target_color)


@dataclass(frozen=True)
class ColorReplacement:
    """Click-sampled source colour shifted toward a target within a tolerance."""

    id: str
    source_color: HexStr
    target_color: HexStr
    tolerance: float = 30.0  # 0..100
    enabled: bool = True


# Small helpers


_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def rgb_to_hex(rgb: Sequence[float]) -> HexStr:
    """RGB triple to lowercase hex string '#rrggbb'."""
    r, g, b = (int(round(float(c))) for c in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_str: Optional[str], default: RGBTuple = MID_GRAY) -> RGBTuple:
    """
    Parse '#rrggbb' or 'rrggbb' (case-insensitive) into an RGB tuple.
    Anything unparsable falls back to `default` (mid-gray).
    """
    if not isinstance(hex_str, str):
        return default
    match = _HEX_RE.match(hex_str.strip())
    if match is None:
        return default
    return (
        int(match.group(1), 16),
        int(match.group(2), 16),
        int(match.group(3), 16),
    )


def is_hex_colour(value: str) -> bool:
    return _HEX_RE.match(value.strip()) is not None


def coerce_to_rgb_tuple(value: ColourLike) -> RGBTuple:
    """Hex string or 3-length sequence/array to an (int, int, int) RGB tuple."""
    if isinstance(value, str):
        return hex_to_rgb(value)
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


__all__ = [
    # aliases / types
    "RGBTuple",
    "HSLTuple",
    "HexStr",
    "U8Image",
    "U8Mask",
    "FloatMask",
    "HslArray",
    "ColourLike",
    "UnknownRegionError",
    # value objects
    "PixelBuffer",
    "HSLColor",
    "ColorRegion",
    "ColorReplacement",
    # helpers
    "clamp_value",
    "rgb_to_hex",
    "hex_to_rgb",
    "is_hex_colour",
    "coerce_to_rgb_tuple",
]
