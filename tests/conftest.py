import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from texture_recolor.core_types import PixelBuffer


def _solid(width, height, rgba):
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[...] = rgba
    return arr


@pytest.fixture
def solid_buffer():
    def make(width, height, rgba):
        if len(rgba) == 3:
            rgba = tuple(rgba) + (255,)
        return PixelBuffer(_solid(width, height, rgba))

    return make


@pytest.fixture
def red_blue_halves():
    """8x8, left half pure red, right half pure blue, fully opaque."""
    arr = _solid(8, 8, (0, 0, 0, 255))
    arr[:, :4, 0] = 255
    arr[:, 4:, 2] = 255
    return PixelBuffer(arr)


@pytest.fixture
def noisy_buffer():
    """Deterministic 16x12 texture with varied colours and alpha."""
    rng = np.random.default_rng(1234)
    arr = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    arr[:3, :, 3] = 0
    arr[3:6, :, 3] = 127
    arr[6:, :, 3] = 255
    return PixelBuffer(arr)
