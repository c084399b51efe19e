import math
import numpy as np
import pytest

from texture_recolor.composite import apply_multi_region_adjustment, region_shifts
from texture_recolor.core_types import ColorRegion, PixelBuffer
from texture_recolor.regions import assign_region_targets, detect_color_regions

RED = ColorRegion("region-0", "Red", (0.0, 100.0, 50.0), None, 8)
BLUE = ColorRegion("region-1", "Blue", (240.0, 100.0, 50.0), None, 8)


def test_no_targets_returns_identical_copy(noisy_buffer):
    out = apply_multi_region_adjustment(noisy_buffer, [RED, BLUE])
    assert out == noisy_buffer
    assert out is not noisy_buffer


def test_region_shifts_skip_untargeted_regions():
    shifts = region_shifts([RED.with_target("#00ff00"), BLUE])
    assert [r.id for r, _s in shifts] == ["region-0"]
    assert shifts[0][1].hue_shift == pytest.approx(120.0)


@pytest.mark.parametrize("hard_mask", [False, True])
def test_targeted_region_moves_and_other_stays(red_blue_halves, hard_mask):
    regions = [RED.with_target("#00ff00"), BLUE]
    out = apply_multi_region_adjustment(red_blue_halves, regions, 0.8, hard_mask)
    np.testing.assert_array_equal(out.rgb[:, :4], np.broadcast_to([0, 255, 0], (8, 4, 3)))
    np.testing.assert_array_equal(out.rgb[:, 4:], red_blue_halves.rgb[:, 4:])


def test_both_regions_recoloured(red_blue_halves):
    regions = [RED.with_target("#00ff00"), BLUE.with_target("#ff0000")]
    out = apply_multi_region_adjustment(red_blue_halves, regions, hard_mask=True)
    np.testing.assert_array_equal(out.rgba[0, 0], [0, 255, 0, 255])
    np.testing.assert_array_equal(out.rgba[0, 7], [255, 0, 0, 255])


def test_alpha_and_transparent_pixels_untouched(noisy_buffer):
    regions = detect_color_regions(noisy_buffer, 3, seed=7)
    regions = assign_region_targets(regions, {r.id: "#33aa55" for r in regions})
    out = apply_multi_region_adjustment(noisy_buffer, regions, 0.3)

    np.testing.assert_array_equal(out.alpha, noisy_buffer.alpha)
    hidden = noisy_buffer.alpha < 128
    np.testing.assert_array_equal(out.rgb[hidden], noisy_buffer.rgb[hidden])
    assert not np.array_equal(out.rgb[~hidden], noisy_buffer.rgb[~hidden])


def test_input_buffer_is_not_modified(red_blue_halves):
    before = red_blue_halves.rgba.copy()
    apply_multi_region_adjustment(red_blue_halves, [RED.with_target("#00ff00"), BLUE])
    np.testing.assert_array_equal(red_blue_halves.rgba, before)


def test_soft_overlap_blends_candidates_in_rgb():
    # pure red pixel, 0 from RED and 20 (hue) from ORANGE, sharpness 0 -> divisor 2000
    buf = PixelBuffer(np.array([[[255, 0, 0, 255]]], dtype=np.uint8))
    orange = ColorRegion("region-1", "Orange", (20.0, 100.0, 50.0), None, 1)
    regions = [RED.with_target("#00ff00"), orange.with_target("#0000ff")]
    out = apply_multi_region_adjustment(buf, regions, sharpness=0.0)

    # RED shifts the pixel to hue 120 (0,255,0); ORANGE shifts it by 220 to (0,85,255)
    far = math.exp(-(20.0**2) / 2000.0)
    w_red, w_orange = 1.0 / (1.0 + far), far / (1.0 + far)
    expected = np.floor(
        w_red * np.array([0.0, 255.0, 0.0]) + w_orange * np.array([0.0, 85.0, 255.0]) + 0.5
    )
    np.testing.assert_array_equal(out.rgb[0, 0], expected)
    np.testing.assert_array_equal(expected, [0, 178, 115])
