import numpy as np
import pytest

from texture_recolor.shift import HslShift, apply_hsl_shift


def test_between_derives_additive_and_multiplicative_parts():
    shift = HslShift.between((10.0, 40.0, 30.0), (70.0, 80.0, 55.0))
    assert shift.hue_shift == pytest.approx(60.0)
    assert shift.sat_ratio == pytest.approx(2.0)
    assert shift.light_shift == pytest.approx(25.0)
    assert shift.target_h == 70.0
    assert shift.target_s == 80.0


def test_between_grey_source_keeps_saturation_ratio_one():
    assert HslShift.between((0.0, 0.0, 50.0), (120.0, 60.0, 50.0)).sat_ratio == 1.0


def test_undamped_shift_wraps_and_clamps():
    shift = HslShift(hue_shift=30.0, sat_ratio=3.0, light_shift=-80.0, target_h=0.0, target_s=90.0)
    out = apply_hsl_shift(np.array([[350.0, 50.0, 40.0]]), shift, "none")
    np.testing.assert_allclose(out, [[20.0, 100.0, 0.0]])


def test_scaled_damping_leaves_grey_pixels_hue_alone():
    shift = HslShift(hue_shift=120.0, sat_ratio=1.0, light_shift=0.0, target_h=120.0, target_s=100.0)
    out = apply_hsl_shift(np.array([[10.0, 0.0, 50.0], [10.0, 10.0, 50.0], [10.0, 40.0, 50.0]]), shift, "scaled")
    np.testing.assert_allclose(out[:, 0], [10.0, 70.0, 130.0])


def test_scaled_damping_toward_grey_target():
    shift = HslShift(hue_shift=90.0, sat_ratio=1.0, light_shift=0.0, target_h=90.0, target_s=15.0)
    out = apply_hsl_shift(np.array([[0.0, 80.0, 50.0]]), shift, "scaled")
    assert out[0, 0] == pytest.approx(45.0)


def test_adopt_damping_thresholds():
    shift = HslShift(hue_shift=100.0, sat_ratio=1.0, light_shift=0.0, target_h=200.0, target_s=60.0)
    hsl = np.array([[10.0, 5.0, 50.0], [10.0, 14.0, 50.0], [10.0, 30.0, 50.0]])
    out = apply_hsl_shift(hsl, shift, "adopt")
    assert out[0, 0] == pytest.approx(200.0)  # very grey: target hue outright
    assert out[1, 0] == pytest.approx(155.0)  # halfway between target and shifted hue
    assert out[2, 0] == pytest.approx(110.0)  # saturated: full shift


def test_unknown_damping_is_rejected():
    shift = HslShift.between((0.0, 50.0, 50.0), (0.0, 50.0, 50.0))
    with pytest.raises(ValueError):
        apply_hsl_shift(np.zeros((1, 3)), shift, "wobbly")
