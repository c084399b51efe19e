import numpy as np

from texture_recolor.core_types import PixelBuffer, rgb_to_hex
from texture_recolor.dominant import apply_global_adjustment, get_dominant_color


def test_uniform_image_dominant_is_exact(solid_buffer):
    assert get_dominant_color(solid_buffer(20, 10, (100, 150, 200))) == (100, 150, 200)


def test_transparent_image_defaults_to_mid_gray(solid_buffer):
    assert get_dominant_color(solid_buffer(5, 5, (10, 200, 30, 0))) == (128, 128, 128)


def test_alpha_threshold_is_inclusive(solid_buffer):
    assert get_dominant_color(solid_buffer(4, 4, (10, 20, 30, 128))) == (10, 20, 30)
    assert get_dominant_color(solid_buffer(4, 4, (10, 20, 30, 127))) == (128, 128, 128)


def test_transparent_pixels_do_not_count():
    arr = np.zeros((10, 10, 4), dtype=np.uint8)
    arr[..., 0] = 200
    arr[..., 3] = 255
    arr[5:, :, :] = (0, 0, 255, 0)
    assert get_dominant_color(PixelBuffer(arr)) == (200, 0, 0)


def test_global_adjustment_onto_dominant_is_a_no_op(noisy_buffer):
    target = rgb_to_hex(get_dominant_color(noisy_buffer))
    out = apply_global_adjustment(noisy_buffer, target)
    diff = np.abs(out.rgb.astype(int) - noisy_buffer.rgb.astype(int))
    assert diff.max() <= 1
    np.testing.assert_array_equal(out.alpha, noisy_buffer.alpha)


def test_global_adjustment_moves_uniform_image_onto_target(solid_buffer):
    buf = solid_buffer(6, 6, (200, 50, 50))
    out = apply_global_adjustment(buf, "#3050c0")
    diff = np.abs(out.rgb.astype(int) - np.array([0x30, 0x50, 0xC0]))
    assert diff.max() <= 1


def test_global_adjustment_accepts_rgb_tuple_and_keeps_input(solid_buffer):
    buf = solid_buffer(3, 3, (200, 50, 50, 77))
    before = buf.rgba.copy()
    out = apply_global_adjustment(buf, (50, 200, 50))
    np.testing.assert_array_equal(buf.rgba, before)
    assert out is not buf
    assert (out.alpha == 77).all()


def test_invalid_target_hex_falls_back_to_mid_gray(solid_buffer):
    buf = solid_buffer(3, 3, (200, 50, 50))
    out = apply_global_adjustment(buf, "not-a-colour")
    diff = np.abs(out.rgb.astype(int) - 128)
    assert diff.max() <= 1
