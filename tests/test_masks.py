import numpy as np
import pytest

from texture_recolor.colour_convert import hsl_distance, rgb_to_hsl
from texture_recolor.core_types import ColorRegion, PixelBuffer, UnknownRegionError
from texture_recolor.masks import (
    falloff_divisor,
    generate_region_mask,
    generate_region_masks,
    generate_selection_mask,
    max_distance_for,
    selection_strength,
    visualize_mask,
)

REGIONS = [
    ColorRegion("region-0", "Red", (0.0, 100.0, 50.0), None, 1),
    ColorRegion("region-1", "Green", (120.0, 100.0, 50.0), None, 1),
    ColorRegion("region-2", "Blue", (240.0, 100.0, 50.0), None, 1),
]


def _stack(masks):
    return np.stack([masks[r.id] for r in REGIONS]).astype(np.float64)


def test_falloff_divisor_range():
    assert falloff_divisor(1.0) == pytest.approx(50.0)
    assert falloff_divisor(0.0) == pytest.approx(2000.0)
    assert falloff_divisor(0.8) == pytest.approx(440.0)
    assert falloff_divisor(3.0) == pytest.approx(50.0)


def test_masks_cover_full_resolution(noisy_buffer):
    masks = generate_region_masks(noisy_buffer, REGIONS)
    for mask in masks.values():
        assert mask.shape == (noisy_buffer.pixel_count,)
        assert mask.dtype == np.float32


def test_hard_masks_partition_pixels(noisy_buffer):
    weights = _stack(generate_region_masks(noisy_buffer, REGIONS, hard_mask=True))
    opaque = noisy_buffer.opaque_mask()
    assert set(np.unique(weights).tolist()) <= {0.0, 1.0}
    np.testing.assert_array_equal(weights[:, opaque].sum(axis=0), 1.0)
    np.testing.assert_array_equal(weights[:, ~opaque].sum(axis=0), 0.0)


def test_soft_masks_form_partition_of_unity(noisy_buffer):
    for sharpness in (0.0, 0.5, 0.8, 1.0):
        weights = _stack(generate_region_masks(noisy_buffer, REGIONS, sharpness))
        opaque = noisy_buffer.opaque_mask()
        np.testing.assert_allclose(weights[:, opaque].sum(axis=0), 1.0, atol=1e-5)
        np.testing.assert_array_equal(weights[:, ~opaque], 0.0)
        assert weights.min() >= 0.0
        assert weights.max() <= 1.0 + 1e-6


def test_sharper_masks_favour_the_nearest_region():
    buf = PixelBuffer(np.array([[[200, 0, 100, 255]]], dtype=np.uint8))
    regions = REGIONS[::2]  # red and blue
    sharp = generate_region_mask(buf, regions[0], regions, sharpness=1.0)[0]
    soft = generate_region_mask(buf, regions[0], regions, sharpness=0.0)[0]
    assert sharp > soft
    assert sharp > 0.99
    assert 0.5 < soft < 0.95


def test_single_region_mask_matches_batch(noisy_buffer):
    batch = generate_region_masks(noisy_buffer, REGIONS, 0.6)
    single = generate_region_mask(noisy_buffer, REGIONS[1], REGIONS, 0.6)
    np.testing.assert_array_equal(single, batch["region-1"])


def test_region_outside_set_is_a_caller_error(noisy_buffer):
    stray = ColorRegion("region-9", "Gray", (0.0, 0.0, 50.0), None, 0)
    with pytest.raises(UnknownRegionError):
        generate_region_mask(noisy_buffer, stray, REGIONS)


def test_no_regions_no_masks(noisy_buffer):
    assert generate_region_masks(noisy_buffer, []) == {}


def test_selection_mask_peaks_at_source_and_ignores_far_colours():
    arr = np.array(
        [[[255, 0, 0, 255], [0, 0, 255, 255], [255, 0, 0, 0]]], dtype=np.uint8
    )
    mask = generate_selection_mask(PixelBuffer(arr), "#ff0000", 30)
    np.testing.assert_allclose(mask, [1.0, 0.0, 0.0])


def test_selection_strength_at_boundary_is_zero():
    assert selection_strength(np.array([60.0]), 60.0)[0] == 0.0
    assert selection_strength(np.array([61.0]), 60.0)[0] == 0.0
    assert selection_strength(np.array([30.0]), 60.0)[0] == pytest.approx(0.5)
    out = selection_strength(np.array([0.0, 5.0]), 0.0)
    np.testing.assert_array_equal(out, [0.0, 0.0])


def test_pixel_at_tolerance_distance_gets_no_weight():
    arr = np.array([[[255, 255, 255, 255], [0, 0, 0, 255]]], dtype=np.uint8)
    distance = hsl_distance(np.array(rgb_to_hsl(255, 255, 255)), np.array(rgb_to_hsl(0, 0, 0)))
    mask = generate_selection_mask(PixelBuffer(arr), "#000000", distance / 1.5)
    assert np.all(np.isfinite(mask))
    assert 0.0 <= mask[0] < 1e-6
    assert mask[1] == pytest.approx(1.0)


def test_zero_tolerance_never_produces_nan(solid_buffer):
    mask = generate_selection_mask(solid_buffer(4, 4, (10, 20, 30)), "#0a141e", 0)
    assert np.all(np.isfinite(mask))
    np.testing.assert_array_equal(mask, 0.0)


def test_max_distance_clamps_tolerance():
    assert max_distance_for(40) == pytest.approx(60.0)
    assert max_distance_for(250) == pytest.approx(150.0)
    assert max_distance_for(-3) == 0.0


def test_visualize_mask_blends_background_toward_colour():
    out = visualize_mask(np.array([0.0, 1.0, 0.5]), 3, 1, colour=(240, 40, 140), background=40)
    np.testing.assert_array_equal(
        out.rgba[0], [[40, 40, 40, 255], [240, 40, 140, 255], [140, 40, 90, 255]]
    )


def test_visualize_mask_rejects_wrong_size():
    with pytest.raises(ValueError):
        visualize_mask(np.zeros(5), 2, 2)
