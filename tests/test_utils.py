from texture_recolor.utils import (
    format_duration,
    format_percentage,
    format_value,
    key_value_pairs_to_string,
)


def test_format_duration():
    assert format_duration(0.0123) == "12.3ms"
    assert format_duration(4.21) == "4.2s"
    assert format_duration(4.21, precise=True) == "4.210s"
    assert format_duration(125.0) == "2m 5s"


def test_key_value_pairs_render_values():
    line = key_value_pairs_to_string([("Hard mask", False), ("Pixels", 12345), ("Sharpness", 0.8)])
    assert line == "Hard mask: off  Pixels: 12,345  Sharpness: 0.8"
    assert format_value("#aabbcc") == "#aabbcc"
    assert format_percentage(0.4567) == "45.7%"
