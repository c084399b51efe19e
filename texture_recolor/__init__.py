# texture_recolor/__init__.py
"""
texture_recolor package.

Purpose:
  Region-aware recolouring of RGBA textures. See texture_recolor.cli for the CLI.

Public API:
  get_dominant_color           : sampled mean colour of opaque pixels.
  apply_global_adjustment      : shift a whole image onto one target colour.
  detect_color_regions         : k-means style clustering in HSL space.
  assign_region_targets        : attach target colours to detected regions.
  generate_region_mask(s)      : soft / hard per-pixel region weights.
  apply_multi_region_adjustment: per-region recolouring blended in RGB.
  generate_selection_mask      : weights around a sampled colour.
  apply_replacements           : sampled-colour replacements.
  colour_convert               : RGB <-> HSL and the weighted HSL distance.
  core_types                   : PixelBuffer, ColorRegion, ColorReplacement, ...

Quick start:
  from texture_recolor import PixelBuffer, detect_color_regions, assign_region_targets
  regions = detect_color_regions(buffer, 3, seed=1)
  regions = assign_region_targets(regions, {regions[0].id: "#aa5522"})
  out = apply_multi_region_adjustment(buffer, regions)
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import constants
from . import core_types
from . import utils

from .core_types import (  # noqa: E402
    ColorRegion,
    ColorReplacement,
    HSLColor,
    PixelBuffer,
    UnknownRegionError,
)
from .dominant import apply_global_adjustment, get_dominant_color  # noqa: E402
from .regions import (  # noqa: E402
    assign_region_targets,
    centroid_to_hex,
    detect_color_regions,
)
from .masks import (  # noqa: E402
    generate_region_mask,
    generate_region_masks,
    generate_selection_mask,
    visualize_mask,
)
from .composite import apply_multi_region_adjustment  # noqa: E402
from .selection import apply_replacements, calculate_average_source_color  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "constants",
    "core_types",
    "utils",
    "ColorRegion",
    "ColorReplacement",
    "HSLColor",
    "PixelBuffer",
    "UnknownRegionError",
    "get_dominant_color",
    "apply_global_adjustment",
    "detect_color_regions",
    "assign_region_targets",
    "centroid_to_hex",
    "generate_region_mask",
    "generate_region_masks",
    "generate_selection_mask",
    "visualize_mask",
    "apply_multi_region_adjustment",
    "apply_replacements",
    "calculate_average_source_color",
]
