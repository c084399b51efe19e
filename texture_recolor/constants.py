# texture_recolor/constants.py
"""
Tunables used across the project.

- Pixel eligibility and sampling (ALPHA_THRESHOLD, *_STRIDE)
- Region detection (REGION_*, KMEANS_*)
- Mask falloff (FALLOFF_*, MASK_*)
- Selection / replacement (TOLERANCE_*, SELECTION_*, EDGE_*)
- Hue damping for near-grey pixels and targets (DAMP_*, ADOPT_*)
- Region naming buckets and mask overlay colours
"""
from __future__ import annotations

from typing import List, Tuple

# =================
# Pixels / sampling
# =================
ALPHA_THRESHOLD: int = 128  # alpha < this is ignored by analysis
MID_GRAY: Tuple[int, int, int] = (128, 128, 128)
DOMINANT_SAMPLE_STRIDE: int = 10  # every 10th pixel
CLUSTER_SAMPLE_STRIDE: int = 4  # every 4th pixel

# =================
# Region detection
# =================
REGION_COUNT_MIN: int = 2
REGION_COUNT_MAX: int = 4
REGION_COUNT_DEFAULT: int = 2
KMEANS_MAX_ITERATIONS: int = 10
KMEANS_CONVERGENCE: float = 1.0  # max centroid move, distance units

# ============
# Mask falloff
# ============
FALLOFF_MIN: float = 50.0  # sharpness 1.0
FALLOFF_RANGE: float = 1950.0  # sharpness 0.0 -> 2000
SHARPNESS_DEFAULT: float = 0.8
MASK_WEIGHT_EPS: float = 0.001  # below this a region is skipped when compositing

# ======================
# Selection / replacement
# ======================
TOLERANCE_SCALE: float = 1.5  # tolerance 100 -> max distance 150
TOLERANCE_DEFAULT: float = 30.0
SELECTION_CURVE: float = 0.5  # mask weight = strength ** 0.5
EDGE_BLEND_CURVE: float = 0.7  # blend = strength ** 0.7

# ===========
# Hue damping
# ===========
DAMP_TARGET_SAT: float = 30.0  # target saturation giving full hue shift
DAMP_PIXEL_SAT: float = 20.0  # pixel saturation giving full hue shift
ADOPT_SAT_LOW: float = 8.0  # below: take the target hue outright
ADOPT_SAT_HIGH: float = 20.0  # at/above: full shift

# ==============
# Region naming
# ==============
NEUTRAL_SAT_MAX: float = 15.0
DARK_L_MAX: float = 30.0
LIGHT_L_MIN: float = 70.0

# (upper hue bound exclusive, name); red also covers [345, 360)
HUE_NAMES: List[Tuple[float, str]] = [
    (15.0, "Red"),
    (45.0, "Orange"),
    (75.0, "Yellow"),
    (150.0, "Green"),
    (195.0, "Cyan"),
    (255.0, "Blue"),
    (285.0, "Purple"),
    (345.0, "Magenta"),
    (360.0, "Red"),
]

# ===================
# Mask visualisation
# ===================
REGION_MASK_COLOUR: Tuple[int, int, int] = (74, 144, 226)
REGION_MASK_BACKGROUND: int = 40
SELECTION_MASK_COLOUR: Tuple[int, int, int] = (255, 100, 100)
SELECTION_MASK_BACKGROUND: int = 30
