"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

# ==============================================================================
# SCORING BOUNDS
# ==============================================================================

MIN_POINTS = 100.0
MAX_POINTS = 2000.0
ELITE_POINTS = 1000.0

# Purdy curve: points = ELITE_POINTS * (elapsed / baseline) ** -PURDY_ALPHA
PURDY_ALPHA = 2.0

# Transparent v0 curve: points = 350 * v**0.95 * d**0.05
TRANSPARENT_SCALE = 350.0
TRANSPARENT_SPEED_EXPONENT = 0.95
TRANSPARENT_DISTANCE_EXPONENT = 0.05
TRANSPARENT_MAX_POINTS = 1200.0

# ==============================================================================
# INVERSION (bisection)
# ==============================================================================

BISECTION_ITERATIONS = 50
BISECTION_FAST_TIME_SEC = 1e-3
# Upper bracket as a multiple of the baseline time. 4x baseline scores 62.5
# points before clamping, so every target above MIN_POINTS lies inside.
BISECTION_SLOW_FACTOR = 4.0

# ==============================================================================
# HEART RATE SEGMENTATION
# ==============================================================================

HR_JUMP_THRESHOLD_BPM = 10.0
HR_DEVIATION_THRESHOLD_BPM = 15.0
DEFAULT_BASELINE_HR_FRACTION = 0.6

# (lower intensity bound, time adjustment fraction), checked top-down
EFFORT_ADJUSTMENT_BANDS = (
    (0.8, 0.15),
    (0.6, 0.08),
    (0.4, 0.03),
)
LOW_EFFORT_INTENSITY = 0.2
LOW_EFFORT_ADJUSTMENT = -0.05

# %HRmax lower bounds for zones 5..2; anything below is zone 1
HR_ZONE_FLOORS = (
    (90.0, 5),
    (80.0, 4),
    (70.0, 3),
    (60.0, 2),
)

# ==============================================================================
# CHALLENGES
# ==============================================================================

CHALLENGE_MAX_TARGET_POINTS = MAX_POINTS - 1.0
SURPRISE_DELTA_RANGE = (1.0, 8.0)
