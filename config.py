"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

# Elite reference performances (distance in meters, time in seconds).
# Sorted by distance; used to interpolate baseline times for any distance.
REFERENCE_ANCHORS = (
    (1500.0, 230.0),     # 3:50
    (5000.0, 780.0),     # 13:00
    (10000.0, 1620.0),   # 27:00
    (21097.0, 3540.0),   # 59:00
    (42195.0, 7460.0),   # 2:04:20
)

# Tolerance windows (meters) used to pick best times over standard distances
STANDARD_DISTANCE_WINDOWS = {
    "best5kSec": (4900.0, 5100.0),
    "best10kSec": (9900.0, 10100.0),
    "bestHalfSec": (20900.0, 21100.0),
    "bestFullSec": (41900.0, 42200.0),
}

HISTORY_WINDOW_DAYS = 90
