"""
Pace, duration and speed display helpers.

Pace is always expressed in seconds per kilometer internally; these helpers
only render the `m:ss` strings shown to runners.
"""

from __future__ import annotations

import math
from typing import Optional


def mps_to_sec_per_km(speed_mps: float) -> float:
    if speed_mps == 0:
        return math.inf
    return 1000.0 / speed_mps


def fmt_pace(sec_per_km: Optional[float]) -> str:
    """Format a pace as `m:ss` (per km)."""
    if sec_per_km is None or not math.isfinite(sec_per_km) or sec_per_km < 0:
        return ""
    total = int(round(sec_per_km))
    minutes, seconds = divmod(total, 60)
    return f"{minutes}:{seconds:02d}"


def fmt_duration(seconds: Optional[float]) -> str:
    """Format a duration as `h:mm:ss`, `m:ss`, or `Ns` under a minute."""
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return ""
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    if minutes:
        return f"{minutes}:{secs:02d}"
    return f"{secs}s"


def fmt_km(meters: Optional[float]) -> str:
    if meters is None:
        return ""
    return f"{meters / 1000.0:.1f} km"
