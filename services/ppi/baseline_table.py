"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Elite baseline times interpolated from reference anchors.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from config import REFERENCE_ANCHORS
from utils.errors import ConfigError, InvalidInput


@dataclass(frozen=True)
class BaselineAnchor:
    distance_m: float
    elite_time_sec: float


class BaselineTable:
    """Sorted (distance, elite time) anchors with log-log interpolation.

    Between two anchors ln(time) is linear in ln(distance), which keeps the
    power-law shape of elite performances. Outside the anchored range the
    nearest anchor's time is returned unchanged.
    """

    def __init__(self, anchors: Sequence[BaselineAnchor]) -> None:
        anchors = tuple(anchors)
        if len(anchors) < 2:
            raise ConfigError(f"Baseline table needs at least two anchors, got {len(anchors)}")
        for anchor in anchors:
            if not (
                math.isfinite(anchor.distance_m)
                and math.isfinite(anchor.elite_time_sec)
                and anchor.distance_m > 0
                and anchor.elite_time_sec > 0
            ):
                raise ConfigError(f"Anchor values must be positive and finite: {anchor}")
        for prev, nxt in zip(anchors, anchors[1:]):
            if nxt.distance_m <= prev.distance_m:
                raise ConfigError(
                    f"Anchor distances must be strictly increasing: "
                    f"{prev.distance_m} then {nxt.distance_m}"
                )
        self._anchors: Tuple[BaselineAnchor, ...] = anchors
        self._distances = [a.distance_m for a in anchors]
        self._log_distances = [math.log(a.distance_m) for a in anchors]
        self._log_times = [math.log(a.elite_time_sec) for a in anchors]

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, float]]) -> "BaselineTable":
        return cls([BaselineAnchor(float(d), float(t)) for d, t in pairs])

    @property
    def anchors(self) -> Tuple[BaselineAnchor, ...]:
        return self._anchors

    def baseline_time(self, distance_m: float) -> float:
        """Return the elite baseline time (seconds) for a distance in meters."""
        if not math.isfinite(distance_m) or distance_m <= 0:
            raise InvalidInput(f"Distance must be positive, got {distance_m}")
        first, last = self._anchors[0], self._anchors[-1]
        if distance_m <= first.distance_m:
            return first.elite_time_sec
        if distance_m >= last.distance_m:
            return last.elite_time_sec

        hi = bisect.bisect_right(self._distances, distance_m)
        lo = hi - 1
        log_d = math.log(distance_m)
        ratio = (log_d - self._log_distances[lo]) / (
            self._log_distances[hi] - self._log_distances[lo]
        )
        log_t = self._log_times[lo] + ratio * (self._log_times[hi] - self._log_times[lo])
        return math.exp(log_t)

    def closest_anchor(self, distance_m: float) -> Optional[BaselineAnchor]:
        if not math.isfinite(distance_m):
            return None
        return min(self._anchors, key=lambda a: abs(a.distance_m - distance_m))


REFERENCE_TABLE = BaselineTable.from_pairs(REFERENCE_ANCHORS)
