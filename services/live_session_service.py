"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Progress tracking for an attempt at a challenge while the run is under way.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from services.challenge_service import ChallengeOption
from services.ppi.curves import Curve, get_curve
from services.ppi.engine import SimpleRun
from utils.errors import InvalidInput, PpiError


@dataclass(frozen=True)
class LiveSession:
    challenge: ChallengeOption
    start_epoch_ms: int
    current_distance_m: float = 0.0
    current_elapsed_sec: float = 0.0
    is_active: bool = True

    @property
    def current_pace_sec_per_km(self) -> Optional[float]:
        if self.current_distance_m <= 0:
            return None
        return self.current_elapsed_sec / (self.current_distance_m / 1000.0)

    def update(self, distance_m: float, elapsed_sec: float) -> "LiveSession":
        if not self.is_active:
            raise InvalidInput("Session already completed")
        if distance_m < 0 or elapsed_sec < 0:
            raise InvalidInput("Distance and elapsed time cannot be negative")
        return replace(self, current_distance_m=float(distance_m), current_elapsed_sec=float(elapsed_sec))

    def progress_fraction(self) -> float:
        """Share of the target distance covered, capped at 1."""
        if self.challenge.target_distance_m <= 0:
            return 0.0
        return min(self.current_distance_m / self.challenge.target_distance_m, 1.0)

    def is_on_target_pace(self, tolerance_sec_per_km: float = 10.0) -> bool:
        pace = self.current_pace_sec_per_km
        if pace is None:
            return False
        return abs(pace - self.challenge.target_pace_sec_per_km) <= tolerance_sec_per_km

    def projected_points(self, curve: Union[Curve, str] = Curve.PURDY) -> Optional[float]:
        """Score if the current pace were held over the full target distance."""
        pace = self.current_pace_sec_per_km
        if pace is None:
            return None
        distance_m = self.challenge.target_distance_m
        try:
            return get_curve(curve).score(distance_m, pace * distance_m / 1000.0)
        except PpiError:
            return None

    def complete(self) -> SimpleRun:
        if self.current_distance_m <= 0 or self.current_elapsed_sec <= 0:
            raise InvalidInput("Cannot complete a session without distance and time")
        return SimpleRun(distance_m=self.current_distance_m, elapsed_sec=self.current_elapsed_sec)
