"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Scoring curves: forward scoring (distance, time -> points) and the numeric
inverse (distance, points -> time or pace).

The curve is always an explicit argument so callers scoring with different
curves never interfere with each other.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Tuple, Union

from services.ppi.baseline_table import REFERENCE_TABLE, BaselineTable
from utils.constants import (
    BISECTION_FAST_TIME_SEC,
    BISECTION_ITERATIONS,
    BISECTION_SLOW_FACTOR,
    ELITE_POINTS,
    MAX_POINTS,
    MIN_POINTS,
    PURDY_ALPHA,
    TRANSPARENT_DISTANCE_EXPONENT,
    TRANSPARENT_MAX_POINTS,
    TRANSPARENT_SCALE,
    TRANSPARENT_SPEED_EXPONENT,
)
from utils.errors import InvalidInput, OutOfRange


class Curve(str, Enum):
    PURDY = "purdy"
    TRANSPARENT = "transparent"


def require_positive(name: str, value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidInput(f"{name} must be positive and finite, got {value}")
    return value


class ScoreCurve:
    """Shared clamping and bisection logic; subclasses supply the raw curve."""

    version = ""
    label = ""
    formula = ""
    min_points = MIN_POINTS
    max_points = MAX_POINTS

    def _raw_points(self, distance_m: float, elapsed_sec: float) -> float:
        raise NotImplementedError

    def _bracket(self, distance_m: float) -> Tuple[float, float]:
        """(fast, slow) times whose scores sit at the max and min clamps."""
        raise NotImplementedError

    def baseline_time(self, distance_m: float) -> Optional[float]:
        return None

    def performance_ratio(self, distance_m: float, elapsed_sec: float) -> Optional[float]:
        return None

    def score(self, distance_m: float, elapsed_sec: float) -> float:
        distance_m = require_positive("distance_m", distance_m)
        elapsed_sec = require_positive("elapsed_sec", elapsed_sec)
        raw = self._raw_points(distance_m, elapsed_sec)
        if math.isnan(raw):
            raise InvalidInput(f"Score undefined for distance={distance_m}, elapsed={elapsed_sec}")
        return min(max(raw, self.min_points), self.max_points)

    def required_time(
        self,
        distance_m: float,
        target_points: float,
        iterations: int = BISECTION_ITERATIONS,
    ) -> float:
        """Slowest elapsed time (seconds) whose score still reaches target_points."""
        distance_m = require_positive("distance_m", distance_m)
        target_points = require_positive("target_points", target_points)
        if target_points <= self.min_points:
            raise OutOfRange(
                f"Target {target_points} is at or below the minimum of {self.min_points} points"
            )
        if target_points >= self.max_points:
            raise OutOfRange(
                f"Target {target_points} is at or above the maximum of {self.max_points} points"
            )

        lo, hi = self._bracket(distance_m)
        for _ in range(iterations):
            mid = 0.5 * (lo + hi)
            if self.score(distance_m, mid) >= target_points:
                lo = mid
            else:
                hi = mid
        return lo

    def required_pace(
        self,
        distance_m: float,
        target_points: float,
        iterations: int = BISECTION_ITERATIONS,
    ) -> float:
        """Required pace in seconds per km to reach target_points over distance_m."""
        seconds = self.required_time(distance_m, target_points, iterations)
        return seconds / (distance_m / 1000.0)


class PurdyCurve(ScoreCurve):
    """Elite-baseline curve: matching the baseline time scores exactly 1000."""

    version = "ppi.purdy.v1"
    label = "Purdy v1"
    formula = "PPI = 1000 × (actual_time / baseline_time)^-2"

    def __init__(self, table: BaselineTable = REFERENCE_TABLE) -> None:
        self.table = table

    def baseline_time(self, distance_m: float) -> Optional[float]:
        return self.table.baseline_time(distance_m)

    def performance_ratio(self, distance_m: float, elapsed_sec: float) -> Optional[float]:
        """actual / baseline: 1.0 matches the elite time, above 1.0 is slower."""
        elapsed_sec = require_positive("elapsed_sec", elapsed_sec)
        return elapsed_sec / self.table.baseline_time(distance_m)

    def _raw_points(self, distance_m: float, elapsed_sec: float) -> float:
        ratio = elapsed_sec / self.table.baseline_time(distance_m)
        # Saturate before the power so tiny ratios cannot overflow.
        if ratio <= (ELITE_POINTS / self.max_points) ** (1.0 / PURDY_ALPHA):
            return self.max_points
        return ELITE_POINTS * ratio ** (-PURDY_ALPHA)

    def _bracket(self, distance_m: float) -> Tuple[float, float]:
        return BISECTION_FAST_TIME_SEC, self.table.baseline_time(distance_m) * BISECTION_SLOW_FACTOR


class TransparentCurve(ScoreCurve):
    """Legacy v0 velocity curve with light distance scaling."""

    version = "ppi.v0.transparent"
    label = "Transparent v0"
    formula = "PPI = 350.0 × (speed^0.95) × (distance^0.05)"
    max_points = TRANSPARENT_MAX_POINTS

    def _raw_points(self, distance_m: float, elapsed_sec: float) -> float:
        speed = distance_m / elapsed_sec
        return (
            TRANSPARENT_SCALE
            * speed ** TRANSPARENT_SPEED_EXPONENT
            * distance_m ** TRANSPARENT_DISTANCE_EXPONENT
        )

    def _bracket(self, distance_m: float) -> Tuple[float, float]:
        # Speed at which the raw curve crosses the lower clamp; half of it is
        # safely below.
        floor_speed = (
            self.min_points / (TRANSPARENT_SCALE * distance_m ** TRANSPARENT_DISTANCE_EXPONENT)
        ) ** (1.0 / TRANSPARENT_SPEED_EXPONENT)
        return BISECTION_FAST_TIME_SEC, 2.0 * distance_m / floor_speed


_CURVES = {
    Curve.PURDY: PurdyCurve(),
    Curve.TRANSPARENT: TransparentCurve(),
}


def get_curve(curve: Union[Curve, str] = Curve.PURDY) -> ScoreCurve:
    try:
        return _CURVES[Curve(curve)]
    except ValueError as exc:
        raise InvalidInput(f"Unknown curve {curve!r}") from exc


def baseline_time(distance_m: float) -> float:
    return REFERENCE_TABLE.baseline_time(distance_m)


def score(distance_m: float, elapsed_sec: float, curve: Union[Curve, str] = Curve.PURDY) -> float:
    return get_curve(curve).score(distance_m, elapsed_sec)


def required_time(
    distance_m: float, target_points: float, curve: Union[Curve, str] = Curve.PURDY
) -> float:
    return get_curve(curve).required_time(distance_m, target_points)


def required_pace(
    distance_m: float, target_points: float, curve: Union[Curve, str] = Curve.PURDY
) -> float:
    return get_curve(curve).required_pace(distance_m, target_points)
