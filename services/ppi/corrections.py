"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from utils.errors import InvalidInput


def combine(
    elevation_adj_sec: float = 0.0,
    temperature_adj_sec: float = 0.0,
    heart_rate_adj_sec: float = 0.0,
) -> float:
    """Sum the time adjustments (seconds, negative is a bonus) into one delta.

    No clamping: the scoring curve's clamp is the only bound applied.
    """
    total = float(elevation_adj_sec) + float(temperature_adj_sec) + float(heart_rate_adj_sec)
    if not math.isfinite(total):
        raise InvalidInput("Corrections must be finite numbers of seconds")
    return total


@dataclass(frozen=True)
class Corrections:
    elevation_adj_sec: float = 0.0
    temperature_adj_sec: float = 0.0
    heart_rate_adj_sec: float = 0.0

    @property
    def total(self) -> float:
        return combine(self.elevation_adj_sec, self.temperature_adj_sec, self.heart_rate_adj_sec)

    def apply(self, elapsed_sec: float) -> float:
        return float(elapsed_sec) + self.total

    def scaled(self, fraction: float) -> "Corrections":
        return Corrections(
            elevation_adj_sec=self.elevation_adj_sec * fraction,
            temperature_adj_sec=self.temperature_adj_sec * fraction,
            heart_rate_adj_sec=self.heart_rate_adj_sec * fraction,
        )

    def with_heart_rate(self, heart_rate_adj_sec: float) -> "Corrections":
        return replace(self, heart_rate_adj_sec=heart_rate_adj_sec)
