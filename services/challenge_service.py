"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Improvement challenges built from per-band historical bests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from streamlit.logger import get_logger

from services.bucket_service import BUCKET_ORDER, BucketRecord, DistanceBucket
from services.ppi.curves import Curve, ScoreCurve, get_curve
from utils.constants import CHALLENGE_MAX_TARGET_POINTS, SURPRISE_DELTA_RANGE
from utils.formatting import fmt_duration, fmt_km, fmt_pace
from utils.ids import new_id

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChallengeOption:
    id: str
    title: str
    description: str
    target_pace_sec_per_km: float
    target_duration_sec: float
    target_distance_m: float
    expected_points: float
    bucket: DistanceBucket


@dataclass(frozen=True)
class ChallengeFlavor:
    key: str
    title: str
    preferred_bucket: DistanceBucket
    delta_points: float
    template: str


FLAVORS: Tuple[ChallengeFlavor, ...] = (
    ChallengeFlavor(
        key="short_fierce",
        title="Short & Fierce",
        preferred_bucket=DistanceBucket.KM_1_3,
        delta_points=5.0,
        template="Hold {pace}/km over {distance} ({duration}) to top your best {band} effort",
    ),
    ChallengeFlavor(
        key="tempo_boost",
        title="Tempo Boost",
        preferred_bucket=DistanceBucket.KM_3_8,
        delta_points=3.0,
        template="Sustain {pace}/km for {distance} to beat your tempo index",
    ),
    ChallengeFlavor(
        key="ease_into_it",
        title="Ease Into It",
        preferred_bucket=DistanceBucket.KM_8_15,
        delta_points=2.0,
        template="Cruise {distance} at {pace}/km and still crack your long-run index",
    ),
)

SURPRISE_KEY = "surprise"
SURPRISE_TITLE = "Surprise Me"

DEFAULT_CHALLENGES: Tuple[ChallengeOption, ...] = (
    ChallengeOption(
        id="default_1",
        title="Short & Fierce",
        description="Run 1 km in 4:30 to establish your baseline",
        target_pace_sec_per_km=270.0,
        target_duration_sec=270.0,
        target_distance_m=1000.0,
        expected_points=500.0,
        bucket=DistanceBucket.KM_1_3,
    ),
    ChallengeOption(
        id="default_2",
        title="Tempo Boost",
        description="Run 5 km in 25:00 to establish your baseline",
        target_pace_sec_per_km=300.0,
        target_duration_sec=1500.0,
        target_distance_m=5000.0,
        expected_points=400.0,
        bucket=DistanceBucket.KM_3_8,
    ),
    ChallengeOption(
        id="default_3",
        title="Ease Into It",
        description="Run 10 km in 55:00 to establish your baseline",
        target_pace_sec_per_km=330.0,
        target_duration_sec=3300.0,
        target_distance_m=10000.0,
        expected_points=350.0,
        bucket=DistanceBucket.KM_8_15,
    ),
    ChallengeOption(
        id="default_4",
        title="Surprise Me",
        description="Run 3 km in 15:00 for a playful first benchmark",
        target_pace_sec_per_km=300.0,
        target_duration_sec=900.0,
        target_distance_m=3000.0,
        expected_points=450.0,
        bucket=DistanceBucket.KM_3_8,
    ),
)


def fallback_bucket(preferred: DistanceBucket, available: Sequence[DistanceBucket]) -> Optional[DistanceBucket]:
    """Preferred band if it has data, else the next band up with data, wrapping around."""
    if not available:
        return None
    start = BUCKET_ORDER.index(preferred)
    for offset in range(len(BUCKET_ORDER)):
        candidate = BUCKET_ORDER[(start + offset) % len(BUCKET_ORDER)]
        if candidate in available:
            return candidate
    return None


@dataclass
class ChallengeGenerator:
    """Turns band bests into pace/duration targets by inverting the score curve."""

    curve: Union[Curve, str] = Curve.PURDY

    def __post_init__(self) -> None:
        self._curve: ScoreCurve = get_curve(self.curve)

    def target_points(self, best: float, delta: float) -> float:
        """best + delta, kept strictly inside the invertible range of the curve."""
        ceiling = min(CHALLENGE_MAX_TARGET_POINTS, self._curve.max_points - 1.0)
        return float(min(max(best + delta, self._curve.min_points + 1.0), ceiling))

    def generate(
        self,
        stats: Mapping[DistanceBucket, BucketRecord],
        rng: np.random.Generator,
    ) -> List[ChallengeOption]:
        bests: Dict[DistanceBucket, float] = {
            bucket: float(record.historical_best_points)
            for bucket, record in stats.items()
            if record.has_data and record.historical_best_points is not None
        }
        available = [bucket for bucket in BUCKET_ORDER if bucket in bests]
        if not available:
            logger.warning("No historical bests yet, returning default challenges")
            return list(DEFAULT_CHALLENGES)

        challenges = []
        for flavor in FLAVORS:
            bucket = fallback_bucket(flavor.preferred_bucket, available)
            if bucket is None:
                continue
            if bucket != flavor.preferred_bucket:
                logger.warning(
                    "%s: no data for %s, using %s",
                    flavor.key,
                    flavor.preferred_bucket.name,
                    bucket.name,
                )
            target = self.target_points(bests[bucket], flavor.delta_points)
            challenges.append(self._build(flavor.key, flavor.title, flavor.template, bucket, target, rng))

        surprise_bucket = available[int(rng.integers(0, len(available)))]
        delta = float(rng.uniform(*SURPRISE_DELTA_RANGE))
        target = self.target_points(bests[surprise_bucket], delta)
        challenges.append(
            self._build(
                SURPRISE_KEY,
                SURPRISE_TITLE,
                "A playful but beatable {band} run: {distance} at {pace}/km in {duration}",
                surprise_bucket,
                target,
                rng,
            )
        )
        return challenges

    def _build(
        self,
        key: str,
        title: str,
        template: str,
        bucket: DistanceBucket,
        target_points: float,
        rng: np.random.Generator,
    ) -> ChallengeOption:
        distance_m = float(rng.uniform(bucket.sample_min_km, bucket.sample_max_km)) * 1000.0
        duration_sec = self._curve.required_time(distance_m, target_points)
        pace = duration_sec / (distance_m / 1000.0)
        return ChallengeOption(
            id=new_id(key, rng),
            title=title,
            description=template.format(
                pace=fmt_pace(pace),
                duration=fmt_duration(duration_sec),
                distance=fmt_km(distance_m),
                band=bucket.label,
            ),
            target_pace_sec_per_km=pace,
            target_duration_sec=duration_sec,
            target_distance_m=distance_m,
            expected_points=target_points,
            bucket=bucket,
        )


def generate_challenges(
    stats: Mapping[DistanceBucket, BucketRecord],
    rng: Optional[np.random.Generator] = None,
    curve: Union[Curve, str] = Curve.PURDY,
    seed: Optional[int] = None,
) -> List[ChallengeOption]:
    if rng is None:
        rng = np.random.default_rng(seed)
    return ChallengeGenerator(curve).generate(stats, rng)
