"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Distance bands and per-band historical bests.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

from streamlit.logger import get_logger

from utils.errors import InvalidInput, Unclassifiable

logger = get_logger(__name__)


class DistanceBucket(Enum):
    """Half-open kilometre bands [min_km, max_km) covering every positive distance.

    KM_1_3 also takes distances under 1 km so the partition is total. The
    sample range is where challenge distances are drawn from.
    """

    KM_1_3 = ("1-3 km", 0.0, 3.0, 1.0, 3.0)
    KM_3_8 = ("3-8 km", 3.0, 8.0, 3.0, 8.0)
    KM_8_15 = ("8-15 km", 8.0, 15.0, 8.0, 15.0)
    KM_15_25 = ("15-25 km", 15.0, 25.0, 15.0, 25.0)
    KM_25P = ("25+ km", 25.0, math.inf, 25.0, 42.195)

    def __init__(self, label: str, min_km: float, max_km: float, sample_min_km: float, sample_max_km: float) -> None:
        self.label = label
        self.min_km = min_km
        self.max_km = max_km
        self.sample_min_km = sample_min_km
        self.sample_max_km = sample_max_km

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km < self.max_km


BUCKET_ORDER: List[DistanceBucket] = list(DistanceBucket)


def classify(distance_m: float) -> DistanceBucket:
    """Return the unique band containing a distance in meters."""
    try:
        distance_m = float(distance_m)
    except (TypeError, ValueError) as exc:
        raise Unclassifiable(f"Distance must be a number, got {distance_m!r}") from exc
    if not math.isfinite(distance_m) or distance_m <= 0:
        raise Unclassifiable(f"Cannot classify non-positive or non-finite distance {distance_m}")
    distance_km = distance_m / 1000.0
    for bucket in BUCKET_ORDER:
        if bucket.contains(distance_km):
            return bucket
    raise Unclassifiable(f"No band contains {distance_m} m")


def parse_bucket(value: object) -> DistanceBucket:
    if isinstance(value, DistanceBucket):
        return value
    try:
        return DistanceBucket[str(value).strip().upper()]
    except KeyError as exc:
        raise InvalidInput(f"Unknown distance bucket {value!r}") from exc


@dataclass(frozen=True)
class BucketRecord:
    bucket: DistanceBucket
    historical_best_points: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.historical_best_points is not None


class PerformanceBucketer:
    """Owns the best score per band.

    `record_result` is a compare-and-set guarded by a lock so concurrent
    "run finished" events cannot lose an update.
    """

    def __init__(self, bests: Optional[Mapping[DistanceBucket, float]] = None) -> None:
        self._lock = threading.Lock()
        self._bests: Dict[DistanceBucket, float] = {}
        for bucket, points in (bests or {}).items():
            self.record_result(bucket, points)

    @staticmethod
    def classify(distance_m: float) -> DistanceBucket:
        return classify(distance_m)

    def record_result(self, bucket: DistanceBucket, points: float) -> bool:
        """Store points as the band's best if strictly higher. Returns True when updated."""
        bucket = parse_bucket(bucket)
        try:
            points = float(points)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Points must be a number, got {points!r}") from exc
        if not math.isfinite(points):
            raise InvalidInput(f"Points must be finite, got {points}")
        with self._lock:
            current = self._bests.get(bucket, -math.inf)
            if points <= current:
                return False
            self._bests[bucket] = points
        logger.debug("New best for %s: %.1f (was %s)", bucket.name, points, current)
        return True

    def record_score(self, distance_m: float, points: float) -> DistanceBucket:
        bucket = classify(distance_m)
        self.record_result(bucket, points)
        return bucket

    def historical_best(self, bucket: DistanceBucket) -> Optional[float]:
        with self._lock:
            return self._bests.get(parse_bucket(bucket))

    def stats(self) -> Dict[DistanceBucket, BucketRecord]:
        """Every band in partition order, including bands without data."""
        with self._lock:
            snapshot = dict(self._bests)
        return {bucket: BucketRecord(bucket, snapshot.get(bucket)) for bucket in BUCKET_ORDER}

    def to_records(self) -> List[Dict[str, object]]:
        """Plain rows for an external persistence layer."""
        return [
            {
                "bucket": record.bucket.name,
                "historicalBestPoints": record.historical_best_points,
                "hasData": record.has_data,
            }
            for record in self.stats().values()
        ]

    @classmethod
    def from_records(cls, rows: Iterable[Mapping[str, object]]) -> "PerformanceBucketer":
        bucketer = cls()
        for row in rows:
            best = row.get("historicalBestPoints")
            if best is None or best == "":
                continue
            if isinstance(best, float) and math.isnan(best):
                continue
            bucketer.record_result(parse_bucket(row.get("bucket")), best)  # type: ignore[arg-type]
        return bucketer
