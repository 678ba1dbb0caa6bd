"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Heart-rate based effort segmentation.

A run's heart-rate trace is cut into roughly constant-effort segments. Each
segment is scored as its own mini-run with a time adjustment derived from its
relative intensity, and the segment scores are averaged by distance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
from streamlit.logger import get_logger

from services.ppi.corrections import Corrections
from services.ppi.curves import Curve, ScoreCurve, get_curve
from utils.constants import (
    DEFAULT_BASELINE_HR_FRACTION,
    EFFORT_ADJUSTMENT_BANDS,
    HR_DEVIATION_THRESHOLD_BPM,
    HR_JUMP_THRESHOLD_BPM,
    HR_ZONE_FLOORS,
    LOW_EFFORT_ADJUSTMENT,
    LOW_EFFORT_INTENSITY,
)
from utils.errors import InvalidInput

logger = get_logger(__name__)


@dataclass(frozen=True)
class HeartRateSample:
    timestamp_ms: int
    bpm: float


@dataclass(frozen=True)
class EffortSegment:
    start_index: int
    end_index: int
    avg_bpm: float
    segment_distance_m: float
    segment_duration_sec: float

    @property
    def sample_count(self) -> int:
        return self.end_index - self.start_index + 1


def _positive(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInput(f"{name} must be positive, got {value}")
    return value


def default_baseline_bpm(max_bpm: float) -> int:
    return int(_positive("max_bpm", max_bpm) * DEFAULT_BASELINE_HR_FRACTION)


def effort_adjustment(avg_bpm: float, baseline_bpm: float, max_bpm: float) -> float:
    """Time adjustment fraction for a segment's average heart rate.

    Positive values are a time penalty for hard efforts, negative a bonus for
    easy ones. Zero when the heart-rate reserve is empty.
    """
    baseline_bpm = _positive("baseline_bpm", baseline_bpm)
    max_bpm = _positive("max_bpm", max_bpm)
    reserve = max_bpm - baseline_bpm
    if reserve <= 0:
        return 0.0
    intensity = (float(avg_bpm) - baseline_bpm) / reserve
    for floor, adjustment in EFFORT_ADJUSTMENT_BANDS:
        if intensity > floor:
            return adjustment
    if intensity < LOW_EFFORT_INTENSITY:
        return LOW_EFFORT_ADJUSTMENT
    return 0.0


def heart_rate_zone(bpm: float, max_bpm: float) -> int:
    """Zone 1..5 from the percentage of max heart rate."""
    pct = float(bpm) / _positive("max_bpm", max_bpm) * 100.0
    for floor, zone in HR_ZONE_FLOORS:
        if pct >= floor:
            return zone
    return 1


def average_heart_rate(trace: Sequence[HeartRateSample]) -> Optional[float]:
    if not trace:
        return None
    return float(np.mean([s.bpm for s in trace]))


def _sample_weights(trace: Sequence[HeartRateSample]) -> np.ndarray:
    """Per-sample share of the run's time.

    With strictly increasing positive timestamps each sample covers the gap
    up to the next one (the last sample gets the median gap). Otherwise every
    sample counts the same.
    """
    n = len(trace)
    timestamps = np.asarray([s.timestamp_ms for s in trace], dtype=float)
    if n > 1 and np.all(timestamps > 0):
        gaps = np.diff(timestamps)
        if np.all(gaps > 0):
            return np.append(gaps, np.median(gaps))
        logger.debug("Heart-rate timestamps not strictly increasing, apportioning by sample count")
    return np.ones(n, dtype=float)


def segment(
    trace: Sequence[HeartRateSample],
    total_distance_m: float,
    total_elapsed_sec: float,
) -> List[EffortSegment]:
    """Split a heart-rate trace into effort-homogeneous segments.

    A new segment starts when the jump from the previous sample exceeds 10 bpm
    or the sample deviates from the running segment average by more than
    15 bpm, provided the current segment already holds two samples.
    Segment distances and durations sum to the run totals.
    """
    total_distance_m = _positive("total_distance_m", total_distance_m)
    total_elapsed_sec = _positive("total_elapsed_sec", total_elapsed_sec)
    n = len(trace)
    if n == 0:
        return []

    bpm = np.asarray([s.bpm for s in trace], dtype=float)
    if not np.all(np.isfinite(bpm)) or np.any(bpm < 0):
        raise InvalidInput("Heart-rate samples must be finite, non-negative bpm values")

    if n == 1:
        return [EffortSegment(0, 0, float(bpm[0]), total_distance_m, total_elapsed_sec)]

    bounds = []
    start = 0
    hr_sum = bpm[0]
    count = 1
    for i in range(1, n):
        current = bpm[i]
        jump = abs(current - bpm[i - 1])
        deviation = abs(current - hr_sum / count)
        if (jump > HR_JUMP_THRESHOLD_BPM or deviation > HR_DEVIATION_THRESHOLD_BPM) and i > start + 1:
            bounds.append((start, i - 1))
            start = i
            hr_sum = current
            count = 1
        else:
            hr_sum += current
            count += 1
    bounds.append((start, n - 1))

    weights = _sample_weights(trace)
    total_weight = float(weights.sum())
    segments = []
    for first, last in bounds:
        samples = last - first + 1
        segments.append(
            EffortSegment(
                start_index=first,
                end_index=last,
                avg_bpm=float(bpm[first : last + 1].mean()),
                segment_distance_m=samples / n * total_distance_m,
                segment_duration_sec=float(weights[first : last + 1].sum()) / total_weight * total_elapsed_sec,
            )
        )
    logger.debug("Segmented %d heart-rate samples into %d segments", n, len(segments))
    return segments


@dataclass
class EffortSegmenter:
    """Scores a run from its heart-rate trace for one athlete's HR profile."""

    max_bpm: float
    baseline_bpm: Optional[float] = None
    curve: Union[Curve, str] = Curve.PURDY

    def __post_init__(self) -> None:
        self.max_bpm = _positive("max_bpm", self.max_bpm)
        if self.baseline_bpm is None:
            self.baseline_bpm = default_baseline_bpm(self.max_bpm)
        self.baseline_bpm = _positive("baseline_bpm", self.baseline_bpm)
        self._curve: ScoreCurve = get_curve(self.curve)

    def segment(
        self,
        trace: Sequence[HeartRateSample],
        total_distance_m: float,
        total_elapsed_sec: float,
    ) -> List[EffortSegment]:
        return segment(trace, total_distance_m, total_elapsed_sec)

    def effort_adjustment(self, avg_bpm: float) -> float:
        return effort_adjustment(avg_bpm, self.baseline_bpm, self.max_bpm)

    def score_segment(self, seg: EffortSegment, corrections: Corrections) -> float:
        hr_adj_sec = self.effort_adjustment(seg.avg_bpm) * seg.segment_duration_sec
        seg_corrections = corrections.with_heart_rate(corrections.heart_rate_adj_sec + hr_adj_sec)
        return self._curve.score(seg.segment_distance_m, seg_corrections.apply(seg.segment_duration_sec))

    def aggregate(
        self,
        segments: Sequence[EffortSegment],
        corrections: Corrections = Corrections(),
    ) -> float:
        """Distance-weighted mean of per-segment scores.

        Run-level corrections are shared between segments by duration.
        """
        if not segments:
            raise InvalidInput("Cannot aggregate an empty segment list")
        distances = np.asarray([s.segment_distance_m for s in segments], dtype=float)
        durations = np.asarray([s.segment_duration_sec for s in segments], dtype=float)
        total_duration = float(durations.sum())
        if distances.sum() <= 0 or total_duration <= 0:
            raise InvalidInput("Segments must cover a positive distance and duration")

        scores = [
            self.score_segment(seg, corrections.scaled(seg.segment_duration_sec / total_duration))
            for seg in segments
        ]
        return float(np.average(scores, weights=distances))

    def score(
        self,
        trace: Sequence[HeartRateSample],
        total_distance_m: float,
        total_elapsed_sec: float,
        corrections: Corrections = Corrections(),
    ) -> float:
        """Segment then aggregate; an empty trace scores the run as one unit."""
        segments = self.segment(trace, total_distance_m, total_elapsed_sec)
        if not segments:
            logger.warning("No heart-rate samples, scoring run without segmentation")
            return self._curve.score(total_distance_m, corrections.apply(total_elapsed_sec))
        return self.aggregate(segments, corrections)
