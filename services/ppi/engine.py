"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Run scoring entry point.

A run arrives either as a `SimpleRun` or as an `EffortRun` carrying a
heart-rate trace; `score_run` dispatches on that once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from streamlit.logger import get_logger

from services.bucket_service import DistanceBucket, classify
from services.ppi.corrections import Corrections
from services.ppi.curves import Curve, get_curve, require_positive
from services.ppi.effort_segmentation import EffortSegmenter, HeartRateSample
from utils.formatting import mps_to_sec_per_km

logger = get_logger(__name__)


@dataclass(frozen=True)
class SimpleRun:
    distance_m: float
    elapsed_sec: float
    corrections: Corrections = field(default_factory=Corrections)


@dataclass(frozen=True)
class EffortRun:
    distance_m: float
    elapsed_sec: float
    heart_rate_trace: Sequence[HeartRateSample]
    max_bpm: float
    baseline_bpm: Optional[float] = None
    corrections: Corrections = field(default_factory=Corrections)


RunInput = Union[SimpleRun, EffortRun]


@dataclass(frozen=True)
class ScoreResult:
    points: float
    bucket: DistanceBucket
    curve_version: str
    performance_ratio: Optional[float] = None
    baseline_time_sec: Optional[float] = None
    segment_count: int = 0


@dataclass(frozen=True)
class TransparencyInfo:
    distance_m: float
    elapsed_sec: float
    average_speed_mps: float
    average_pace_sec_per_km: float
    corrections: Corrections
    raw_points: float
    corrected_points: float
    formula: str
    bucket: DistanceBucket
    curve_version: str
    curve_label: str
    performance_ratio: Optional[float] = None
    baseline_time_sec: Optional[float] = None


def score_run(run: RunInput, curve: Union[Curve, str] = Curve.PURDY) -> ScoreResult:
    """Score a finished run with the given curve."""
    scorer = get_curve(curve)
    distance_m = require_positive("distance_m", run.distance_m)
    elapsed_sec = require_positive("elapsed_sec", run.elapsed_sec)
    bucket = classify(distance_m)
    corrected_sec = run.corrections.apply(elapsed_sec)

    segment_count = 0
    if isinstance(run, EffortRun) and run.heart_rate_trace:
        segmenter = EffortSegmenter(run.max_bpm, run.baseline_bpm, curve)
        segments = segmenter.segment(run.heart_rate_trace, distance_m, elapsed_sec)
        points = segmenter.aggregate(segments, run.corrections)
        segment_count = len(segments)
    else:
        if isinstance(run, EffortRun):
            logger.warning("Effort run without heart-rate samples, scoring as a single unit")
        points = scorer.score(distance_m, corrected_sec)

    result = ScoreResult(
        points=points,
        bucket=bucket,
        curve_version=scorer.version,
        performance_ratio=scorer.performance_ratio(distance_m, corrected_sec),
        baseline_time_sec=scorer.baseline_time(distance_m),
        segment_count=segment_count,
    )
    logger.debug(
        "Scored %.0f m in %.0f s (%s): %.1f points",
        distance_m,
        elapsed_sec,
        scorer.version,
        points,
    )
    return result


def explain_run(run: RunInput, curve: Union[Curve, str] = Curve.PURDY) -> TransparencyInfo:
    """Breakdown of how a run's score was produced, for display."""
    scorer = get_curve(curve)
    result = score_run(run, curve)
    distance_m = float(run.distance_m)
    elapsed_sec = float(run.elapsed_sec)
    speed_mps = distance_m / elapsed_sec
    return TransparencyInfo(
        distance_m=distance_m,
        elapsed_sec=elapsed_sec,
        average_speed_mps=speed_mps,
        average_pace_sec_per_km=mps_to_sec_per_km(speed_mps),
        corrections=run.corrections,
        raw_points=scorer.score(distance_m, elapsed_sec),
        corrected_points=result.points,
        formula=scorer.formula,
        bucket=result.bucket,
        curve_version=scorer.version,
        curve_label=scorer.label,
        performance_ratio=result.performance_ratio,
        baseline_time_sec=result.baseline_time_sec,
    )
