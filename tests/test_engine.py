"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

import pytest

from services.bucket_service import DistanceBucket
from services.ppi import Corrections, Curve, EffortRun, SimpleRun, explain_run, score, score_run
from utils.errors import InvalidInput, Unclassifiable


def test_simple_run_at_baseline() -> None:
    result = score_run(SimpleRun(distance_m=5000.0, elapsed_sec=780.0))
    assert result.points == pytest.approx(1000.0, abs=1e-6)
    assert result.bucket is DistanceBucket.KM_3_8
    assert result.curve_version == "ppi.purdy.v1"
    assert result.performance_ratio == pytest.approx(1.0)
    assert result.baseline_time_sec == pytest.approx(780.0)
    assert result.segment_count == 0


def test_corrections_shift_the_scored_time() -> None:
    run = SimpleRun(5000.0, 800.0, Corrections(elevation_adj_sec=-20.0))
    assert score_run(run).points == pytest.approx(1000.0, abs=1e-6)


def test_effort_run_without_trace_matches_simple_run() -> None:
    effort = EffortRun(distance_m=10000.0, elapsed_sec=3000.0, heart_rate_trace=[], max_bpm=190)
    simple = SimpleRun(distance_m=10000.0, elapsed_sec=3000.0)
    assert score_run(effort).points == score_run(simple).points
    assert score_run(effort).segment_count == 0


def test_effort_run_is_segmented(interval_trace) -> None:
    run = EffortRun(
        distance_m=6000.0,
        elapsed_sec=1800.0,
        heart_rate_trace=interval_trace,
        max_bpm=190,
        baseline_bpm=100,
    )
    result = score_run(run)
    assert result.segment_count == 3
    assert result.bucket is DistanceBucket.KM_3_8
    assert 100.0 <= result.points <= 2000.0
    # Each segment is a 2 km, 600 s mini-run; two of three carry a time penalty.
    assert result.points < score(2000.0, 600.0)


def test_transparent_curve_has_no_baseline() -> None:
    result = score_run(SimpleRun(5000.0, 3000.0), Curve.TRANSPARENT)
    assert result.curve_version == "ppi.v0.transparent"
    assert result.performance_ratio is None
    assert result.baseline_time_sec is None
    assert result.points == pytest.approx(score(5000.0, 3000.0, "transparent"))


def test_invalid_runs_raise() -> None:
    with pytest.raises(InvalidInput):
        score_run(SimpleRun(0.0, 100.0))
    with pytest.raises(InvalidInput):
        score_run(SimpleRun(5000.0, -1.0))
    with pytest.raises(InvalidInput):
        score_run(SimpleRun(5000.0, 100.0, Corrections(elevation_adj_sec=-200.0)))
    with pytest.raises(InvalidInput):
        score_run(SimpleRun(5000.0, 1500.0), "vdot")


def test_unclassifiable_is_an_invalid_input() -> None:
    assert issubclass(Unclassifiable, InvalidInput)


def test_explain_run() -> None:
    run = SimpleRun(5000.0, 800.0, Corrections(elevation_adj_sec=-20.0))
    info = explain_run(run)
    assert info.raw_points == pytest.approx(score(5000.0, 800.0))
    assert info.corrected_points == pytest.approx(1000.0, abs=1e-6)
    assert info.average_speed_mps == pytest.approx(6.25)
    assert info.average_pace_sec_per_km == pytest.approx(160.0)
    assert info.corrections.total == -20.0
    assert info.bucket is DistanceBucket.KM_3_8
    assert info.curve_label == "Purdy v1"
    assert "baseline_time" in info.formula
