"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

import pytest

from services.ppi.corrections import Corrections
from services.ppi.curves import score
from services.ppi.effort_segmentation import (
    EffortSegmenter,
    HeartRateSample,
    average_heart_rate,
    default_baseline_bpm,
    effort_adjustment,
    heart_rate_zone,
    segment,
)
from utils.errors import InvalidInput


def _trace(bpm, timestamps=None):
    if timestamps is None:
        timestamps = [0] * len(bpm)
    return [HeartRateSample(timestamp_ms=t, bpm=b) for t, b in zip(timestamps, bpm)]


def _assert_conserved(segments, distance, elapsed):
    assert sum(s.segment_distance_m for s in segments) == pytest.approx(distance, rel=1e-6)
    assert sum(s.segment_duration_sec for s in segments) == pytest.approx(elapsed, rel=1e-6)


def test_empty_trace_has_no_segments() -> None:
    assert segment([], 5000.0, 1500.0) == []


def test_single_sample_spans_whole_run() -> None:
    segments = segment(_trace([150]), 5000.0, 1500.0)
    assert len(segments) == 1
    seg = segments[0]
    assert (seg.start_index, seg.end_index) == (0, 0)
    assert seg.segment_distance_m == 5000.0
    assert seg.segment_duration_sec == 1500.0


def test_intervals_split_on_heart_rate_jumps(interval_trace) -> None:
    segments = segment(interval_trace, 6000.0, 1800.0)
    assert [(s.start_index, s.end_index) for s in segments] == [(0, 9), (10, 19), (20, 29)]
    assert [s.avg_bpm for s in segments] == [120.0, 165.0, 140.0]
    for s in segments:
        assert s.segment_distance_m == pytest.approx(2000.0)
        assert s.segment_duration_sec == pytest.approx(600.0)


def test_segments_cover_trace_contiguously(rng) -> None:
    bpm = list(rng.normal(150, 12, size=400))
    segments = segment(_trace(bpm), 10000.0, 3000.0)
    assert segments[0].start_index == 0
    assert segments[-1].end_index == len(bpm) - 1
    for prev, nxt in zip(segments, segments[1:]):
        assert nxt.start_index == prev.end_index + 1
    assert all(s.sample_count >= 2 for s in segments[:-1])


@pytest.mark.parametrize("with_timestamps", [False, True])
def test_totals_are_conserved(rng, with_timestamps) -> None:
    n = 300
    bpm = list(rng.normal(150, 15, size=n))
    timestamps = None
    if with_timestamps:
        gaps = rng.integers(500, 5000, size=n)
        timestamps = list(1_000 + gaps.cumsum())
    segments = segment(_trace(bpm, timestamps), 12345.6, 3777.7)
    _assert_conserved(segments, 12345.6, 3777.7)


def test_durations_follow_wall_clock_gaps() -> None:
    trace = _trace([120, 120, 120, 170, 170, 170], [1000, 2000, 3000, 13000, 14000, 15000])
    segments = segment(trace, 3000.0, 1500.0)
    assert len(segments) == 2
    # Sample weights are 1, 1, 10, 1, 1 and the median gap (1) for the last one.
    assert segments[0].segment_duration_sec == pytest.approx(1200.0)
    assert segments[1].segment_duration_sec == pytest.approx(300.0)
    assert segments[0].segment_distance_m == pytest.approx(1500.0)


def test_non_increasing_timestamps_fall_back_to_sample_count() -> None:
    trace = _trace([120, 120, 170, 170], [1000, 1000, 3000, 9000])
    segments = segment(trace, 2000.0, 800.0)
    assert [s.segment_duration_sec for s in segments] == pytest.approx([400.0, 400.0])


def test_segment_needs_two_samples_before_splitting() -> None:
    segments = segment(_trace([100, 150, 150, 150]), 4000.0, 1200.0)
    assert [(s.start_index, s.end_index) for s in segments] == [(0, 1), (2, 3)]


def test_invalid_segmentation_inputs() -> None:
    with pytest.raises(InvalidInput):
        segment(_trace([150]), 0.0, 100.0)
    with pytest.raises(InvalidInput):
        segment(_trace([150, float("nan")]), 1000.0, 100.0)


@pytest.mark.parametrize(
    "avg,expected",
    [(190, 0.15), (180, 0.08), (170, 0.08), (150, 0.03), (130, 0.0), (110, -0.05)],
)
def test_effort_adjustment_bands(avg, expected) -> None:
    assert effort_adjustment(avg, 100, 200) == pytest.approx(expected)


def test_effort_adjustment_empty_reserve() -> None:
    assert effort_adjustment(150, 180, 180) == 0.0
    assert effort_adjustment(150, 190, 180) == 0.0
    with pytest.raises(InvalidInput):
        effort_adjustment(150, 0, 180)


@pytest.mark.parametrize("bpm,zone", [(185, 5), (170, 4), (150, 3), (125, 2), (100, 1)])
def test_heart_rate_zone(bpm, zone) -> None:
    assert heart_rate_zone(bpm, 200) == zone


def test_default_baseline_and_average() -> None:
    assert default_baseline_bpm(200) == 120
    assert average_heart_rate(_trace([100, 200])) == 150.0
    assert average_heart_rate([]) is None


def test_moderate_effort_scores_like_plain_run() -> None:
    segmenter = EffortSegmenter(max_bpm=200, baseline_bpm=100)
    trace = _trace([130] * 20)
    assert segmenter.score(trace, 5000.0, 1500.0) == pytest.approx(score(5000.0, 1500.0))
    corrections = Corrections(elevation_adj_sec=10.0)
    assert segmenter.score(trace, 5000.0, 1500.0, corrections) == pytest.approx(score(5000.0, 1510.0))


def test_hard_effort_is_penalised() -> None:
    segmenter = EffortSegmenter(max_bpm=200, baseline_bpm=100)
    points = segmenter.score(_trace([190] * 20), 5000.0, 780.0)
    assert points == pytest.approx(1000.0 / 1.15 ** 2)


def test_aggregate_is_distance_weighted(interval_trace) -> None:
    segmenter = EffortSegmenter(max_bpm=190, baseline_bpm=100)
    segments = segmenter.segment(interval_trace, 6000.0, 1800.0)
    per_segment = [segmenter.score_segment(s, Corrections()) for s in segments]
    assert segmenter.aggregate(segments) == pytest.approx(sum(per_segment) / 3)
    with pytest.raises(InvalidInput):
        segmenter.aggregate([])


def test_empty_trace_scores_as_single_unit() -> None:
    segmenter = EffortSegmenter(max_bpm=190)
    assert segmenter.score([], 5000.0, 1500.0) == pytest.approx(score(5000.0, 1500.0))
