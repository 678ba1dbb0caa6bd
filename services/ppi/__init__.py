"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

from __future__ import annotations

from services.ppi.corrections import Corrections
from services.ppi.curves import Curve, get_curve, required_pace, required_time, score
from services.ppi.effort_segmentation import EffortSegment, EffortSegmenter, HeartRateSample
from services.ppi.engine import EffortRun, ScoreResult, SimpleRun, explain_run, score_run

__all__ = [
    "Corrections",
    "Curve",
    "EffortRun",
    "EffortSegment",
    "EffortSegmenter",
    "HeartRateSample",
    "ScoreResult",
    "SimpleRun",
    "explain_run",
    "get_curve",
    "required_pace",
    "required_time",
    "score",
    "score_run",
]
