"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Host-facing surface of the engine.

Every function returns a `BridgeResult` instead of raising, and every value
in it is plain data (dicts, lists, floats, strings) so it crosses a language
boundary unchanged.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import numpy as np
from streamlit.logger import get_logger

from services.bucket_service import PerformanceBucketer, classify as classify_distance, parse_bucket
from services.challenge_service import ChallengeGenerator
from services.ppi.corrections import Corrections
from services.ppi.curves import Curve, get_curve
from services.ppi.effort_segmentation import HeartRateSample
from services.ppi.engine import EffortRun, RunInput, SimpleRun, score_run
from utils.coercion import optional_float, require_positive, safe_float_optional, safe_int_optional
from utils.errors import InvalidInput, PpiError

logger = get_logger(__name__)


@dataclass(frozen=True)
class BridgeResult:
    ok: bool
    value: Any = None
    error_kind: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "value": self.value, "errorKind": self.error_kind, "message": self.message}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _call(name: str, fn: Callable[[], Any]) -> BridgeResult:
    try:
        return BridgeResult(ok=True, value=_plain(fn()))
    except PpiError as exc:
        logger.warning("%s failed (%s): %s", name, exc.kind, exc)
        return BridgeResult(ok=False, error_kind=exc.kind, message=str(exc))


def score(distance_m: float, elapsed_sec: float, curve: Union[Curve, str] = Curve.PURDY) -> BridgeResult:
    return _call("score", lambda: get_curve(curve).score(distance_m, elapsed_sec))


def required_time(
    distance_m: float, target_points: float, curve: Union[Curve, str] = Curve.PURDY
) -> BridgeResult:
    return _call("required_time", lambda: get_curve(curve).required_time(distance_m, target_points))


def required_pace(
    distance_m: float, target_points: float, curve: Union[Curve, str] = Curve.PURDY
) -> BridgeResult:
    return _call("required_pace", lambda: get_curve(curve).required_pace(distance_m, target_points))


def classify(distance_m: float) -> BridgeResult:
    return _call("classify", lambda: classify_distance(distance_m))


def record_result(bucketer: PerformanceBucketer, bucket: str, points: float) -> BridgeResult:
    """Value is True when the band's best changed."""
    return _call("record_result", lambda: bucketer.record_result(parse_bucket(bucket), points))


def stats(bucketer: PerformanceBucketer) -> BridgeResult:
    return _call("stats", lambda: bucketer.to_records())


def generate_challenges(
    bucketer: PerformanceBucketer,
    seed: Optional[int] = None,
    curve: Union[Curve, str] = Curve.PURDY,
) -> BridgeResult:
    def _generate() -> List[Any]:
        rng = np.random.default_rng(seed)
        return ChallengeGenerator(curve).generate(bucketer.stats(), rng)

    return _call("generate_challenges", _generate)


def _parse_trace(raw: Any) -> List[HeartRateSample]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, (list, tuple)):
        raise InvalidInput("heartRateTrace must be a list of samples")
    trace = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise InvalidInput(f"Heart-rate sample must be an object, got {item!r}")
        bpm = safe_float_optional(item.get("bpm"))
        if bpm is None:
            raise InvalidInput(f"Heart-rate sample without bpm: {item!r}")
        timestamp = safe_int_optional(item.get("timestampMs"))
        trace.append(HeartRateSample(timestamp_ms=timestamp or 0, bpm=bpm))
    return trace


def parse_run(payload: Mapping[str, Any]) -> RunInput:
    """Build a run input from a host payload (camelCase keys)."""
    if not isinstance(payload, Mapping):
        raise InvalidInput("run payload must be an object")
    distance_m = require_positive(payload, "distanceM")
    elapsed_sec = require_positive(payload, "elapsedSec")
    raw_corr = payload.get("corrections") or {}
    if not isinstance(raw_corr, Mapping):
        raise InvalidInput("corrections must be an object")
    corrections = Corrections(
        elevation_adj_sec=optional_float(raw_corr, "elevationAdjSec"),
        temperature_adj_sec=optional_float(raw_corr, "temperatureAdjSec"),
        heart_rate_adj_sec=optional_float(raw_corr, "heartRateAdjSec"),
    )
    trace = _parse_trace(payload.get("heartRateTrace"))
    if not trace:
        return SimpleRun(distance_m=distance_m, elapsed_sec=elapsed_sec, corrections=corrections)
    max_bpm = require_positive(payload, "maxBpm")
    baseline_bpm = None
    if payload.get("baselineBpm") not in (None, ""):
        baseline_bpm = require_positive(payload, "baselineBpm")
    return EffortRun(
        distance_m=distance_m,
        elapsed_sec=elapsed_sec,
        heart_rate_trace=trace,
        max_bpm=max_bpm,
        baseline_bpm=baseline_bpm,
        corrections=corrections,
    )


def score_run_payload(payload: Mapping[str, Any]) -> BridgeResult:
    def _score() -> Any:
        run = parse_run(payload)
        return score_run(run, payload.get("curve") or Curve.PURDY)

    return _call("score_run", _score)
