"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Run history aggregates over a DataFrame of scored runs.

Expected columns: startedAtEpochMs, distanceMeters, elapsedSeconds and,
optionally, ppi. The frame comes from whatever store the host uses.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd
from streamlit.logger import get_logger

from config import HISTORY_WINDOW_DAYS, STANDARD_DISTANCE_WINDOWS
from services.bucket_service import BUCKET_ORDER, PerformanceBucketer, classify
from services.ppi.curves import Curve, get_curve
from utils.errors import PpiError

logger = get_logger(__name__)

RUN_COLUMNS = ["startedAtEpochMs", "distanceMeters", "elapsedSeconds", "ppi"]
DAY_MS = 24 * 3600 * 1000


def _to_numeric(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    for col in columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def _scored_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Rows a band can be derived for: finite positive distance and finite ppi."""
    mask = np.isfinite(df["distanceMeters"]) & (df["distanceMeters"] > 0) & np.isfinite(df["ppi"])
    dropped = int((~mask & df["ppi"].notna()).sum())
    if dropped:
        logger.warning("Skipping %d scored runs with unusable distance or ppi", dropped)
    return df[mask].copy()


def _prepare(runs: pd.DataFrame) -> pd.DataFrame:
    df = runs.copy()
    for col in RUN_COLUMNS:
        if col not in df.columns:
            df[col] = float("nan")
    return _to_numeric(df, RUN_COLUMNS)


def score_runs(runs: pd.DataFrame, curve: Union[Curve, str] = Curve.PURDY) -> pd.DataFrame:
    """Fill the ppi column for rows that lack one; unscorable rows stay NaN."""
    df = _prepare(runs)
    scorer = get_curve(curve)

    def _score_row(row: pd.Series) -> float:
        if pd.notna(row["ppi"]):
            return float(row["ppi"])
        try:
            return scorer.score(row["distanceMeters"], row["elapsedSeconds"])
        except PpiError as exc:
            logger.warning("Skipping run at %s: %s", row.get("startedAtEpochMs"), exc)
            return float("nan")

    if df.empty:
        return df
    df["ppi"] = df.apply(_score_row, axis=1)
    return df


def highest_ppi_in_window(
    runs: pd.DataFrame, now_ms: int, days: int = HISTORY_WINDOW_DAYS
) -> Optional[float]:
    """Highest ppi among runs started in the last `days` days."""
    df = _prepare(runs)
    cutoff = now_ms - days * DAY_MS
    recent = df[(df["startedAtEpochMs"] >= cutoff) & df["ppi"].notna()]
    if recent.empty:
        return None
    return float(recent["ppi"].max())


def best_times(runs: pd.DataFrame, since_ms: int = 0) -> Dict[str, Optional[float]]:
    """Fastest elapsed time within each standard-distance window."""
    df = _prepare(runs)
    df = df[df["startedAtEpochMs"] >= since_ms]
    bests: Dict[str, Optional[float]] = {}
    for key, (lo, hi) in STANDARD_DISTANCE_WINDOWS.items():
        matching = df[(df["distanceMeters"] >= lo) & (df["distanceMeters"] <= hi)]
        times = matching["elapsedSeconds"].dropna()
        bests[key] = float(times.min()) if not times.empty else None
    return bests


def bests_by_bucket(runs: pd.DataFrame) -> pd.DataFrame:
    """One row per band: best ppi and number of scored runs (zero for empty bands)."""
    df = _prepare(runs)
    df = _scored_rows(df)
    df["bucket"] = df["distanceMeters"].map(lambda d: classify(d).name)
    grouped = df.groupby("bucket")["ppi"].agg(["max", "count"])
    rows = []
    for bucket in BUCKET_ORDER:
        if bucket.name in grouped.index:
            best = float(grouped.loc[bucket.name, "max"])
            count = int(grouped.loc[bucket.name, "count"])
        else:
            best, count = None, 0
        rows.append({"bucket": bucket.name, "label": bucket.label, "bestPpi": best, "runCount": count})
    return pd.DataFrame(rows, columns=["bucket", "label", "bestPpi", "runCount"])


def seed_bucketer(
    runs: pd.DataFrame, bucketer: Optional[PerformanceBucketer] = None
) -> PerformanceBucketer:
    """Replay scored runs into a bucketer, oldest first."""
    bucketer = bucketer or PerformanceBucketer()
    df = _prepare(runs)
    df = _scored_rows(df).sort_values("startedAtEpochMs")
    for _, row in df.iterrows():
        bucketer.record_score(row["distanceMeters"], row["ppi"])
    return bucketer
