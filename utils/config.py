"""
Configuration loading utilities.

Loads environment variables from `.env` and exposes the engine defaults a
host application passes into scoring calls. Engine functions never read the
configuration themselves.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from streamlit.logger import get_logger

from config import HISTORY_WINDOW_DAYS

logger = get_logger(__name__)

CURVE_NAMES = ("purdy", "transparent")


@dataclass(frozen=True)
class Config:
    curve: str
    max_hr: Optional[int]
    baseline_hr: Optional[int]
    challenge_seed: Optional[int]
    history_window_days: int


def _optional_positive_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw in (None, ""):
        return None
    try:
        value = int(raw)
    except (ValueError, TypeError):
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return None
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return None
    return value


def load_config() -> Config:
    """Load configuration from environment."""
    load_dotenv(find_dotenv(), override=True)

    curve = (os.getenv("PPI_CURVE") or "purdy").strip().lower()
    if curve not in CURVE_NAMES:
        logger.warning("Unknown PPI_CURVE %r, using purdy", curve)
        curve = "purdy"

    max_hr = _optional_positive_int("PPI_MAX_HR")
    baseline_hr = _optional_positive_int("PPI_BASELINE_HR")

    seed_str = os.getenv("PPI_CHALLENGE_SEED")
    challenge_seed: Optional[int] = None
    if seed_str not in (None, ""):
        try:
            challenge_seed = int(seed_str)
        except (ValueError, TypeError):
            challenge_seed = None

    window_str = os.getenv("PPI_HISTORY_WINDOW_DAYS", str(HISTORY_WINDOW_DAYS))
    try:
        history_window_days = max(1, int(window_str))
    except (ValueError, TypeError):
        history_window_days = HISTORY_WINDOW_DAYS

    logger.debug("PPI_CURVE: %s", curve)
    return Config(
        curve=curve,
        max_hr=max_hr,
        baseline_hr=baseline_hr,
        challenge_seed=challenge_seed,
        history_window_days=history_window_days,
    )
