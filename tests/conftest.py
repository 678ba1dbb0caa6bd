import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure project root is importable for tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from services.bucket_service import DistanceBucket, PerformanceBucketer
from services.ppi.effort_segmentation import HeartRateSample


REFERENCE_DISTANCES = [1500.0, 5000.0, 10000.0, 21097.0, 42195.0]


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def full_bucketer():
    return PerformanceBucketer(
        {
            DistanceBucket.KM_1_3: 620.0,
            DistanceBucket.KM_3_8: 540.0,
            DistanceBucket.KM_8_15: 480.0,
            DistanceBucket.KM_15_25: 430.0,
            DistanceBucket.KM_25P: 390.0,
        }
    )


@pytest.fixture
def interval_trace():
    """Warm-up, hard block, recovery: one sample per second."""
    bpm = [120] * 10 + [165] * 10 + [140] * 10
    return [HeartRateSample(timestamp_ms=1_000 * (i + 1), bpm=b) for i, b in enumerate(bpm)]
