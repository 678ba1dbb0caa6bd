"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later
"""

import pytest

from services.challenge_service import DEFAULT_CHALLENGES
from services.live_session_service import LiveSession
from services.ppi.curves import score
from services.ppi.engine import SimpleRun
from utils.errors import InvalidInput


@pytest.fixture
def session():
    # 5 km at 5:00/km
    return LiveSession(challenge=DEFAULT_CHALLENGES[1], start_epoch_ms=1_700_000_000_000)


def test_new_session_has_no_pace(session):
    assert session.current_pace_sec_per_km is None
    assert session.progress_fraction() == 0.0
    assert not session.is_on_target_pace()
    assert session.projected_points() is None


def test_update_tracks_progress(session):
    halfway = session.update(2500.0, 750.0)
    assert session.current_distance_m == 0.0
    assert halfway.current_pace_sec_per_km == pytest.approx(300.0)
    assert halfway.progress_fraction() == pytest.approx(0.5)
    assert halfway.is_on_target_pace()
    assert not session.update(2500.0, 900.0).is_on_target_pace()
    assert halfway.projected_points() == pytest.approx(score(5000.0, 1500.0))


def test_progress_is_capped(session):
    assert session.update(6000.0, 1800.0).progress_fraction() == 1.0


def test_invalid_updates(session):
    with pytest.raises(InvalidInput):
        session.update(-1.0, 10.0)
    with pytest.raises(InvalidInput):
        session.complete()


def test_complete_returns_a_run(session):
    run = session.update(5000.0, 1490.0).complete()
    assert run == SimpleRun(distance_m=5000.0, elapsed_sec=1490.0)
