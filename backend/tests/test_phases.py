from __future__ import annotations
from datetime import datetime, timezone, timedelta
from types import SimpleNamespace
from photocontest.services.phases import Phase, PHASE_ORDER, phase_index, resolve_phase, phase_deadline
import pytest

T0 = datetime(2026, 5, 1, tzinfo=timezone.utc)


def _contest(gap_hours: int = 24):
    end = T0 + timedelta(days=7)
    return SimpleNamespace(
        start_date=T0,
        end_date=end,
        voting_start_date=end + timedelta(hours=gap_hours),
        voting_end_date=end + timedelta(hours=gap_hours, days=5),
    )


def test_boundaries_belong_to_the_phase_they_start():
    c = _contest()
    assert resolve_phase(c, c.start_date - timedelta(microseconds=1)) is Phase.UPCOMING
    assert resolve_phase(c, c.start_date) is Phase.SUBMISSION
    assert resolve_phase(c, c.end_date) is Phase.PROCESSING
    assert resolve_phase(c, c.voting_start_date) is Phase.VOTING
    assert resolve_phase(c, c.voting_end_date - timedelta(microseconds=1)) is Phase.VOTING
    assert resolve_phase(c, c.voting_end_date) is Phase.ENDED


@pytest.mark.parametrize("gap_hours", [0, 1, 24])
def test_sweep_is_total_and_monotonic(gap_hours):
    c = _contest(gap_hours)
    seen = []
    t = T0 - timedelta(days=2)
    stop = c.voting_end_date + timedelta(days=2)
    while t <= stop:
        seen.append(resolve_phase(c, t))
        t += timedelta(minutes=30)
    idx = [phase_index(p) for p in seen]
    assert idx == sorted(idx)
    assert seen[0] is Phase.UPCOMING and seen[-1] is Phase.ENDED
    if gap_hours == 0:
        assert Phase.PROCESSING not in seen
    else:
        assert set(seen) == set(PHASE_ORDER)


def test_processing_is_skipped_when_voting_starts_at_submission_end():
    c = _contest(gap_hours=0)
    assert resolve_phase(c, c.end_date) is Phase.VOTING


def test_naive_now_is_treated_as_utc():
    c = _contest()
    naive = (c.voting_start_date + timedelta(hours=1)).replace(tzinfo=None)
    assert resolve_phase(c, naive) is Phase.VOTING


def test_far_past_and_future():
    c = _contest()
    assert resolve_phase(c, datetime(1970, 1, 1, tzinfo=timezone.utc)) is Phase.UPCOMING
    assert resolve_phase(c, datetime(2999, 1, 1, tzinfo=timezone.utc)) is Phase.ENDED


def test_deadline_is_end_of_current_phase():
    c = _contest()
    assert phase_deadline(c, T0 - timedelta(days=1)) == c.start_date
    assert phase_deadline(c, T0 + timedelta(days=1)) == c.end_date
    assert phase_deadline(c, c.end_date + timedelta(hours=1)) == c.voting_start_date
    assert phase_deadline(c, c.voting_start_date) == c.voting_end_date
    assert phase_deadline(c, c.voting_end_date) is None
