"""
Tests for candidate slot generation and interval overlap rules.
"""

from __future__ import annotations

from datetime import time

import pytest

from clinic_scheduler.application.exceptions import ValidationError
from clinic_scheduler.application.utils.conflicts import is_available, overlaps
from clinic_scheduler.application.utils.slots import generate_candidates, slot_interval
from clinic_scheduler.application.utils.time_format import to_minutes
from clinic_scheduler.domain.entities.time_interval import TimeInterval

OPEN = time(9, 0)
CLOSE = time(17, 0)


def test_thirty_minute_service_fills_the_day():
    candidates = generate_candidates(30, OPEN, CLOSE, 30)

    assert len(candidates) == 16
    assert candidates[0] == time(9, 0)
    assert candidates[-1] == time(16, 30)


def test_slot_ending_exactly_at_closing_is_kept():
    assert generate_candidates(60, OPEN, CLOSE, 30)[-1] == time(16, 0)
    assert generate_candidates(45, OPEN, CLOSE, 30)[-1] == time(16, 0)
    assert generate_candidates(480, OPEN, CLOSE, 30) == [time(9, 0)]


def test_duration_longer_than_opening_window_yields_nothing():
    assert generate_candidates(481, OPEN, CLOSE, 30) == []


def test_step_is_independent_of_duration():
    candidates = generate_candidates(90, OPEN, CLOSE, 30)
    assert candidates[:3] == [time(9, 0), time(9, 30), time(10, 0)]
    assert candidates[-1] == time(15, 30)


def test_candidates_stay_within_hours_and_ascend():
    for duration in range(1, 500, 7):
        candidates = generate_candidates(duration, OPEN, CLOSE, 30)
        for start in candidates:
            assert start >= OPEN
            assert to_minutes(start) + duration <= to_minutes(CLOSE)
        assert all(a < b for a, b in zip(candidates, candidates[1:]))


def test_generation_is_deterministic():
    assert generate_candidates(45, OPEN, CLOSE, 30) == generate_candidates(45, OPEN, CLOSE, 30)


@pytest.mark.parametrize("duration,step", [(0, 30), (-15, 30), (30, 0)])
def test_non_positive_duration_or_step_is_rejected(duration, step):
    with pytest.raises(ValidationError):
        generate_candidates(duration, OPEN, CLOSE, step)


def test_slot_interval_adds_duration():
    assert slot_interval(time(10, 0), 45) == TimeInterval(time(10, 0), time(10, 45))


def test_overlap_is_symmetric_and_reflexive():
    a = TimeInterval(time(10, 0), time(10, 45))
    b = TimeInterval(time(10, 30), time(11, 0))
    c = TimeInterval(time(11, 0), time(11, 30))

    assert overlaps(a, b) and overlaps(b, a)
    assert not overlaps(b, c) and not overlaps(c, b)
    for interval in (a, b, c):
        assert overlaps(interval, interval)


def test_contained_interval_overlaps():
    outer = TimeInterval(time(9, 0), time(12, 0))
    inner = TimeInterval(time(10, 0), time(10, 30))
    assert overlaps(outer, inner)
    assert overlaps(inner, outer)


def test_back_to_back_booking_is_allowed():
    booked = [TimeInterval(time(10, 0), time(10, 45))]

    assert not is_available(slot_interval(time(10, 30), 30), booked)
    assert not is_available(slot_interval(time(10, 30), 5), booked)
    assert is_available(slot_interval(time(10, 45), 30), booked)
    assert is_available(slot_interval(time(9, 30), 30), booked)


def test_is_available_against_empty_day():
    assert is_available(TimeInterval(time(9, 0), time(9, 30)), [])


def test_degenerate_interval_is_rejected():
    with pytest.raises(ValueError):
        TimeInterval(time(10, 0), time(10, 0))
    with pytest.raises(ValueError):
        TimeInterval(time(11, 0), time(10, 0))
