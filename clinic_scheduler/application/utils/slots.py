from __future__ import annotations

from datetime import time

from clinic_scheduler.application.exceptions import ValidationError
from clinic_scheduler.application.utils.time_format import from_minutes, to_minutes
from clinic_scheduler.domain.entities.time_interval import TimeInterval


def generate_candidates(
    duration_minutes: int,
    opening_time: time,
    closing_time: time,
    step_minutes: int = 30,
) -> list[time]:
    """
    Candidate start times for a service of the given duration.

    Starts at opening_time and advances by step_minutes while the whole
    duration still fits. A slot that ends exactly at closing_time is valid.
    Returns an empty list when the duration is longer than the opening window.
    """
    if duration_minutes <= 0:
        raise ValidationError("Service duration must be a positive number of minutes")
    if step_minutes <= 0:
        raise ValidationError("Slot step must be a positive number of minutes")

    current = to_minutes(opening_time)
    closing = to_minutes(closing_time)

    candidates: list[time] = []
    while current + duration_minutes <= closing:
        candidates.append(from_minutes(current))
        current += step_minutes
    return candidates


def slot_interval(start_time: time, duration_minutes: int) -> TimeInterval:
    """Interval occupied by a slot starting at start_time."""
    return TimeInterval(start_time, from_minutes(to_minutes(start_time) + duration_minutes))
