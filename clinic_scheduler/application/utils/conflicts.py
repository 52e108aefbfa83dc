from __future__ import annotations

from collections.abc import Iterable

from clinic_scheduler.domain.entities.time_interval import TimeInterval


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Back-to-back intervals (one ends exactly when the other starts) do not overlap."""
    return a.start < b.end and b.start < a.end


def is_available(candidate: TimeInterval, existing: Iterable[TimeInterval]) -> bool:
    return not any(overlaps(candidate, booked) for booked in existing)
