from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time

SUNDAY = 6


@dataclass(frozen=True)
class ClinicCalendar:
    """Operating-hours policy consulted before any slot is generated.

    ``closed_weekdays`` uses Python weekday numbers (Monday is 0, Sunday is 6).
    ``step_minutes`` is the granularity at which candidate starts are tried and
    is independent of any service duration, so slots for services of different
    lengths are not aligned to each other's end times.
    """

    opening_time: time = time(9, 0)
    closing_time: time = time(17, 0)
    closed_weekdays: frozenset[int] = field(default_factory=lambda: frozenset({SUNDAY}))
    step_minutes: int = 30

    def __post_init__(self) -> None:
        if self.opening_time >= self.closing_time:
            raise ValueError("Clinic opening time must be before closing time")
        if self.step_minutes <= 0:
            raise ValueError("Slot step must be a positive number of minutes")
        if any(day not in range(7) for day in self.closed_weekdays):
            raise ValueError("Closed weekdays must be between 0 (Monday) and 6 (Sunday)")

    def is_closed_on(self, target_date: date) -> bool:
        return target_date.weekday() in self.closed_weekdays

    def accepts_bookings_on(self, target_date: date, today: date) -> bool:
        return target_date >= today and not self.is_closed_on(target_date)
