from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from clinic_scheduler.domain.entities.appointment import AppointmentStatus


@dataclass(frozen=True)
class AvailabilityChange:
    appointment_date: date
    appointment_id: str
    status: AppointmentStatus
    reason: str  # "booked" or "status_changed"
