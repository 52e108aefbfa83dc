from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum

from clinic_scheduler.domain.entities.time_interval import TimeInterval


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"

    @property
    def occupies_slot(self) -> bool:
        """Every status except cancelled holds its interval, pending included."""
        return self is not AppointmentStatus.CANCELLED


ACTIVE_STATUSES = frozenset(status for status in AppointmentStatus if status.occupies_slot)

# Conventional workflow used by the strict transition policy.
STRICT_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.APPROVED, AppointmentStatus.RESCHEDULED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.APPROVED: frozenset({AppointmentStatus.RESCHEDULED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.RESCHEDULED: frozenset({AppointmentStatus.APPROVED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CANCELLED: frozenset({AppointmentStatus.PENDING}),
}


@dataclass(frozen=True)
class PatientInfo:
    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class Appointment:
    id: str
    service_id: str
    patient_name: str
    patient_email: str
    patient_phone: str
    appointment_date: date
    start_time: time
    end_time: time
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def occupies_slot(self) -> bool:
        return self.status.occupies_slot
