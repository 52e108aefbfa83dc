from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from clinic_scheduler.application.exceptions import NotFound, ValidationError
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort
from clinic_scheduler.application.utils.time_format import parse_date
from clinic_scheduler.application.utils.validators import parse_status
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus

MAX_RANGE_DAYS = 366


class ListAppointmentsUseCase:
    """Read-only projection used by admin tables and the calendar view."""

    def __init__(self, store: AppointmentStorePort) -> None:
        self._store = store

    def list_appointments(
        self,
        date_from: date | str,
        date_to: date | str,
        statuses: Iterable[AppointmentStatus | str] | None = None,
    ) -> list[Appointment]:
        start = parse_date(date_from, "date_from")
        end = parse_date(date_to, "date_to")
        if end < start:
            raise ValidationError("date_to must not be before date_from")
        if (end - start).days > MAX_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

        parsed = {parse_status(status) for status in statuses} if statuses else None
        return self._store.list_range(start, end, parsed)

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self._store.get(appointment_id)
        if appointment is None:
            raise NotFound(f"Appointment {appointment_id} not found")
        return appointment
