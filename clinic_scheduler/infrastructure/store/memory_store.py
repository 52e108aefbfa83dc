from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timezone

from clinic_scheduler.application.exceptions import InvalidTransition, NotFound, SlotAlreadyBooked, StorageUnavailable
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort, TransitionCheck
from clinic_scheduler.application.utils.conflicts import overlaps
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_scheduler.domain.entities.time_interval import TimeInterval


class MemoryAppointmentStore(AppointmentStorePort):
    """
    Process-local store. A single lock makes every check-and-write atomic,
    which is only sufficient while one process owns the data; use the SQL
    store when several service instances share appointments.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._lock = threading.Lock()
        self._timeout_seconds = timeout_seconds

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout_seconds):
            raise StorageUnavailable("Timed out waiting for the appointment store")
        try:
            yield
        finally:
            self._lock.release()

    def list_booked_intervals(self, appointment_date: date) -> list[TimeInterval]:
        with self._locked():
            return sorted(appt.interval for appt in self._occupying(appointment_date))

    def insert_if_free(self, appointment: Appointment) -> Appointment:
        with self._locked():
            if appointment.id in self._appointments:
                raise StorageUnavailable(f"Duplicate appointment id {appointment.id}")
            if appointment.occupies_slot and self._has_conflict(appointment):
                raise SlotAlreadyBooked()
            now = datetime.now(timezone.utc)
            stored = replace(
                appointment,
                created_at=appointment.created_at or now,
                updated_at=appointment.updated_at or now,
            )
            self._appointments[stored.id] = stored
            return stored

    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        notes: str | None = None,
        can_transition: TransitionCheck | None = None,
    ) -> Appointment:
        with self._locked():
            current = self._appointments.get(appointment_id)
            if current is None:
                raise NotFound(f"Appointment {appointment_id} not found")
            if can_transition is not None and not can_transition(current.status, status):
                raise InvalidTransition(f"Cannot change status from {current.status.value} to {status.value}")

            updated = replace(
                current,
                status=status,
                notes=current.notes if notes is None else notes,
                updated_at=datetime.now(timezone.utc),
            )
            if not current.occupies_slot and updated.occupies_slot and self._has_conflict(updated):
                raise SlotAlreadyBooked()
            self._appointments[appointment_id] = updated
            return updated

    def get(self, appointment_id: str) -> Appointment | None:
        with self._locked():
            return self._appointments.get(appointment_id)

    def list_range(
        self,
        date_from: date,
        date_to: date,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        wanted = set(statuses) if statuses is not None else None
        with self._locked():
            matches = [
                appt
                for appt in self._appointments.values()
                if date_from <= appt.appointment_date <= date_to and (wanted is None or appt.status in wanted)
            ]
        return sorted(matches, key=lambda appt: (appt.appointment_date, appt.start_time))

    def _occupying(self, appointment_date: date) -> list[Appointment]:
        return [
            appt
            for appt in self._appointments.values()
            if appt.appointment_date == appointment_date and appt.occupies_slot
        ]

    def _has_conflict(self, appointment: Appointment) -> bool:
        return any(
            overlaps(appointment.interval, other.interval)
            for other in self._occupying(appointment.appointment_date)
            if other.id != appointment.id
        )
