from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import date

from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_scheduler.domain.entities.time_interval import TimeInterval

TransitionCheck = Callable[[AppointmentStatus, AppointmentStatus], bool]


class AppointmentStorePort(ABC):
    @abstractmethod
    def list_booked_intervals(self, appointment_date: date) -> list[TimeInterval]:
        """Intervals of non-cancelled appointments on the date, ascending by start."""
        raise NotImplementedError

    @abstractmethod
    def insert_if_free(self, appointment: Appointment) -> Appointment:
        """
        Insert the appointment only if no non-cancelled appointment on the same
        date overlaps it. The check and the insert form one atomic unit.
        Raises SlotAlreadyBooked on conflict, StorageUnavailable on timeout.
        """
        raise NotImplementedError

    @abstractmethod
    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        notes: str | None = None,
        can_transition: TransitionCheck | None = None,
    ) -> Appointment:
        """
        Change status (and notes when given) atomically.
        Leaving cancelled for an occupying status re-runs the overlap check
        against the other appointments in the same atomic unit.
        Raises NotFound, InvalidTransition or SlotAlreadyBooked.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def list_range(
        self,
        date_from: date,
        date_to: date,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        """Appointments within [date_from, date_to], ordered by date then start time."""
        raise NotImplementedError
