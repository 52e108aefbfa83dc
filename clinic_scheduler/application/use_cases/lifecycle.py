from __future__ import annotations

import logging

from clinic_scheduler.application.exceptions import SlotAlreadyBooked
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort
from clinic_scheduler.application.ports.change_notifier import ChangeNotifierPort
from clinic_scheduler.application.utils.transitions import TransitionPolicy
from clinic_scheduler.application.utils.validators import parse_status
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_scheduler.domain.entities.availability_change import AvailabilityChange


class AppointmentLifecycleUseCase:
    def __init__(
        self,
        store: AppointmentStorePort,
        notifier: ChangeNotifierPort | None = None,
        policy: TransitionPolicy = TransitionPolicy.PERMISSIVE,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._policy = policy
        self._logger = logging.getLogger(__name__)

    def set_status(
        self,
        appointment_id: str,
        new_status: AppointmentStatus | str,
        notes: str | None = None,
    ) -> Appointment:
        """
        Move an appointment to new_status, replacing notes when given.

        Cancelling frees the interval immediately. Leaving cancelled
        re-occupies it through the same atomic overlap check as a fresh
        booking, so it fails with SlotAlreadyBooked if the time was taken
        in the meantime.
        """
        status = parse_status(new_status)
        try:
            updated = self._store.update_status(
                appointment_id,
                status,
                notes=notes,
                can_transition=self._policy.allows,
            )
        except SlotAlreadyBooked:
            self._logger.info(
                "Status change rejected",
                extra={"appointment_id": appointment_id, "status": status.value, "reason": "conflict"},
            )
            raise

        self._logger.info(
            "Appointment status changed",
            extra={"appointment_id": updated.id, "status": updated.status.value},
        )
        if self._notifier is not None:
            self._notifier.publish(
                AvailabilityChange(
                    appointment_date=updated.appointment_date,
                    appointment_id=updated.id,
                    status=updated.status,
                    reason="status_changed",
                )
            )
        return updated
