from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import date, datetime, time, timezone as dt_timezone
from zoneinfo import ZoneInfo

from clinic_scheduler.application.exceptions import SlotAlreadyBooked, ValidationError
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort
from clinic_scheduler.application.ports.change_notifier import ChangeNotifierPort
from clinic_scheduler.application.ports.service_catalog import ServiceCatalogPort
from clinic_scheduler.application.use_cases.availability import clinic_today, require_active_service
from clinic_scheduler.application.utils.slots import generate_candidates, slot_interval
from clinic_scheduler.application.utils.time_format import format_date, format_time, parse_date, parse_time
from clinic_scheduler.application.utils.validators import validate_patient_info
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus, PatientInfo
from clinic_scheduler.domain.entities.availability_change import AvailabilityChange
from clinic_scheduler.domain.entities.clinic_calendar import ClinicCalendar


class BookingUseCase:
    def __init__(
        self,
        store: AppointmentStorePort,
        catalog: ServiceCatalogPort,
        calendar: ClinicCalendar,
        timezone: ZoneInfo,
        notifier: ChangeNotifierPort | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._calendar = calendar
        self._notifier = notifier
        self._today = today or clinic_today(timezone)
        self._logger = logging.getLogger(__name__)

    def book(
        self,
        service_id: str,
        appointment_date: date | str,
        start_time: time | str,
        patient: PatientInfo,
    ) -> Appointment:
        """
        Commit a pending appointment for the slot.

        All input is validated before storage is touched. The final overlap
        check runs inside the store's atomic insert, so of several racing
        requests for overlapping intervals exactly one succeeds and the
        others get SlotAlreadyBooked. A pending appointment already holds
        its slot; staff approval is not needed for that.
        """
        service = require_active_service(self._catalog, service_id)
        target_date = parse_date(appointment_date, "appointment_date")
        start = parse_time(start_time, "start_time")
        patient = validate_patient_info(patient)
        self._validate_slot(target_date, start, service.duration_minutes)

        interval = slot_interval(start, service.duration_minutes)
        now = datetime.now(dt_timezone.utc)
        appointment = Appointment(
            id=str(uuid.uuid4()),
            service_id=service.id,
            patient_name=patient.name,
            patient_email=patient.email,
            patient_phone=patient.phone,
            appointment_date=target_date,
            start_time=interval.start,
            end_time=interval.end,
            status=AppointmentStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        log_extra = {
            "service_id": service.id,
            "date": format_date(target_date),
            "start_time": format_time(start),
        }
        try:
            created = self._store.insert_if_free(appointment)
        except SlotAlreadyBooked:
            self._logger.info("Slot already booked", extra={**log_extra, "reason": "conflict"})
            raise

        self._logger.info("Appointment booked", extra={**log_extra, "appointment_id": created.id})
        if self._notifier is not None:
            self._notifier.publish(
                AvailabilityChange(
                    appointment_date=created.appointment_date,
                    appointment_id=created.id,
                    status=created.status,
                    reason="booked",
                )
            )
        return created

    def _validate_slot(self, target_date: date, start: time, duration_minutes: int) -> None:
        if target_date < self._today():
            raise ValidationError("Appointments cannot be booked in the past")
        if self._calendar.is_closed_on(target_date):
            raise ValidationError(f"The clinic is closed on {target_date.strftime('%A')}s")

        candidates = generate_candidates(
            duration_minutes,
            self._calendar.opening_time,
            self._calendar.closing_time,
            self._calendar.step_minutes,
        )
        if start not in candidates:
            raise ValidationError(
                f"{format_time(start)} is not a valid start time for this service. "
                f"Slots start every {self._calendar.step_minutes} minutes between "
                f"{format_time(self._calendar.opening_time)} and {format_time(self._calendar.closing_time)}"
            )
