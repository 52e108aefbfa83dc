from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from zoneinfo import ZoneInfo

from clinic_scheduler.application.exceptions import ValidationError
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort
from clinic_scheduler.application.ports.service_catalog import ServiceCatalogPort
from clinic_scheduler.application.utils.conflicts import is_available
from clinic_scheduler.application.utils.slots import generate_candidates, slot_interval
from clinic_scheduler.application.utils.time_format import format_date, format_time, parse_date
from clinic_scheduler.domain.entities.clinic_calendar import ClinicCalendar
from clinic_scheduler.domain.entities.service import Service


def require_active_service(catalog: ServiceCatalogPort, service_id: str) -> Service:
    service_key = str(service_id or "").strip()
    if not service_key:
        raise ValidationError("service_id is required")
    service = catalog.get_service(service_key)
    if service is None or not service.is_active:
        raise ValidationError(f"Unknown service '{service_key}'")
    return service


def clinic_today(timezone: ZoneInfo) -> Callable[[], date]:
    return lambda: datetime.now(timezone).date()


class AvailabilityUseCase:
    def __init__(
        self,
        store: AppointmentStorePort,
        catalog: ServiceCatalogPort,
        calendar: ClinicCalendar,
        timezone: ZoneInfo,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._calendar = calendar
        self._today = today or clinic_today(timezone)
        self._logger = logging.getLogger(__name__)

    def available_slots(self, service_id: str, appointment_date: date | str) -> list[str]:
        """
        Free start times (HH:MM, ascending) for the service on the date.

        Past dates and closed weekdays return [] without querying the store.
        Every non-cancelled appointment on the date consumes clinic time,
        whichever service it belongs to. Store failures propagate as
        StorageUnavailable rather than an empty (fully booked) list.
        """
        service = require_active_service(self._catalog, service_id)
        target_date = parse_date(appointment_date)

        if not self._calendar.accepts_bookings_on(target_date, self._today()):
            return []

        booked = self._store.list_booked_intervals(target_date)
        candidates = generate_candidates(
            service.duration_minutes,
            self._calendar.opening_time,
            self._calendar.closing_time,
            self._calendar.step_minutes,
        )
        slots = [
            format_time(start)
            for start in candidates
            if is_available(slot_interval(start, service.duration_minutes), booked)
        ]

        self._logger.debug(
            "Availability computed",
            extra={
                "service_id": service.id,
                "date": format_date(target_date),
                "reason": f"{len(slots)}/{len(candidates)} free",
            },
        )
        return slots
