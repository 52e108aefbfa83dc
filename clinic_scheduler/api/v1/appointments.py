from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from clinic_scheduler.api.v1.schemas import (
    AppointmentSchema,
    AvailabilitySchema,
    BookingRequestSchema,
    ServiceSchema,
    StatusUpdateSchema,
)
from clinic_scheduler.application.exceptions import (
    NotFound,
    SchedulingError,
    SlotAlreadyBooked,
    StorageUnavailable,
    ValidationError,
)
from clinic_scheduler.application.ports.service_catalog import ServiceCatalogPort
from clinic_scheduler.application.use_cases.availability import AvailabilityUseCase
from clinic_scheduler.application.use_cases.booking import BookingUseCase
from clinic_scheduler.application.use_cases.lifecycle import AppointmentLifecycleUseCase
from clinic_scheduler.application.use_cases.list_appointments import ListAppointmentsUseCase
from clinic_scheduler.wiring.dependencies import (
    get_availability_use_case,
    get_booking_use_case,
    get_lifecycle_use_case,
    get_list_appointments_use_case,
    get_service_catalog,
)

router = APIRouter()
logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = "2"


def _http_error(e: SchedulingError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SlotAlreadyBooked):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StorageUnavailable):
        return HTTPException(status_code=503, detail=str(e), headers={"Retry-After": RETRY_AFTER_SECONDS})
    logger.exception("Unhandled scheduling error", extra={"reason": str(e)})
    return HTTPException(status_code=500, detail="Something went wrong. Please try again.")


@router.get("/services", response_model=list[ServiceSchema])
def list_services(
    include_inactive: bool = False,
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
):
    return [ServiceSchema.from_entity(s) for s in catalog.list_services(active_only=not include_inactive)]


@router.get("/availability", response_model=AvailabilitySchema)
def available_slots(
    service_id: str,
    date: str,
    uc: AvailabilityUseCase = Depends(get_availability_use_case),
):
    try:
        slots = uc.available_slots(service_id, date)
    except SchedulingError as e:
        raise _http_error(e) from e
    return AvailabilitySchema(service_id=service_id, date=date, slots=slots)


@router.post("/appointments", response_model=AppointmentSchema, status_code=201)
def book_appointment(
    req: BookingRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        appointment = uc.book(req.service_id, req.appointment_date, req.start_time, req.patient())
    except SchedulingError as e:
        raise _http_error(e) from e
    return AppointmentSchema.from_entity(appointment)


@router.get("/appointments", response_model=list[AppointmentSchema])
def list_appointments(
    date_from: str,
    date_to: str,
    status: list[str] | None = Query(None),
    uc: ListAppointmentsUseCase = Depends(get_list_appointments_use_case),
):
    try:
        appointments = uc.list_appointments(date_from, date_to, status)
    except SchedulingError as e:
        raise _http_error(e) from e
    return [AppointmentSchema.from_entity(a) for a in appointments]


@router.get("/appointments/{appointment_id}", response_model=AppointmentSchema)
def get_appointment(
    appointment_id: str,
    uc: ListAppointmentsUseCase = Depends(get_list_appointments_use_case),
):
    try:
        appointment = uc.get_appointment(appointment_id)
    except SchedulingError as e:
        raise _http_error(e) from e
    return AppointmentSchema.from_entity(appointment)


@router.patch("/appointments/{appointment_id}/status", response_model=AppointmentSchema)
def set_status(
    appointment_id: str,
    req: StatusUpdateSchema,
    uc: AppointmentLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        appointment = uc.set_status(appointment_id, req.status, req.notes)
    except SchedulingError as e:
        raise _http_error(e) from e
    return AppointmentSchema.from_entity(appointment)
