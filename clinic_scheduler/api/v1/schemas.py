from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from clinic_scheduler.application.utils.time_format import format_date, format_storage_time
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus, PatientInfo
from clinic_scheduler.domain.entities.service import Service


class ServiceSchema(BaseModel):
    id: str
    name: str
    duration_minutes: int
    is_active: bool
    description: str | None = None
    price: int | None = None

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceSchema":
        return cls(
            id=service.id,
            name=service.name,
            duration_minutes=service.duration_minutes,
            is_active=service.is_active,
            description=service.description,
            price=service.price,
        )


class AvailabilitySchema(BaseModel):
    service_id: str
    date: str
    slots: list[str]


class BookingRequestSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    service_id: str = Field(min_length=1)
    appointment_date: str = Field(description="YYYY-MM-DD")
    start_time: str = Field(description="HH:MM or HH:MM:SS")
    patient_name: str = Field(min_length=2, max_length=100)
    patient_email: str = Field(max_length=255)
    patient_phone: str = Field(min_length=7, max_length=20)

    def patient(self) -> PatientInfo:
        return PatientInfo(name=self.patient_name, email=self.patient_email, phone=self.patient_phone)


class StatusUpdateSchema(BaseModel):
    status: AppointmentStatus
    notes: str | None = None


class AppointmentSchema(BaseModel):
    id: str
    service_id: str
    patient_name: str
    patient_email: str
    patient_phone: str
    appointment_date: str
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentSchema":
        return cls(
            id=appointment.id,
            service_id=appointment.service_id,
            patient_name=appointment.patient_name,
            patient_email=appointment.patient_email,
            patient_phone=appointment.patient_phone,
            appointment_date=format_date(appointment.appointment_date),
            start_time=format_storage_time(appointment.start_time),
            end_time=format_storage_time(appointment.end_time),
            status=appointment.status,
            notes=appointment.notes,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )
