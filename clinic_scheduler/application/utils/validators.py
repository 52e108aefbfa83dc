"""
Input validators for booking requests.

Each validator returns the cleaned value or raises ValidationError with a
message that can be shown to the caller verbatim.
"""

from __future__ import annotations

import re

from clinic_scheduler.application.exceptions import ValidationError
from clinic_scheduler.domain.entities.appointment import AppointmentStatus, PatientInfo

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^[0-9+()\-.\s]+$")


def validate_patient_name(name: str) -> str:
    name = str(name or "").strip()
    if len(name) < 2:
        raise ValidationError("Name must be at least 2 characters")
    if len(name) > 100:
        raise ValidationError("Name must be at most 100 characters")
    return name


def validate_patient_email(email: str) -> str:
    email = str(email or "").strip()
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email")
    return email


def validate_patient_phone(phone: str) -> str:
    phone = str(phone or "").strip()
    if not 7 <= len(phone) <= 20 or not PHONE_PATTERN.match(phone):
        raise ValidationError("Please enter a valid phone number")
    return phone


def validate_patient_info(patient: PatientInfo) -> PatientInfo:
    return PatientInfo(
        name=validate_patient_name(patient.name),
        email=validate_patient_email(patient.email),
        phone=validate_patient_phone(patient.phone),
    )


def parse_status(value: AppointmentStatus | str) -> AppointmentStatus:
    if isinstance(value, AppointmentStatus):
        return value
    try:
        return AppointmentStatus(str(value or "").strip().lower())
    except ValueError as e:
        allowed = ", ".join(status.value for status in AppointmentStatus)
        raise ValidationError(f"Unknown status '{value}'. Use one of: {allowed}") from e
