from __future__ import annotations

import re
from datetime import date, datetime, time

from clinic_scheduler.application.exceptions import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^(?P<hour>[01]\d|2[0-3]):(?P<minute>[0-5]\d)(?::(?P<second>[0-5]\d))?$")

MINUTES_PER_DAY = 24 * 60


def parse_date(value: date | str, field_name: str = "date") -> date:
    """Parse a YYYY-MM-DD string. Date objects pass through untouched."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not DATE_PATTERN.match(text):
        raise ValidationError(f"Invalid {field_name} format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid {field_name}: {text}") from e


def parse_time(value: time | str, field_name: str = "time") -> time:
    """Parse a 24-hour HH:MM or HH:MM:SS string."""
    if isinstance(value, time):
        return value
    text = str(value or "").strip()
    match = TIME_PATTERN.match(text)
    if not match:
        raise ValidationError(f"Invalid {field_name} format. Use HH:MM or HH:MM:SS")
    return time(int(match["hour"]), int(match["minute"]), int(match["second"] or 0))


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def format_storage_time(value: time) -> str:
    """Zero-padded HH:MM:SS, so stored times compare correctly as strings."""
    return value.strftime("%H:%M:%S")


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def add_minutes(value: time, minutes: int) -> time:
    return from_minutes(to_minutes(value) + minutes)
