#!/usr/bin/env python3
"""
Local scheduling harness (no HTTP).

Usage:
  python3 scripts/schedule_local.py slots teeth-cleaning 2030-01-07
  python3 scripts/schedule_local.py book teeth-cleaning 2030-01-07 10:00 "Jane Doe" jane@example.com 5551234567
  python3 scripts/schedule_local.py status <appointment_id> approved --notes "Confirmed by phone"
  python3 scripts/schedule_local.py list 2030-01-01 2030-01-31 --status pending --status approved

Uses the same wiring as the API, so STORE_PROVIDER=sql with a file DATABASE_URL
keeps bookings between runs.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clinic_scheduler.application.exceptions import SchedulingError
from clinic_scheduler.application.utils.time_format import format_date, format_time
from clinic_scheduler.domain.entities.appointment import Appointment, PatientInfo
from clinic_scheduler.wiring.dependencies import (
    get_availability_use_case,
    get_booking_use_case,
    get_lifecycle_use_case,
    get_list_appointments_use_case,
)


def _print_appointment(appointment: Appointment) -> None:
    print(
        f"{appointment.id}  {format_date(appointment.appointment_date)} "
        f"{format_time(appointment.start_time)}-{format_time(appointment.end_time)}  "
        f"{appointment.status.value:<11} {appointment.service_id}  {appointment.patient_name}"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clinic scheduling harness")
    sub = parser.add_subparsers(dest="command", required=True)

    slots = sub.add_parser("slots", help="List free start times")
    slots.add_argument("service_id")
    slots.add_argument("date")

    book = sub.add_parser("book", help="Book a slot")
    book.add_argument("service_id")
    book.add_argument("date")
    book.add_argument("start_time")
    book.add_argument("name")
    book.add_argument("email")
    book.add_argument("phone")

    status = sub.add_parser("status", help="Change appointment status")
    status.add_argument("appointment_id")
    status.add_argument("new_status")
    status.add_argument("--notes", default=None)

    listing = sub.add_parser("list", help="List appointments in a date range")
    listing.add_argument("date_from")
    listing.add_argument("date_to")
    listing.add_argument("--status", action="append", default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        if args.command == "slots":
            slots = get_availability_use_case().available_slots(args.service_id, args.date)
            print(" ".join(slots) if slots else "No available slots")
        elif args.command == "book":
            patient = PatientInfo(name=args.name, email=args.email, phone=args.phone)
            appointment = get_booking_use_case().book(args.service_id, args.date, args.start_time, patient)
            _print_appointment(appointment)
        elif args.command == "status":
            appointment = get_lifecycle_use_case().set_status(args.appointment_id, args.new_status, args.notes)
            _print_appointment(appointment)
        elif args.command == "list":
            for appointment in get_list_appointments_use_case().list_appointments(
                args.date_from, args.date_to, args.status
            ):
                _print_appointment(appointment)
    except SchedulingError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
