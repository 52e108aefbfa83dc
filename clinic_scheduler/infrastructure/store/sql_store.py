from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine, RowMapping, make_url
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from clinic_scheduler.application.exceptions import InvalidTransition, NotFound, SlotAlreadyBooked, StorageUnavailable
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort, TransitionCheck
from clinic_scheduler.application.utils.time_format import format_date, format_storage_time, parse_date, parse_time
from clinic_scheduler.domain.entities.appointment import Appointment, AppointmentStatus
from clinic_scheduler.domain.entities.time_interval import TimeInterval

T = TypeVar("T")

# Dates and times are stored as zero-padded YYYY-MM-DD / HH:MM:SS strings so
# range and overlap comparisons work lexicographically on every backend.
metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("service_id", String(64), nullable=False),
    Column("patient_name", String(100), nullable=False),
    Column("patient_email", String(255), nullable=False),
    Column("patient_phone", String(20), nullable=False),
    Column("appointment_date", String(10), nullable=False),
    Column("start_time", String(8), nullable=False),
    Column("end_time", String(8), nullable=False),
    Column("status", String(16), nullable=False, default=AppointmentStatus.PENDING.value),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_appointments_date_status", "appointment_date", "status"),
)

SERIALIZATION_FAILURE_CODES = {"40001", "40P01"}
SUPPORTED_BACKENDS = ("sqlite", "postgresql")


def create_store_engine(database_url: str, timeout_seconds: float = 5.0) -> Engine:
    """
    Build an engine whose write transactions serialize against each other.

    SQLite: pysqlite's own BEGIN handling is disabled and write transactions
    open with BEGIN IMMEDIATE, taking the database write lock up front; the
    busy timeout bounds how long a writer waits for it. Only file databases
    are accepted; an in-memory database is private to one connection, so
    use MemoryAppointmentStore instead.

    PostgreSQL: SERIALIZABLE isolation, with connect, statement and lock
    timeouts set on every connection. Other backends are rejected.
    """
    url = make_url(database_url)
    backend = url.get_backend_name()

    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(f"Unsupported database backend '{backend}'. Use one of: {', '.join(SUPPORTED_BACKENDS)}.")

    if backend == "postgresql":
        return create_engine(
            url,
            isolation_level="SERIALIZABLE",
            pool_timeout=timeout_seconds,
            pool_pre_ping=True,
            connect_args=postgres_connect_args(timeout_seconds),
        )

    if _is_sqlite_memory(url.database, url.query):
        raise ValueError("In-memory SQLite is not supported; set STORE_PROVIDER=memory instead.")
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, connect_args={"timeout": timeout_seconds, "check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        if conn.get_execution_options().get("immediate", False):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def postgres_connect_args(timeout_seconds: float) -> dict[str, Any]:
    """libpq parameters that bound connecting, statements and lock waits."""
    millis = max(1, int(timeout_seconds * 1000))
    return {
        # libpq only accepts whole seconds here, and treats 0 as "wait forever".
        "connect_timeout": max(1, math.ceil(timeout_seconds)),
        "options": f"-c statement_timeout={millis} -c lock_timeout={millis}",
    }


def _is_sqlite_memory(database: str | None, query: Any) -> bool:
    if not database or database == ":memory:":
        return True
    return query.get("mode") == "memory"


class SqlAppointmentStore(AppointmentStorePort):
    def __init__(self, engine: Engine, max_retries: int = 3) -> None:
        self._engine = engine
        self._writer = engine.execution_options(immediate=True)
        self._max_retries = max_retries
        self._logger = logging.getLogger(__name__)

    def create_schema(self) -> None:
        self._run(lambda: metadata.create_all(self._engine))

    def list_booked_intervals(self, appointment_date: date) -> list[TimeInterval]:
        def _query() -> list[TimeInterval]:
            stmt = (
                select(appointments.c.start_time, appointments.c.end_time)
                .where(appointments.c.appointment_date == format_date(appointment_date))
                .where(appointments.c.status != AppointmentStatus.CANCELLED.value)
                .order_by(appointments.c.start_time)
            )
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).all()
            return [TimeInterval(parse_time(row.start_time), parse_time(row.end_time)) for row in rows]

        return self._run(_query)

    def insert_if_free(self, appointment: Appointment) -> Appointment:
        def _insert(conn: Connection) -> Appointment:
            if appointment.occupies_slot and self._has_conflict(conn, appointment):
                raise SlotAlreadyBooked()
            row = _to_row(appointment)
            conn.execute(insert(appointments).values(**row))
            return replace(appointment, created_at=row["created_at"], updated_at=row["updated_at"])

        return self._write(_insert)

    def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        notes: str | None = None,
        can_transition: TransitionCheck | None = None,
    ) -> Appointment:
        def _update(conn: Connection) -> Appointment:
            row = conn.execute(select(appointments).where(appointments.c.id == appointment_id)).mappings().first()
            if row is None:
                raise NotFound(f"Appointment {appointment_id} not found")
            current = _from_row(row)
            if can_transition is not None and not can_transition(current.status, status):
                raise InvalidTransition(f"Cannot change status from {current.status.value} to {status.value}")

            values: dict[str, Any] = {"status": status.value, "updated_at": datetime.now(timezone.utc)}
            if notes is not None:
                values["notes"] = notes

            if not current.occupies_slot and status.occupies_slot and self._has_conflict(conn, current):
                raise SlotAlreadyBooked()

            conn.execute(update(appointments).where(appointments.c.id == appointment_id).values(**values))
            refreshed = conn.execute(select(appointments).where(appointments.c.id == appointment_id)).mappings().one()
            return _from_row(refreshed)

        return self._write(_update)

    def get(self, appointment_id: str) -> Appointment | None:
        def _query() -> Appointment | None:
            with self._engine.connect() as conn:
                row = conn.execute(select(appointments).where(appointments.c.id == appointment_id)).mappings().first()
            return _from_row(row) if row is not None else None

        return self._run(_query)

    def list_range(
        self,
        date_from: date,
        date_to: date,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        stmt = (
            select(appointments)
            .where(appointments.c.appointment_date >= format_date(date_from))
            .where(appointments.c.appointment_date <= format_date(date_to))
            .order_by(appointments.c.appointment_date, appointments.c.start_time)
        )
        if statuses is not None:
            stmt = stmt.where(appointments.c.status.in_([status.value for status in statuses]))

        def _query() -> list[Appointment]:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
            return [_from_row(row) for row in rows]

        return self._run(_query)

    def _has_conflict(self, conn: Connection, appointment: Appointment) -> bool:
        stmt = (
            select(appointments.c.id)
            .where(appointments.c.appointment_date == format_date(appointment.appointment_date))
            .where(appointments.c.status != AppointmentStatus.CANCELLED.value)
            .where(appointments.c.start_time < format_storage_time(appointment.end_time))
            .where(appointments.c.end_time > format_storage_time(appointment.start_time))
            .where(appointments.c.id != appointment.id)
            .limit(1)
        )
        return conn.execute(stmt).first() is not None

    def _write(self, operation: Callable[[Connection], T]) -> T:
        """
        Run operation inside one write transaction. Serialization failures are
        retried; the retry re-reads, so a lost race surfaces as SlotAlreadyBooked.
        """
        attempt = 0
        while True:
            try:
                with self._writer.begin() as conn:
                    return operation(conn)
            except OperationalError as e:
                if _is_serialization_failure(e) and attempt < self._max_retries:
                    attempt += 1
                    self._logger.info("Retrying appointment write", extra={"reason": f"serialization failure #{attempt}"})
                    continue
                self._logger.error("Appointment store write failed", extra={"reason": str(e.orig)})
                raise StorageUnavailable("Appointment store is unavailable, please retry") from e
            except IntegrityError as e:
                self._logger.error("Appointment store rejected write", extra={"reason": str(e.orig)})
                raise StorageUnavailable("Appointment store rejected the write") from e
            except (DBAPIError, PoolTimeoutError) as e:
                self._logger.error("Appointment store write failed", extra={"reason": str(e)})
                raise StorageUnavailable("Appointment store is unavailable, please retry") from e

    def _run(self, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except (DBAPIError, PoolTimeoutError) as e:
            self._logger.error("Appointment store read failed", extra={"reason": str(e)})
            raise StorageUnavailable("Appointment store is unavailable, please retry") from e


def _is_serialization_failure(exc: OperationalError) -> bool:
    # PostgreSQL serialization_failure and deadlock_detected; SQLite never raises these.
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in SERIALIZATION_FAILURE_CODES:
        return True
    message = str(exc).lower()
    return "could not serialize access" in message or "deadlock detected" in message


def _to_row(appointment: Appointment) -> dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "id": appointment.id,
        "service_id": appointment.service_id,
        "patient_name": appointment.patient_name,
        "patient_email": appointment.patient_email,
        "patient_phone": appointment.patient_phone,
        "appointment_date": format_date(appointment.appointment_date),
        "start_time": format_storage_time(appointment.start_time),
        "end_time": format_storage_time(appointment.end_time),
        "status": appointment.status.value,
        "notes": appointment.notes,
        "created_at": appointment.created_at or now,
        "updated_at": appointment.updated_at or now,
    }


def _from_row(row: RowMapping) -> Appointment:
    return Appointment(
        id=row["id"],
        service_id=row["service_id"],
        patient_name=row["patient_name"],
        patient_email=row["patient_email"],
        patient_phone=row["patient_phone"],
        appointment_date=parse_date(row["appointment_date"]),
        start_time=parse_time(row["start_time"]),
        end_time=parse_time(row["end_time"]),
        status=AppointmentStatus(row["status"]),
        notes=row["notes"],
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops the offset on DateTime(timezone=True); values are always written in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
