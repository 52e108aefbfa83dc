from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from clinic_scheduler.application.use_cases.availability import AvailabilityUseCase
from clinic_scheduler.application.use_cases.booking import BookingUseCase
from clinic_scheduler.application.use_cases.lifecycle import AppointmentLifecycleUseCase
from clinic_scheduler.application.use_cases.list_appointments import ListAppointmentsUseCase
from clinic_scheduler.domain.entities.appointment import PatientInfo
from clinic_scheduler.domain.entities.clinic_calendar import ClinicCalendar
from clinic_scheduler.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from clinic_scheduler.infrastructure.notifications.in_process_notifier import InProcessChangeNotifier
from clinic_scheduler.infrastructure.store.memory_store import MemoryAppointmentStore
from clinic_scheduler.infrastructure.store.sql_store import SqlAppointmentStore, create_store_engine

# 2030-01-07 is a Monday; the default clinic calendar is closed on Sundays.
TODAY = date(2030, 1, 7)
UTC = ZoneInfo("UTC")


@pytest.fixture
def calendar() -> ClinicCalendar:
    return ClinicCalendar()


@pytest.fixture
def catalog() -> ServiceCatalogStore:
    return ServiceCatalogStore()


@pytest.fixture
def patient() -> PatientInfo:
    return PatientInfo(name="Jane Doe", email="jane@example.com", phone="555-123-4567")


@pytest.fixture
def notifier() -> InProcessChangeNotifier:
    return InProcessChangeNotifier()


@pytest.fixture
def sql_store(tmp_path):
    engine = create_store_engine(f"sqlite:///{tmp_path / 'clinic.db'}", timeout_seconds=5.0)
    store = SqlAppointmentStore(engine)
    store.create_schema()
    yield store
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        return MemoryAppointmentStore()
    return request.getfixturevalue("sql_store")


@pytest.fixture
def availability(store, catalog, calendar) -> AvailabilityUseCase:
    return AvailabilityUseCase(store=store, catalog=catalog, calendar=calendar, timezone=UTC, today=lambda: TODAY)


@pytest.fixture
def booking(store, catalog, calendar, notifier) -> BookingUseCase:
    return BookingUseCase(
        store=store,
        catalog=catalog,
        calendar=calendar,
        timezone=UTC,
        notifier=notifier,
        today=lambda: TODAY,
    )


@pytest.fixture
def lifecycle(store, notifier) -> AppointmentLifecycleUseCase:
    return AppointmentLifecycleUseCase(store=store, notifier=notifier)


@pytest.fixture
def appointments_query(store) -> ListAppointmentsUseCase:
    return ListAppointmentsUseCase(store=store)
