from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from clinic_scheduler.core.config import Settings, settings
from clinic_scheduler.application.ports.appointment_store import AppointmentStorePort
from clinic_scheduler.application.ports.change_notifier import ChangeNotifierPort
from clinic_scheduler.application.ports.service_catalog import ServiceCatalogPort
from clinic_scheduler.application.use_cases.availability import AvailabilityUseCase
from clinic_scheduler.application.use_cases.booking import BookingUseCase
from clinic_scheduler.application.use_cases.lifecycle import AppointmentLifecycleUseCase
from clinic_scheduler.application.use_cases.list_appointments import ListAppointmentsUseCase
from clinic_scheduler.domain.entities.clinic_calendar import ClinicCalendar
from clinic_scheduler.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from clinic_scheduler.infrastructure.notifications.in_process_notifier import InProcessChangeNotifier
from clinic_scheduler.infrastructure.store.memory_store import MemoryAppointmentStore
from clinic_scheduler.infrastructure.store.sql_store import SqlAppointmentStore, create_store_engine


logger = logging.getLogger(__name__)


def build_clinic_calendar(config: Settings) -> ClinicCalendar:
    return ClinicCalendar(
        opening_time=config.CLINIC_OPENING_TIME,
        closing_time=config.CLINIC_CLOSING_TIME,
        closed_weekdays=frozenset(config.CLINIC_CLOSED_WEEKDAYS),
        step_minutes=config.SLOT_STEP_MINUTES,
    )


def build_appointment_store(config: Settings) -> AppointmentStorePort:
    provider = config.STORE_PROVIDER.lower().strip()
    if provider == "memory":
        logger.info("Using MemoryAppointmentStore (STORE_PROVIDER=memory)")
        return MemoryAppointmentStore(timeout_seconds=config.STORAGE_TIMEOUT_SECONDS)
    if provider == "sql":
        logger.info("Using SqlAppointmentStore", extra={"reason": config.DATABASE_URL.split("://", 1)[0]})
        engine = create_store_engine(config.DATABASE_URL, timeout_seconds=config.STORAGE_TIMEOUT_SECONDS)
        store = SqlAppointmentStore(engine, max_retries=config.BOOKING_MAX_RETRIES)
        store.create_schema()
        return store
    raise ValueError(f"Unknown STORE_PROVIDER '{config.STORE_PROVIDER}'. Use 'memory' or 'sql'.")


@lru_cache
def get_clinic_calendar() -> ClinicCalendar:
    return build_clinic_calendar(settings)


@lru_cache
def get_appointment_store() -> AppointmentStorePort:
    return build_appointment_store(settings)


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_change_notifier() -> ChangeNotifierPort:
    return InProcessChangeNotifier()


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TIMEZONE)


def get_availability_use_case() -> AvailabilityUseCase:
    return AvailabilityUseCase(
        store=get_appointment_store(),
        catalog=get_service_catalog(),
        calendar=get_clinic_calendar(),
        timezone=get_timezone(),
    )


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        store=get_appointment_store(),
        catalog=get_service_catalog(),
        calendar=get_clinic_calendar(),
        timezone=get_timezone(),
        notifier=get_change_notifier(),
    )


def get_lifecycle_use_case() -> AppointmentLifecycleUseCase:
    return AppointmentLifecycleUseCase(
        store=get_appointment_store(),
        notifier=get_change_notifier(),
        policy=settings.STATUS_TRANSITION_POLICY,
    )


def get_list_appointments_use_case() -> ListAppointmentsUseCase:
    return ListAppointmentsUseCase(store=get_appointment_store())
