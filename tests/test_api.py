"""
Tests for the HTTP adapter: status codes and payload shapes.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clinic_scheduler.application.exceptions import StorageUnavailable
from clinic_scheduler.application.use_cases.availability import AvailabilityUseCase
from clinic_scheduler.application.use_cases.booking import BookingUseCase
from clinic_scheduler.application.use_cases.lifecycle import AppointmentLifecycleUseCase
from clinic_scheduler.application.use_cases.list_appointments import ListAppointmentsUseCase
from clinic_scheduler.infrastructure.store.memory_store import MemoryAppointmentStore
from clinic_scheduler.main import app
from clinic_scheduler.wiring.dependencies import (
    get_availability_use_case,
    get_booking_use_case,
    get_lifecycle_use_case,
    get_list_appointments_use_case,
)

from conftest import TODAY, UTC

BOOKING = {
    "service_id": "dental-examination",
    "appointment_date": "2030-01-07",
    "start_time": "14:00",
    "patient_name": "Jane Doe",
    "patient_email": "jane@example.com",
    "patient_phone": "555-123-4567",
}


class _DownStore(MemoryAppointmentStore):
    def list_booked_intervals(self, appointment_date):
        raise StorageUnavailable("database unreachable")


def _override(store, catalog, calendar, notifier) -> None:
    app.dependency_overrides[get_availability_use_case] = lambda: AvailabilityUseCase(
        store=store, catalog=catalog, calendar=calendar, timezone=UTC, today=lambda: TODAY
    )
    app.dependency_overrides[get_booking_use_case] = lambda: BookingUseCase(
        store=store, catalog=catalog, calendar=calendar, timezone=UTC, notifier=notifier, today=lambda: TODAY
    )
    app.dependency_overrides[get_lifecycle_use_case] = lambda: AppointmentLifecycleUseCase(
        store=store, notifier=notifier
    )
    app.dependency_overrides[get_list_appointments_use_case] = lambda: ListAppointmentsUseCase(store=store)


@pytest.fixture
def client(catalog, calendar, notifier):
    _override(MemoryAppointmentStore(), catalog, calendar, notifier)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_services_lists_active_only(client):
    ids = [s["id"] for s in client.get("/api/v1/services").json()]
    assert "dental-examination" in ids
    assert "root-canal" not in ids

    all_ids = [s["id"] for s in client.get("/api/v1/services", params={"include_inactive": True}).json()]
    assert "root-canal" in all_ids


def test_availability_endpoint(client):
    response = client.get("/api/v1/availability", params={"service_id": "dental-examination", "date": "2030-01-07"})

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2030-01-07"
    assert len(body["slots"]) == 16


def test_booking_round_trip(client):
    created = client.post("/api/v1/appointments", json=BOOKING)
    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "pending"
    assert body["start_time"] == "14:00:00"
    assert body["end_time"] == "14:30:00"

    slots = client.get(
        "/api/v1/availability", params={"service_id": "dental-examination", "date": "2030-01-07"}
    ).json()["slots"]
    assert "14:00" not in slots

    fetched = client.get(f"/api/v1/appointments/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["patient_name"] == "Jane Doe"


def test_taken_slot_is_a_conflict(client):
    assert client.post("/api/v1/appointments", json=BOOKING).status_code == 201

    response = client.post("/api/v1/appointments", json=BOOKING)
    assert response.status_code == 409
    assert "just taken" in response.json()["detail"]


def test_closed_day_is_a_bad_request(client):
    response = client.post("/api/v1/appointments", json={**BOOKING, "appointment_date": "2030-01-13"})
    assert response.status_code == 400


def test_schema_violations_are_unprocessable(client):
    response = client.post("/api/v1/appointments", json={**BOOKING, "patient_name": "J"})
    assert response.status_code == 422


def test_status_update_frees_slot(client):
    appointment_id = client.post("/api/v1/appointments", json=BOOKING).json()["id"]

    response = client.patch(
        f"/api/v1/appointments/{appointment_id}/status", json={"status": "cancelled", "notes": "Patient called"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["notes"] == "Patient called"

    slots = client.get(
        "/api/v1/availability", params={"service_id": "dental-examination", "date": "2030-01-07"}
    ).json()["slots"]
    assert "14:00" in slots


def test_status_update_for_unknown_appointment(client):
    response = client.patch("/api/v1/appointments/missing/status", json={"status": "approved"})
    assert response.status_code == 404


def test_list_appointments_filters_by_status(client):
    first = client.post("/api/v1/appointments", json=BOOKING).json()
    client.post("/api/v1/appointments", json={**BOOKING, "start_time": "09:00"})
    client.patch(f"/api/v1/appointments/{first['id']}/status", json={"status": "approved"})

    response = client.get(
        "/api/v1/appointments",
        params=[("date_from", "2030-01-01"), ("date_to", "2030-01-31"), ("status", "approved")],
    )
    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == [first["id"]]

    everything = client.get("/api/v1/appointments", params={"date_from": "2030-01-01", "date_to": "2030-01-31"})
    assert [a["start_time"] for a in everything.json()] == ["09:00:00", "14:00:00"]


def test_storage_outage_is_service_unavailable(catalog, calendar, notifier):
    _override(_DownStore(), catalog, calendar, notifier)
    try:
        response = TestClient(app).get(
            "/api/v1/availability", params={"service_id": "dental-examination", "date": "2030-01-07"}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert "Retry-After" in response.headers
