from __future__ import annotations

from datetime import date, timedelta
from typing import Dict

import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import settings
from app.main import app
from app.scheduling import AvailabilityType, DayOfWeek
from app.schemas import AvailabilityCreate, LocationCreate, PatientCreate, ProviderCreate
from app.services import (
    create_availability,
    create_location,
    create_patient,
    create_provider,
    create_user,
    ensure_seed_data,
)


def _login(client: TestClient, username: str, password: str) -> Dict[str, str]:
    response = client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _next_monday() -> date:
    today = date.today()
    return today + timedelta(days=(7 - today.weekday()) % 7 + 7)


@pytest.fixture
def api_context(database) -> Dict[str, object]:
    with Session(database) as session:
        ensure_seed_data(session)
        patient = create_patient(session, PatientCreate(name="Liisa Lahtinen", email="liisa@example.com"))
        other = create_patient(session, PatientCreate(name="Pekka Salo", email="pekka@example.com"))
        provider = create_provider(
            session, ProviderCreate(name="Dr. Heikkinen", email="heikkinen@example.com", specialty="GP")
        )
        location = create_location(session, LocationCreate(name="North Clinic"))
        create_availability(
            session,
            data=AvailabilityCreate(
                provider_id=provider.id,
                availability_type=AvailabilityType.OFFLINE,
                day_of_week=DayOfWeek.MONDAY,
                start_time="08:00",
                end_time="16:00",
                location_id=location.id,
            ),
        )
        create_user(
            session,
            username="liisa",
            password="patientpass",
            display_name="Liisa",
            role_code="patient",
            patient_id=patient.id,
        )
        create_user(
            session,
            username="pekka",
            password="patientpass",
            display_name="Pekka",
            role_code="patient",
            patient_id=other.id,
        )
        create_user(
            session,
            username="heikkinen",
            password="providerpass",
            display_name="Dr. Heikkinen",
            role_code="provider",
            provider_id=provider.id,
        )
        context: Dict[str, object] = {
            "patient_id": patient.id,
            "other_patient_id": other.id,
            "provider_id": provider.id,
            "location_id": location.id,
        }

    with TestClient(app) as client:
        context["client"] = client
        yield context


def _booking(context: Dict[str, object], **overrides) -> Dict[str, object]:
    payload = {
        "date": _next_monday().isoformat(),
        "time": "09:30",
        "patient_id": context["patient_id"],
        "provider_id": context["provider_id"],
        "location_id": context["location_id"],
        "chief_complaint": "Back pain",
    }
    payload.update(overrides)
    return payload


def test_login_rejects_bad_credentials(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    response = client.post("/api/v1/auth/login", json={"username": "liisa", "password": "nope"})
    assert response.status_code == 401


def test_requests_require_a_token(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    assert client.get("/api/v1/appointments/").status_code == 401


def test_patient_books_and_lists_own_appointments(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "liisa", "patientpass")

    response = client.post("/api/v1/appointments/", json=_booking(api_context), headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "SCHEDULED"
    assert body["time"] == "09:30"

    listing = client.get("/api/v1/appointments/", headers=headers)
    assert listing.status_code == 200
    assert listing.json()["total"] == 1
    assert listing.json()["page_size"] == settings.default_page_size


def test_duplicate_booking_returns_conflict(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "liisa", "patientpass")

    assert client.post("/api/v1/appointments/", json=_booking(api_context), headers=headers).status_code == 201
    response = client.post(
        "/api/v1/appointments/", json=_booking(api_context, time="11:00"), headers=headers
    )
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "DUPLICATE_APPOINTMENT"
    assert detail["kind"] == "CONFLICT"


def test_time_outside_availability_is_a_bad_request(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "liisa", "patientpass")
    response = client.post("/api/v1/appointments/", json=_booking(api_context, time="17:00"), headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "TIME_OUTSIDE_AVAILABILITY"


def test_unknown_patient_is_not_found(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, settings.first_superuser, settings.first_superuser_password)
    response = client.post("/api/v1/appointments/", json=_booking(api_context, patient_id=9999), headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "PATIENT_NOT_FOUND"


def test_status_endpoint_enforces_lifecycle(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    patient_headers = _login(client, "liisa", "patientpass")
    provider_headers = _login(client, "heikkinen", "providerpass")

    created = client.post("/api/v1/appointments/", json=_booking(api_context), headers=patient_headers).json()

    response = client.patch(
        f"/api/v1/appointments/{created['id']}/status",
        json={"status": "COMPLETED"},
        headers=provider_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_TRANSITION"

    response = client.patch(
        f"/api/v1/appointments/{created['id']}/status",
        json={"status": "CONFIRMED"},
        headers=provider_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"


def test_other_patient_is_forbidden(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    owner_headers = _login(client, "liisa", "patientpass")
    stranger_headers = _login(client, "pekka", "patientpass")

    created = client.post("/api/v1/appointments/", json=_booking(api_context), headers=owner_headers).json()

    response = client.get(f"/api/v1/appointments/{created['id']}", headers=stranger_headers)
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "CANNOT_MODIFY_OTHER_PATIENT"

    response = client.put(
        f"/api/v1/appointments/{created['id']}",
        json={"time": "10:00"},
        headers=stranger_headers,
    )
    assert response.status_code == 403


def test_update_and_delete_appointment(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "liisa", "patientpass")
    created = client.post("/api/v1/appointments/", json=_booking(api_context), headers=headers).json()

    response = client.put(
        f"/api/v1/appointments/{created['id']}",
        json={"time": "14:15", "is_emergency": True},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["time"] == "14:15"
    assert response.json()["is_emergency"] is True

    assert client.delete(f"/api/v1/appointments/{created['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/appointments/{created['id']}", headers=headers).status_code == 404


def test_provider_cannot_book_for_a_colleague(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "heikkinen", "providerpass")
    response = client.post(
        "/api/v1/appointments/",
        json=_booking(api_context, provider_id=api_context["provider_id"] + 1),
        headers=headers,
    )
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "CANNOT_MODIFY_OTHER_PROVIDER"


def test_storage_failure_is_service_unavailable(
    api_context: Dict[str, object], monkeypatch: pytest.MonkeyPatch
) -> None:
    client: TestClient = api_context["client"]
    headers = _login(client, "liisa", "patientpass")

    def failing_commit(self: Session) -> None:
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(Session, "commit", failing_commit)
    response = client.post("/api/v1/appointments/", json=_booking(api_context), headers=headers)
    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "STORAGE_ERROR"

    monkeypatch.undo()
    listing = client.get("/api/v1/appointments/", headers=headers)
    assert listing.json()["total"] == 0


def test_health_endpoint(api_context: Dict[str, object]) -> None:
    client: TestClient = api_context["client"]
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Process-Time" in response.headers
