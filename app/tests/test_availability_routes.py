from __future__ import annotations

from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import deps
import app.api.routes.availability as availability_routes
from app.services.availability import snapshot_from_rows

availability_test_app = FastAPI()
availability_test_app.include_router(availability_routes.router)


def _snapshot():
    rooms = [
        {"id": "r101", "room_number": "101", "room_type_id": "deluxe", "category": "main building", "status": "Available"},
        {"id": "r102", "room_number": "102", "room_type_id": "deluxe", "category": "main building", "status": "Available"},
        {"id": "r201", "room_number": "201", "room_type_id": "suite", "category": "cottage", "status": "Blocked"},
    ]
    reservations = [
        {
            "id": "res-1",
            "room_id": "r101",
            "check_in_date": "2026-03-10",
            "check_out_date": "2026-03-12",
            "status": "Confirmed",
            "guests": {"name": "Asha Rao"},
        }
    ]
    return snapshot_from_rows(rooms, reservations)


def _override_dependencies():
    availability_test_app.dependency_overrides[deps.get_current_user] = lambda: {"id": "user-1"}
    availability_test_app.dependency_overrides[deps.get_snapshot] = _snapshot


def test_room_availability_lists_conflicts():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/rooms/r101",
                params={"check_in": "2026-03-11", "check_out": "2026-03-13"},
            )

        assert response.status_code == 200
        assert response.json()["available"] is False
        assert response.json()["conflicts"] == ["res-1"]
    finally:
        availability_test_app.dependency_overrides = {}


def test_room_availability_allows_checkout_day_turnover():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/rooms/r101",
                params={"check_in": "2026-03-12", "check_out": "2026-03-14"},
            )

        assert response.json()["available"] is True
    finally:
        availability_test_app.dependency_overrides = {}


def test_room_availability_rejects_reversed_range():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/rooms/r101",
                params={"check_in": "2026-03-12", "check_out": "2026-03-12"},
            )

        assert response.status_code == 422
    finally:
        availability_test_app.dependency_overrides = {}


def test_room_availability_unknown_room_is_404():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/rooms/r999",
                params={"check_in": "2026-03-12", "check_out": "2026-03-13"},
            )

        assert response.status_code == 404
    finally:
        availability_test_app.dependency_overrides = {}


def test_room_type_availability_counts():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/room-types/deluxe", params={"date": "2026-03-11"}
            )

        assert response.json() == {
            "room_type_id": "deluxe",
            "date": "2026-03-11",
            "available": 1,
            "total": 2,
        }
    finally:
        availability_test_app.dependency_overrides = {}


def test_free_rooms_skips_booked_and_blocked_rooms():
    _override_dependencies()

    try:
        with TestClient(availability_test_app) as client:
            response = client.get(
                "/v1.0/availability/free-rooms",
                params={"check_in": "2026-03-10", "check_out": "2026-03-11"},
            )

        assert [room["id"] for room in response.json()["items"]] == ["r102"]
    finally:
        availability_test_app.dependency_overrides = {}


def test_calendar_defaults_window_from_settings(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(availability_routes, "get_settings", lambda: SimpleNamespace(calendar_days=3))

    try:
        with TestClient(availability_test_app) as client:
            response = client.get("/v1.0/availability/calendar", params={"start": "2026-03-10"})

        body = response.json()
        assert response.status_code == 200
        assert body["days"] == 3
        assert [day["bookings"] for day in body["overview"]] == [1, 1, 0]
        assert body["bars"][0]["guest_name"] == "Asha Rao"
        assert body["bars"][0]["span"] == 2
    finally:
        availability_test_app.dependency_overrides = {}
