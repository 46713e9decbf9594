from __future__ import annotations

from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import deps
from app.db.base import get_supabase
import app.api.routes.guests as guest_routes
from app.crud.guest import _build_guest_search_filter
from app.services.errors import ConflictError

guest_test_app = FastAPI()
guest_test_app.include_router(guest_routes.router)

GUEST_ID = "0b7c2d8e-1a2b-4c3d-8e9f-0a1b2c3d4e5f"


def _override_current_user():
    return {"id": "user-1", "sub": "user-1"}


def _sample_guest(**overrides) -> dict:
    guest = {
        "id": GUEST_ID,
        "name": "Asha Rao",
        "phone": "9876543210",
        "email": "asha@example.com",
        "city": "Pune",
        "country": "India",
        "guest_type": "VIP",
        "total_bookings": 3,
        "total_spent": 24500.0,
        "loyalty_points": 245,
        "last_visit": "2026-02-20",
        "created_at": "2026-01-01T10:00:00+00:00",
    }
    guest.update(overrides)
    return guest


def test_list_guests_forwards_search_and_type(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    list_mock = AsyncMock(return_value=[_sample_guest()])
    monkeypatch.setattr(guest_routes, "list_guests", list_mock)

    try:
        with TestClient(guest_test_app) as client:
            response = client.get(
                "/v1.0/guests", params={"search": "asha", "guest_type": "VIP"}
            )

        assert response.status_code == 200
        assert response.json()["items"][0]["loyalty_points"] == 245
        assert list_mock.await_args.kwargs["search"] == "asha"
        assert list_mock.await_args.kwargs["guest_type"] == "VIP"
    finally:
        guest_test_app.dependency_overrides = {}


def test_list_guests_rejects_unknown_guest_type():
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()

    try:
        with TestClient(guest_test_app) as client:
            response = client.get("/v1.0/guests", params={"guest_type": "Royalty"})

        assert response.status_code == 422
    finally:
        guest_test_app.dependency_overrides = {}


def test_create_guest_strips_whitespace(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    create_mock = AsyncMock(return_value=_sample_guest())
    monkeypatch.setattr(guest_routes, "create_guest", create_mock)

    try:
        with TestClient(guest_test_app) as client:
            response = client.post(
                "/v1.0/guests",
                json={"name": "  Asha Rao ", "phone": " 9876543210 ", "email": "  "},
            )

        assert response.status_code == 201
        data = create_mock.await_args.args[1]
        assert data["name"] == "Asha Rao"
        assert data["phone"] == "9876543210"
        assert data["email"] is None
    finally:
        guest_test_app.dependency_overrides = {}


def test_create_guest_can_reuse_existing_phone(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    reuse_mock = AsyncMock(return_value=_sample_guest())
    create_mock = AsyncMock()
    monkeypatch.setattr(guest_routes, "get_or_create_guest", reuse_mock)
    monkeypatch.setattr(guest_routes, "create_guest", create_mock)

    try:
        with TestClient(guest_test_app) as client:
            response = client.post(
                "/v1.0/guests",
                params={"reuse_existing": "true"},
                json={"name": "Asha", "phone": "9876543210"},
            )

        assert response.status_code == 201
        assert response.json()["id"] == GUEST_ID
        reuse_mock.assert_awaited_once()
        create_mock.assert_not_awaited()
    finally:
        guest_test_app.dependency_overrides = {}


def test_create_guest_duplicate_phone_is_409(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    monkeypatch.setattr(
        guest_routes,
        "create_guest",
        AsyncMock(side_effect=ConflictError("A guest with this phone number already exists.")),
    )

    try:
        with TestClient(guest_test_app) as client:
            response = client.post("/v1.0/guests", json={"name": "Asha", "phone": "9876543210"})

        assert response.status_code == 409
    finally:
        guest_test_app.dependency_overrides = {}


def test_get_guest_by_phone_not_found(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    monkeypatch.setattr(guest_routes, "get_guest_by_phone", AsyncMock(return_value=None))

    try:
        with TestClient(guest_test_app) as client:
            response = client.get("/v1.0/guests/by-phone/9876543210")

        assert response.status_code == 404
        assert response.json()["detail"] == "Guest not found"
    finally:
        guest_test_app.dependency_overrides = {}


def test_patch_guest_updates_only_sent_fields(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    monkeypatch.setattr(guest_routes, "get_guest_by_id", AsyncMock(return_value=_sample_guest()))
    update_mock = AsyncMock(return_value=_sample_guest(guest_type="Corporate"))
    monkeypatch.setattr(guest_routes, "update_guest", update_mock)

    try:
        with TestClient(guest_test_app) as client:
            response = client.patch(f"/v1.0/guests/{GUEST_ID}", json={"guest_type": "Corporate"})

        assert response.status_code == 200
        assert response.json()["guest_type"] == "Corporate"
        assert update_mock.await_args.args[2] == {"guest_type": "Corporate"}
    finally:
        guest_test_app.dependency_overrides = {}


def test_delete_guest_with_reservations_is_409(monkeypatch):
    guest_test_app.dependency_overrides[deps.get_current_user] = _override_current_user
    guest_test_app.dependency_overrides[get_supabase] = lambda: object()
    monkeypatch.setattr(
        guest_routes,
        "delete_guest",
        AsyncMock(side_effect=ConflictError("Cannot delete guest. They have existing reservations.")),
    )

    try:
        with TestClient(guest_test_app) as client:
            response = client.delete(f"/v1.0/guests/{GUEST_ID}")

        assert response.status_code == 409
    finally:
        guest_test_app.dependency_overrides = {}


def test_build_guest_search_filter_escapes_commas():
    assert _build_guest_search_filter("Rao, Asha") == (
        "name.ilike.%Rao\\, Asha%,email.ilike.%Rao\\, Asha%,phone.ilike.%Rao\\, Asha%"
    )
