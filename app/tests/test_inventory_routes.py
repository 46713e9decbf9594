from __future__ import annotations

from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api import deps
from app.db.base import get_supabase
import app.api.routes.room_types as room_type_routes
import app.api.routes.rooms as room_routes
from app.services.availability import snapshot_from_rows
from app.services.errors import BookingValidationError, ConflictError

inventory_test_app = FastAPI()
inventory_test_app.include_router(room_routes.router)
inventory_test_app.include_router(room_type_routes.router)

ROOM_ID = "3c1d7e55-0f3a-4c7b-9a1e-6b2d8f4e1a90"
ROOM_TYPE_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"
RATE_ID = "11111111-2222-4333-8444-555555555555"


def _override_dependencies():
    inventory_test_app.dependency_overrides[deps.get_current_user] = lambda: {"id": "user-1"}
    inventory_test_app.dependency_overrides[get_supabase] = lambda: object()


def _room_type() -> dict:
    return {"id": ROOM_TYPE_ID, "name": "Deluxe", "base_price": 3000, "capacity": 2}


def _room(**overrides) -> dict:
    room = {
        "id": ROOM_ID,
        "room_number": "101",
        "floor": 1,
        "room_type_id": ROOM_TYPE_ID,
        "category": "main building",
        "status": "Available",
        "room_types": _room_type(),
    }
    room.update(overrides)
    return room


def _rate(**overrides) -> dict:
    rate = {
        "id": RATE_ID,
        "room_type_id": ROOM_TYPE_ID,
        "rate_name": "Bed and Breakfast",
        "rate_code": "BB",
        "base_price": 3500,
        "is_default": False,
    }
    rate.update(overrides)
    return rate


def test_list_rooms_includes_room_type(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(room_routes, "list_rooms", AsyncMock(return_value=[_room()]))

    try:
        with TestClient(inventory_test_app) as client:
            response = client.get("/v1.0/rooms")

        assert response.status_code == 200
        assert response.json()["items"][0]["room_types"]["name"] == "Deluxe"
    finally:
        inventory_test_app.dependency_overrides = {}


def test_create_room_duplicate_number_is_409(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(
        room_routes,
        "create_room",
        AsyncMock(side_effect=ConflictError("Room number already exists. Please use a different number.")),
    )

    try:
        with TestClient(inventory_test_app) as client:
            response = client.post(
                "/v1.0/rooms", json={"room_number": "101", "room_type_id": ROOM_TYPE_ID}
            )

        assert response.status_code == 409
    finally:
        inventory_test_app.dependency_overrides = {}


def test_change_room_status_to_maintenance(monkeypatch):
    _override_dependencies()
    status_mock = AsyncMock(return_value=True)
    monkeypatch.setattr(room_routes, "set_room_status", status_mock)
    monkeypatch.setattr(
        room_routes,
        "get_room_by_id",
        AsyncMock(side_effect=[_room(), _room(status="Maintenance")]),
    )

    try:
        with TestClient(inventory_test_app) as client:
            response = client.put(f"/v1.0/rooms/{ROOM_ID}/status", json={"status": "Maintenance"})

        assert response.status_code == 200
        assert response.json()["status"] == "Maintenance"
        assert status_mock.await_args.args[1:] == (ROOM_ID, "Maintenance")
    finally:
        inventory_test_app.dependency_overrides = {}


def test_change_room_status_rejects_unknown_status():
    _override_dependencies()

    try:
        with TestClient(inventory_test_app) as client:
            response = client.put(f"/v1.0/rooms/{ROOM_ID}/status", json={"status": "Dirty"})

        assert response.status_code == 422
    finally:
        inventory_test_app.dependency_overrides = {}


def test_sync_status_uses_fresh_snapshot(monkeypatch):
    _override_dependencies()
    snapshot = snapshot_from_rows([_room()], [])
    inventory_test_app.dependency_overrides[deps.get_snapshot] = lambda: snapshot
    sync_mock = AsyncMock(return_value={"updated": 1, "statuses": {ROOM_ID: "Occupied"}})
    monkeypatch.setattr(room_routes, "sync_room_statuses", sync_mock)

    try:
        with TestClient(inventory_test_app) as client:
            response = client.post("/v1.0/rooms/sync-status")

        assert response.status_code == 200
        assert response.json() == {"updated": 1, "statuses": {ROOM_ID: "Occupied"}}
        assert sync_mock.await_args.args[1] is snapshot
    finally:
        inventory_test_app.dependency_overrides = {}


def test_delete_missing_room_is_404(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(room_routes, "delete_room", AsyncMock(return_value=False))

    try:
        with TestClient(inventory_test_app) as client:
            response = client.delete(f"/v1.0/rooms/{ROOM_ID}")

        assert response.status_code == 404
    finally:
        inventory_test_app.dependency_overrides = {}


def test_delete_room_type_in_use_is_409(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(
        room_type_routes,
        "delete_room_type",
        AsyncMock(side_effect=ConflictError("Cannot delete room type. It is being used by existing rooms.")),
    )

    try:
        with TestClient(inventory_test_app) as client:
            response = client.delete(f"/v1.0/room-types/{ROOM_TYPE_ID}")

        assert response.status_code == 409
    finally:
        inventory_test_app.dependency_overrides = {}


def test_create_rate_attaches_room_type_and_uppercases_code(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(room_type_routes, "get_room_type_by_id", AsyncMock(return_value=_room_type()))
    create_mock = AsyncMock(return_value=_rate())
    monkeypatch.setattr(room_type_routes, "create_rate_type", create_mock)

    try:
        with TestClient(inventory_test_app) as client:
            response = client.post(
                f"/v1.0/room-types/{ROOM_TYPE_ID}/rates",
                json={"rate_name": "Bed and Breakfast", "rate_code": "bb", "base_price": 3500},
            )

        assert response.status_code == 201
        data = create_mock.await_args.args[1]
        assert data["room_type_id"] == ROOM_TYPE_ID
        assert data["rate_code"] == "BB"
    finally:
        inventory_test_app.dependency_overrides = {}


def test_create_rate_rejects_inverted_night_limits():
    _override_dependencies()

    try:
        with TestClient(inventory_test_app) as client:
            response = client.post(
                f"/v1.0/room-types/{ROOM_TYPE_ID}/rates",
                json={
                    "rate_name": "Weekly",
                    "rate_code": "WK",
                    "base_price": 2500,
                    "min_nights": 7,
                    "max_nights": 3,
                },
            )

        assert response.status_code == 422
    finally:
        inventory_test_app.dependency_overrides = {}


def test_rate_of_another_room_type_is_404(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(
        room_type_routes,
        "get_rate_type_by_id",
        AsyncMock(return_value=_rate(room_type_id="some-other-type")),
    )

    try:
        with TestClient(inventory_test_app) as client:
            response = client.put(f"/v1.0/room-types/{ROOM_TYPE_ID}/rates/{RATE_ID}/default")

        assert response.status_code == 404
    finally:
        inventory_test_app.dependency_overrides = {}


def test_deleting_default_rate_is_422(monkeypatch):
    _override_dependencies()
    monkeypatch.setattr(
        room_type_routes, "get_rate_type_by_id", AsyncMock(return_value=_rate(is_default=True))
    )
    monkeypatch.setattr(
        room_type_routes,
        "delete_rate_type",
        AsyncMock(side_effect=BookingValidationError("The default rate cannot be deleted.")),
    )

    try:
        with TestClient(inventory_test_app) as client:
            response = client.delete(f"/v1.0/room-types/{ROOM_TYPE_ID}/rates/{RATE_ID}")

        assert response.status_code == 422
        assert response.json()["detail"] == ["The default rate cannot be deleted."]
    finally:
        inventory_test_app.dependency_overrides = {}
