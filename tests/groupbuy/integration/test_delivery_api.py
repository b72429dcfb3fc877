"""Integration tests for dispatch, rider location and delivery tracking endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from groupbuy.api import delivery_router, register_error_handlers, shared_order_router
from groupbuy.geocoding import get_geocoder
from groupbuy.notification.notification import Notification
from protean import current_domain


@pytest.fixture()
def client(catalog):
    app = FastAPI()
    app.include_router(shared_order_router)
    app.include_router(delivery_router)
    register_error_handlers(app)
    return TestClient(app)


def _as(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture()
def confirmed_order_id(client, carts):
    get_geocoder().configure({"Cyber Hub, Gate 2": (28.600, 77.200), "DLF Phase 3": (28.605, 77.200)})
    carts.restore_or_add("user-creator", "prod-rice", 3)
    response = client.post(
        "/shared-orders",
        json={
            "title": "Office lunch",
            "delivery_address": "Cyber Hub, Gate 2",
            "max_participants": 2,
            "min_order_amount": 500,
            "expires_in_hours": 24,
        },
        headers=_as("user-creator"),
    )
    order_id = response.json()["order_id"]
    carts.restore_or_add("user-2", "prod-dal", 5)
    client.post(f"/shared-orders/{order_id}/join", json={"delivery_address": "DLF Phase 3"}, headers=_as("user-2"))
    client.post(f"/shared-orders/{order_id}/confirm", headers=_as("user-creator"))
    return order_id


def _dispatch(client, order_id):
    return client.post(
        f"/deliveries/{order_id}/dispatch",
        json={"rider_id": "rider-1", "rider_name": "Ravi", "rider_phone": "+919800000000"},
        headers=_as("rider-1"),
    )


class TestDispatchEndpoint:
    def test_dispatch(self, client, confirmed_order_id):
        response = _dispatch(client, confirmed_order_id)
        assert response.status_code == 201
        assert response.json()["tracking_id"]

        order = client.get(f"/shared-orders/{confirmed_order_id}", headers=_as("user-2")).json()
        assert order["status"] == "out_for_delivery"
        assert order["rider"]["name"] == "Ravi"
        assert [p["delivery_order"] for p in order["participants"]] == [1, 2]

    def test_dispatch_open_order(self, client, carts):
        carts.restore_or_add("user-creator", "prod-rice", 1)
        order_id = client.post(
            "/shared-orders",
            json={"title": "x", "delivery_address": "y", "max_participants": 2, "expires_in_hours": 2},
            headers=_as("user-creator"),
        ).json()["order_id"]

        response = _dispatch(client, order_id)
        assert response.status_code == 409
        assert response.json()["error"] == "InvalidState"

    def test_dispatch_unknown_order(self, client):
        response = _dispatch(client, "no-such-order")
        assert response.status_code == 404


class TestRiderLocationEndpoint:
    def test_location_update(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.post(
            f"/deliveries/{confirmed_order_id}/location",
            json={"rider_id": "rider-1", "lat": 28.601, "lng": 77.200},
            headers=_as("rider-1"),
        )
        assert response.status_code == 200

        view = client.get(f"/deliveries/{confirmed_order_id}", headers=_as("user-2")).json()
        assert view["current_location"]["lat"] == 28.601

    def test_location_update_triggers_proximity_notifications(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        for _ in range(3):
            client.post(
                f"/deliveries/{confirmed_order_id}/location",
                json={"rider_id": "rider-1", "lat": 28.601, "lng": 77.200},
                headers=_as("rider-1"),
            )
        feed = current_domain.repository_for(Notification).recent_for_user("user-creator")
        assert [n.notification_type for n in feed].count("rider_nearby") == 1

    def test_wrong_rider(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.post(
            f"/deliveries/{confirmed_order_id}/location",
            json={"rider_id": "rider-9", "lat": 28.601, "lng": 77.200},
            headers=_as("rider-9"),
        )
        assert response.status_code == 403

    def test_invalid_latitude(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.post(
            f"/deliveries/{confirmed_order_id}/location",
            json={"rider_id": "rider-1", "lat": 120.0, "lng": 77.200},
            headers=_as("rider-1"),
        )
        assert response.status_code == 422


class TestCompleteStopEndpoint:
    def test_complete_all_stops(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        participants = client.get(f"/shared-orders/{confirmed_order_id}", headers=_as("x")).json()["participants"]

        first = client.post(
            f"/deliveries/{confirmed_order_id}/stops/{participants[0]['participant_id']}/complete",
            headers=_as("rider-1"),
        )
        assert first.json() == {"all_delivered": False, "status": "out_for_delivery"}

        last = client.post(
            f"/deliveries/{confirmed_order_id}/stops/{participants[1]['participant_id']}/complete",
            headers=_as("rider-1"),
        )
        assert last.json() == {"all_delivered": True, "status": "delivered"}

    def test_complete_unknown_stop(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.post(f"/deliveries/{confirmed_order_id}/stops/nobody/complete", headers=_as("rider-1"))
        assert response.status_code == 404


class TestTrackingEndpoint:
    def test_participant_view(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.get(f"/deliveries/{confirmed_order_id}", headers=_as("user-2"))
        assert response.status_code == 200
        body = response.json()
        assert body["my_delivery_order"] == 2
        assert body["total_distance_km"] == 4.0
        assert body["estimated_duration_minutes"] == 30
        assert [(s["lat"], s["lng"]) for s in body["route"]] == [(28.600, 77.200), (28.605, 77.200)]

    def test_non_participant(self, client, confirmed_order_id):
        _dispatch(client, confirmed_order_id)
        response = client.get(f"/deliveries/{confirmed_order_id}", headers=_as("user-z"))
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_before_dispatch(self, client, confirmed_order_id):
        response = client.get(f"/deliveries/{confirmed_order_id}", headers=_as("user-2"))
        assert response.status_code == 404
