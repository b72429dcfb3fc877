"""Group order load test scenarios.

``GroupOrderLifecycleJourney`` walks one shared order from creation through
joins, confirmation, dispatch, rider pings and stop completion.
``CapacityContentionUser`` hammers a small pool of nearly full orders with
joins so the per-order serialization is exercised under load: ``Full`` and
``AlreadyJoined`` are expected outcomes, anything else is a failure.
"""

import random
import threading

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    cart_line_data,
    join_data,
    location_near_reference,
    product_data,
    rider_data,
    shared_order_data,
    user_id,
)
from loadtests.helpers.response import error_kind, extract_error_detail
from loadtests.helpers.state import GroupOrderState


def _headers(uid: str) -> dict:
    return {"X-User-Id": uid}


def _seed_cart(client, uid: str, product_ids: list[str]) -> bool:
    for product_id in product_ids:
        resp = client.post(f"/sandbox/carts/{uid}/items", json=cart_line_data(product_id), name="POST /sandbox/carts")
        if resp.status_code != 200:
            return False
    return True


class GroupOrderLifecycleJourney(SequentialTaskSet):
    """Seed -> Create -> Join x2 -> Add item -> Confirm -> Dispatch -> Ping x3 -> Complete stops."""

    def on_start(self):
        self.state = GroupOrderState(creator_id=user_id())

    @task
    def seed_catalog(self):
        for _ in range(3):
            payload = product_data()
            resp = self.client.post("/sandbox/products", json=payload, name="POST /sandbox/products")
            if resp.status_code == 201:
                self.state.product_ids.append(payload["product_id"])
        if not self.state.product_ids or not _seed_cart(self.client, self.state.creator_id, self.state.product_ids):
            self.interrupt()

    @task
    def create_order(self):
        with self.client.post(
            "/shared-orders",
            json=shared_order_data(max_participants=4),
            headers=_headers(self.state.creator_id),
            catch_response=True,
            name="POST /shared-orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Create order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def join_members(self):
        for _ in range(2):
            member = user_id()
            if not _seed_cart(self.client, member, random.sample(self.state.product_ids, 1)):
                continue
            with self.client.post(
                f"/shared-orders/{self.state.order_id}/join",
                json=join_data(),
                headers=_headers(member),
                catch_response=True,
                name="POST /shared-orders/{id}/join",
            ) as resp:
                if resp.status_code == 200:
                    self.state.member_ids.append(member)
                else:
                    resp.failure(f"Join failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def add_item(self):
        if not self.state.member_ids:
            return
        with self.client.post(
            f"/shared-orders/{self.state.order_id}/items",
            json=cart_line_data(random.choice(self.state.product_ids)),
            headers=_headers(self.state.member_ids[0]),
            catch_response=True,
            name="POST /shared-orders/{id}/items",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add item failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def confirm(self):
        with self.client.post(
            f"/shared-orders/{self.state.order_id}/confirm",
            headers=_headers(self.state.creator_id),
            catch_response=True,
            name="POST /shared-orders/{id}/confirm",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Confirm failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def dispatch(self):
        rider = rider_data()
        with self.client.post(
            f"/deliveries/{self.state.order_id}/dispatch",
            json=rider,
            headers=_headers(rider["rider_id"]),
            catch_response=True,
            name="POST /deliveries/{id}/dispatch",
        ) as resp:
            if resp.status_code == 201:
                self.state.rider_id = rider["rider_id"]
            else:
                resp.failure(f"Dispatch failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def ping_locations(self):
        for _ in range(3):
            self.client.post(
                f"/deliveries/{self.state.order_id}/location",
                json={"rider_id": self.state.rider_id, **location_near_reference()},
                headers=_headers(self.state.rider_id),
                name="POST /deliveries/{id}/location",
            )

    @task
    def complete_stops(self):
        resp = self.client.get(
            f"/shared-orders/{self.state.order_id}",
            headers=_headers(self.state.creator_id),
            name="GET /shared-orders/{id}",
        )
        if resp.status_code != 200:
            self.interrupt()
        for participant in resp.json()["participants"]:
            self.client.post(
                f"/deliveries/{self.state.order_id}/stops/{participant['participant_id']}/complete",
                headers=_headers(self.state.rider_id),
                name="POST /deliveries/{id}/stops/{pid}/complete",
            )

    @task
    def read_notifications(self):
        self.client.get("/notifications", headers=_headers(self.state.creator_id), name="GET /notifications")

    @task
    def done(self):
        self.interrupt()


class GroupOrderUser(HttpUser):
    """Runs full group order lifecycles back to back."""

    tasks = [GroupOrderLifecycleJourney]
    wait_time = between(0.5, 2)


# Orders shared by every CapacityContentionUser in this process
_pool_lock = threading.Lock()
_contended_orders: list[str] = []
_POOL_SIZE = 5


class CapacityContentionUser(HttpUser):
    """Many users racing for the last slots of the same few orders."""

    wait_time = between(0.05, 0.3)

    def on_start(self):
        self.product_id = None
        payload = product_data()
        if self.client.post("/sandbox/products", json=payload, name="POST /sandbox/products").status_code == 201:
            self.product_id = payload["product_id"]

    def _open_contended_order(self) -> str | None:
        creator = user_id()
        if not _seed_cart(self.client, creator, [self.product_id]):
            return None
        resp = self.client.post(
            "/shared-orders",
            json=shared_order_data(max_participants=3),
            headers=_headers(creator),
            name="POST /shared-orders",
        )
        return resp.json()["order_id"] if resp.status_code == 201 else None

    @task
    def race_for_slot(self):
        if self.product_id is None:
            return
        with _pool_lock:
            order_id = random.choice(_contended_orders) if len(_contended_orders) >= _POOL_SIZE else None
        if order_id is None:
            order_id = self._open_contended_order()
            if order_id is None:
                return
            with _pool_lock:
                _contended_orders.append(order_id)

        member = user_id()
        if not _seed_cart(self.client, member, [self.product_id]):
            return
        with self.client.post(
            f"/shared-orders/{order_id}/join",
            json=join_data(),
            headers=_headers(member),
            catch_response=True,
            name="POST /shared-orders/{id}/join (contended)",
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif error_kind(resp) in ("Full", "AlreadyJoined"):
                resp.success()
                with _pool_lock:
                    if order_id in _contended_orders:
                        _contended_orders.remove(order_id)
            else:
                resp.failure(f"Unexpected join outcome: {resp.status_code} - {extract_error_detail(resp)}")
