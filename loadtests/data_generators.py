"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names and validation rules of the Groupbuy API
request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

PRODUCT_PRICES = (20.0, 45.0, 60.0, 120.0, 250.0)


def user_id() -> str:
    return f"user-lt-{uuid.uuid4().hex[:10]}"


def product_data() -> dict:
    return {
        "product_id": f"prod-lt-{uuid.uuid4().hex[:8]}",
        "name": fake.word().title(),
        "price": random.choice(PRODUCT_PRICES),
        "unit": random.choice(["pc", "kg", "pack"]),
    }


def cart_line_data(product_id: str) -> dict:
    return {"product_id": product_id, "quantity": random.randint(1, 4)}


def shared_order_data(max_participants: int | None = None, min_order_amount: float = 0.0) -> dict:
    return {
        "title": f"{fake.word().title()} group order",
        "description": fake.sentence(nb_words=8),
        "delivery_address": fake.street_address(),
        "delivery_time": f"Today {random.randint(5, 9)}pm",
        "max_participants": max_participants or random.randint(2, 8),
        "min_order_amount": min_order_amount,
        "expires_in_hours": random.choice([2, 6, 24]),
    }


def join_data() -> dict:
    return {"delivery_address": fake.street_address()}


def rider_data() -> dict:
    return {
        "rider_id": f"rider-lt-{uuid.uuid4().hex[:6]}",
        "rider_name": fake.first_name(),
        "rider_phone": fake.msisdn()[:12],
    }


def location_near_reference() -> dict:
    return {
        "lat": 28.6139 + random.uniform(-0.05, 0.05),
        "lng": 77.2090 + random.uniform(-0.05, 0.05),
    }
