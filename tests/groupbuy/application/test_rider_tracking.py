"""Application tests for rider location updates and proximity notifications."""

from datetime import UTC, datetime, timedelta

import pytest
from groupbuy.errors import Forbidden, NotFound
from groupbuy.geocoding import get_geocoder
from groupbuy.notification.notification import Notification, NotificationType
from groupbuy.shared_order.confirmation import ConfirmSharedOrder
from groupbuy.shared_order.creation import CreateSharedOrder
from groupbuy.shared_order.joining import JoinSharedOrder
from groupbuy.shared_order.shared_order import SharedOrder
from groupbuy.tracking import proximity
from groupbuy.tracking.delivery_tracking import DeliveryTracking
from groupbuy.tracking.dispatch import CompleteDeliveryStop, DispatchSharedOrder
from groupbuy.tracking.location import UpdateRiderLocation
from groupbuy.tracking.proximity import check_proximity
from protean import current_domain

NOW = datetime(2026, 3, 14, 18, 0, tzinfo=UTC)

FIRST_STOP = (28.600, 77.200)
SECOND_STOP = (28.605, 77.200)
NEAR_FIRST_STOP = (28.601, 77.200)


@pytest.fixture()
def order_id(catalog, carts):
    """A two-stop order out for delivery with pinned stop positions."""
    get_geocoder().configure({"Cyber Hub, Gate 2": FIRST_STOP, "DLF Phase 3": SECOND_STOP})

    carts.restore_or_add("user-creator", "prod-rice", 3)
    order_id = current_domain.process(
        CreateSharedOrder(
            creator_id="user-creator",
            title="Office lunch",
            delivery_address="Cyber Hub, Gate 2",
            max_participants=2,
            expires_in_hours=24,
        ),
        asynchronous=False,
    )
    carts.restore_or_add("user-2", "prod-dal", 5)
    current_domain.process(
        JoinSharedOrder(order_id=order_id, user_id="user-2", delivery_address="DLF Phase 3"),
        asynchronous=False,
    )
    current_domain.process(ConfirmSharedOrder(order_id=order_id, requester_id="user-creator"), asynchronous=False)
    current_domain.process(
        DispatchSharedOrder(order_id=order_id, rider_id="rider-1", rider_name="Ravi"),
        asynchronous=False,
    )
    return order_id


def _sent(user_id, notification_type):
    feed = current_domain.repository_for(Notification).recent_for_user(user_id)
    return [n for n in feed if n.notification_type == notification_type]


def _move_rider(order_id, lat, lng, rider_id="rider-1"):
    current_domain.process(
        UpdateRiderLocation(order_id=order_id, rider_id=rider_id, lat=lat, lng=lng),
        asynchronous=False,
    )


class TestRiderLocationCommand:
    def test_location_persisted(self, order_id):
        _move_rider(order_id, 28.61, 77.21)
        tracking = current_domain.repository_for(DeliveryTracking).get_for_order(order_id)
        assert (tracking.current_location.lat, tracking.current_location.lng) == (28.61, 77.21)

    def test_wrong_rider(self, order_id):
        with pytest.raises(Forbidden):
            _move_rider(order_id, 28.61, 77.21, rider_id="rider-2")

    def test_no_delivery_in_progress(self, catalog, carts):
        with pytest.raises(NotFound):
            _move_rider("no-such-order", 28.61, 77.21)

    def test_proximity_failure_does_not_fail_update(self, order_id, monkeypatch):
        def broken_check(*args, **kwargs):
            raise RuntimeError("proximity store unavailable")

        monkeypatch.setattr(proximity, "check_proximity", broken_check)
        _move_rider(order_id, *NEAR_FIRST_STOP)

        tracking = current_domain.repository_for(DeliveryTracking).get_for_order(order_id)
        assert tracking.current_location.lat == NEAR_FIRST_STOP[0]
        assert _sent("user-creator", NotificationType.RIDER_NEARBY.value) == []


class TestProximityCheck:
    def test_nearby_and_next_stop(self, order_id):
        created = check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW)
        assert len(created) == 2
        assert len(_sent("user-creator", NotificationType.RIDER_NEARBY.value)) == 1
        assert len(_sent("user-2", NotificationType.NEXT_STOP.value)) == 1

    def test_far_away_sends_nothing(self, order_id):
        assert check_proximity(order_id, 28.70, 77.30, now=NOW) == []

    def test_between_radii_only_next_stop(self, order_id):
        # ~0.78 km from the first stop: outside 0.5 km, inside 1 km
        created = check_proximity(order_id, 28.607, 77.200, now=NOW)
        assert len(created) == 1
        assert _sent("user-creator", NotificationType.RIDER_NEARBY.value) == []
        assert len(_sent("user-2", NotificationType.NEXT_STOP.value)) == 1

    def test_nearby_deduplicated_within_ten_minutes(self, order_id):
        for second in range(60):
            check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW + timedelta(seconds=second))
        assert len(_sent("user-creator", NotificationType.RIDER_NEARBY.value)) == 1

    def test_nearby_repeats_after_window(self, order_id):
        check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW)
        check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW + timedelta(minutes=11))
        assert len(_sent("user-creator", NotificationType.RIDER_NEARBY.value)) == 2

    def test_next_stop_deduplicated_within_fifteen_minutes(self, order_id):
        check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW)
        check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW + timedelta(minutes=11))
        assert len(_sent("user-2", NotificationType.NEXT_STOP.value)) == 1
        check_proximity(order_id, *NEAR_FIRST_STOP, now=NOW + timedelta(minutes=16))
        assert len(_sent("user-2", NotificationType.NEXT_STOP.value)) == 2

    def test_next_incomplete_stop_is_targeted(self, order_id):
        order = current_domain.repository_for(SharedOrder).get(order_id)
        first = order.participant_for("user-creator")
        current_domain.process(
            CompleteDeliveryStop(order_id=order_id, participant_id=str(first.id)),
            asynchronous=False,
        )

        created = check_proximity(order_id, SECOND_STOP[0] + 0.001, SECOND_STOP[1], now=NOW)
        assert len(created) == 1
        assert len(_sent("user-2", NotificationType.RIDER_NEARBY.value)) == 1

    def test_unknown_order(self, catalog, carts):
        assert check_proximity("no-such-order", *NEAR_FIRST_STOP, now=NOW) == []


class TestProximityThroughLocationUpdates:
    def test_rapid_updates_notify_once(self, order_id):
        for _ in range(10):
            _move_rider(order_id, *NEAR_FIRST_STOP)
        assert len(_sent("user-creator", NotificationType.RIDER_NEARBY.value)) == 1
        assert len(_sent("user-2", NotificationType.NEXT_STOP.value)) == 1
