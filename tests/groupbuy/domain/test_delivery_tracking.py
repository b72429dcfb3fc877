"""Tests for the DeliveryTracking aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from groupbuy.errors import Forbidden, InvalidState, NotFound
from groupbuy.geocoding.placeholder import REFERENCE_POINT
from groupbuy.tracking.delivery_tracking import (
    DeliveryTracking,
    RouteStop,
    TrackingStatus,
    planar_distance_km,
)
from groupbuy.tracking.events import DeliveryTrackingStarted, RiderLocationUpdated, RouteStopCompleted
from protean.exceptions import ValidationError

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def _stops(count=3):
    return [
        {
            "participant_id": f"part-{n}",
            "user_id": f"user-{n}",
            "sequence": n,
            "address": f"House {n}",
            "lat": REFERENCE_POINT[0] + 0.01 * n,
            "lng": REFERENCE_POINT[1],
            "estimated_arrival": NOW + timedelta(minutes=15 * n),
        }
        for n in range(1, count + 1)
    ]


def _make_tracking(count=3):
    tracking = DeliveryTracking.create(order_id="order-001", rider_id="rider-1", stops=_stops(count), started_at=NOW)
    tracking._events.clear()
    return tracking


class TestPlanarDistance:
    def test_zero_for_same_point(self):
        assert planar_distance_km(28.6, 77.2, 28.6, 77.2) == 0.0

    def test_one_hundredth_degree_is_about_a_kilometre(self):
        assert planar_distance_km(28.60, 77.2, 28.61, 77.2) == pytest.approx(1.11)


class TestDeliveryTrackingCreation:
    def test_seeded_at_reference_point(self):
        tracking = _make_tracking()
        assert tracking.current_location.lat == REFERENCE_POINT[0]
        assert tracking.current_location.lng == REFERENCE_POINT[1]
        assert tracking.current_location.recorded_at == NOW

    def test_in_transit_on_creation(self):
        assert _make_tracking().status == TrackingStatus.IN_TRANSIT.value

    def test_route_totals_from_stop_count(self):
        tracking = _make_tracking(3)
        assert tracking.total_distance_km == 6.0
        assert tracking.estimated_duration_minutes == 45

    def test_route_kept_in_sequence(self):
        tracking = _make_tracking(3)
        assert [s.sequence for s in tracking.ordered_route()] == [1, 2, 3]
        assert tracking.ordered_route()[0].user_id == "user-1"

    def test_creation_event(self):
        tracking = DeliveryTracking.create(order_id="order-001", rider_id="rider-1", stops=_stops(2), started_at=NOW)
        event = tracking._events[0]
        assert isinstance(event, DeliveryTrackingStarted)
        assert event.stop_count == 2

    def test_route_sequence_must_be_contiguous(self):
        tracking = _make_tracking(2)
        with pytest.raises(ValidationError):
            tracking.add_route(RouteStop(participant_id="part-9", user_id="user-9", sequence=5, lat=28.6, lng=77.2))


class TestRouteQueries:
    def test_next_stop_is_first_incomplete(self):
        tracking = _make_tracking()
        assert tracking.next_stop().sequence == 1
        tracking.complete_stop("part-1")
        assert tracking.next_stop().sequence == 2

    def test_next_stop_skips_out_of_order_completions(self):
        tracking = _make_tracking()
        tracking.complete_stop("part-1")
        tracking.complete_stop("part-3")
        assert tracking.next_stop().sequence == 2

    def test_no_next_stop_when_all_done(self):
        tracking = _make_tracking(1)
        tracking.complete_stop("part-1")
        assert tracking.next_stop() is None

    def test_stop_after(self):
        tracking = _make_tracking()
        first = tracking.next_stop()
        assert tracking.stop_after(first).sequence == 2
        assert tracking.stop_after(tracking.ordered_route()[-1]) is None


class TestLocationUpdates:
    def test_update_moves_rider(self):
        tracking = _make_tracking()
        tracking.update_location("rider-1", 28.62, 77.21, recorded_at=NOW + timedelta(minutes=3))
        assert tracking.current_location.lat == 28.62
        assert tracking.current_location.lng == 77.21
        assert tracking.last_updated == NOW + timedelta(minutes=3)

    def test_update_raises_event(self):
        tracking = _make_tracking()
        tracking.update_location("rider-1", 28.62, 77.21)
        event = tracking._events[0]
        assert isinstance(event, RiderLocationUpdated)
        assert event.order_id == "order-001"
        assert event.lat == 28.62

    def test_only_assigned_rider(self):
        tracking = _make_tracking()
        with pytest.raises(Forbidden):
            tracking.update_location("rider-2", 28.62, 77.21)

    def test_invalid_coordinates(self):
        tracking = _make_tracking()
        with pytest.raises(ValidationError):
            tracking.update_location("rider-1", 95.0, 77.21)

    def test_no_updates_after_completion(self):
        tracking = _make_tracking(1)
        tracking.complete_stop("part-1")
        with pytest.raises(InvalidState):
            tracking.update_location("rider-1", 28.62, 77.21)


class TestStopCompletion:
    def test_complete_marks_stop(self):
        tracking = _make_tracking()
        tracking.complete_stop("part-2", completed_at=NOW + timedelta(minutes=20))
        stop = tracking.stop_for_participant("part-2")
        assert stop.is_completed is True
        assert stop.completed_at == NOW + timedelta(minutes=20)

    def test_last_stop_completes_tracking(self):
        tracking = _make_tracking(2)
        tracking.complete_stop("part-1")
        assert tracking.status == TrackingStatus.IN_TRANSIT.value
        tracking.complete_stop("part-2")
        assert tracking.status == TrackingStatus.COMPLETED.value

    def test_event_counts_remaining(self):
        tracking = _make_tracking(3)
        tracking.complete_stop("part-1")
        event = tracking._events[0]
        assert isinstance(event, RouteStopCompleted)
        assert event.remaining_stops == 2

    def test_unknown_stop(self):
        with pytest.raises(NotFound):
            _make_tracking().complete_stop("part-x")

    def test_repeat_refused(self):
        tracking = _make_tracking()
        tracking.complete_stop("part-1")
        with pytest.raises(InvalidState):
            tracking.complete_stop("part-1")
