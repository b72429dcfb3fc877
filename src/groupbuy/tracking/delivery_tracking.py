"""DeliveryTracking aggregate (CQRS): the rider's route for one shared order.

Created when the order goes out for delivery. The route order is fixed at
creation; afterwards only the rider position and the stops' completion
flags change.

State Machine:
    IN_TRANSIT → COMPLETED (when the last stop is completed)
"""

import math
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from groupbuy.domain import groupbuy
from groupbuy.errors import Forbidden, InvalidState, NotFound
from groupbuy.geocoding.placeholder import REFERENCE_POINT
from groupbuy.tracking.events import DeliveryTrackingStarted, RiderLocationUpdated, RouteStopCompleted

KM_PER_DEGREE = 111.0
KM_PER_STOP = 2.0
MINUTES_PER_STOP = 15


def planar_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Straight-line distance in degrees scaled to km. Only meaningful at short range."""
    return math.sqrt((lat1 - lat2) ** 2 + (lng1 - lng2) ** 2) * KM_PER_DEGREE


class TrackingStatus(Enum):
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"


@groupbuy.value_object(part_of="DeliveryTracking")
class RiderPosition:
    lat = Float(required=True, min_value=-90.0, max_value=90.0)
    lng = Float(required=True, min_value=-180.0, max_value=180.0)
    recorded_at = DateTime(required=True)


@groupbuy.entity(part_of="DeliveryTracking")
class RouteStop:
    """One delivery destination, derived from a participant."""

    participant_id = Identifier(required=True)
    user_id = Identifier(required=True)
    sequence = Integer(required=True, min_value=1)
    address = String(max_length=500)
    lat = Float(required=True)
    lng = Float(required=True)
    estimated_arrival = DateTime()
    is_completed = Boolean(default=False)
    completed_at = DateTime()


@groupbuy.aggregate
class DeliveryTracking:
    order_id = Identifier(required=True, unique=True)
    rider_id = Identifier(required=True)
    status = String(max_length=20, choices=TrackingStatus, default=TrackingStatus.IN_TRANSIT.value)
    current_location = ValueObject(RiderPosition)
    route = HasMany(RouteStop)
    total_distance_km = Float(default=0.0)
    estimated_duration_minutes = Integer(default=0)
    started_at = DateTime()
    last_updated = DateTime()

    @invariant.post
    def route_sequence_is_contiguous(self):
        sequences = sorted(stop.sequence for stop in self.route)
        if sequences != list(range(1, len(sequences) + 1)):
            raise ValidationError({"route": ["Route stops must be numbered 1..n without gaps"]})

    @classmethod
    def create(cls, order_id, rider_id, stops: list[dict], started_at=None) -> "DeliveryTracking":
        """Fix the route. ``stops`` come ordered, each with participant_id, user_id,
        sequence, address, lat, lng and estimated_arrival."""
        now = started_at or datetime.now(UTC)

        tracking = cls(
            order_id=order_id,
            rider_id=rider_id,
            status=TrackingStatus.IN_TRANSIT.value,
            current_location=RiderPosition(lat=REFERENCE_POINT[0], lng=REFERENCE_POINT[1], recorded_at=now),
            total_distance_km=len(stops) * KM_PER_STOP,
            estimated_duration_minutes=len(stops) * MINUTES_PER_STOP,
            started_at=now,
            last_updated=now,
        )
        for stop in stops:
            tracking.add_route(
                RouteStop(
                    participant_id=stop["participant_id"],
                    user_id=stop["user_id"],
                    sequence=stop["sequence"],
                    address=stop.get("address"),
                    lat=stop["lat"],
                    lng=stop["lng"],
                    estimated_arrival=stop.get("estimated_arrival"),
                    is_completed=False,
                )
            )

        tracking.raise_(
            DeliveryTrackingStarted(
                tracking_id=str(tracking.id),
                order_id=str(order_id),
                rider_id=str(rider_id),
                stop_count=len(stops),
                total_distance_km=tracking.total_distance_km,
                estimated_duration_minutes=tracking.estimated_duration_minutes,
                started_at=now,
            )
        )
        return tracking

    # -------------------------------------------------------------------
    # Route queries
    # -------------------------------------------------------------------
    def ordered_route(self) -> list[RouteStop]:
        return sorted(self.route, key=lambda stop: stop.sequence)

    def next_stop(self) -> RouteStop | None:
        """First stop, in route order, not yet completed."""
        return next((stop for stop in self.ordered_route() if not stop.is_completed), None)

    def stop_after(self, stop: RouteStop) -> RouteStop | None:
        return next((s for s in self.ordered_route() if s.sequence == stop.sequence + 1), None)

    def stop_for_participant(self, participant_id) -> RouteStop | None:
        return next((s for s in self.route if str(s.participant_id) == str(participant_id)), None)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update_location(self, rider_id, lat: float, lng: float, recorded_at=None) -> None:
        if str(rider_id) != str(self.rider_id):
            raise Forbidden("Only the assigned rider can report a location")
        if TrackingStatus(self.status) == TrackingStatus.COMPLETED:
            raise InvalidState("Delivery already completed")

        now = recorded_at or datetime.now(UTC)
        self.current_location = RiderPosition(lat=lat, lng=lng, recorded_at=now)
        self.last_updated = now

        self.raise_(
            RiderLocationUpdated(
                tracking_id=str(self.id),
                order_id=str(self.order_id),
                rider_id=str(rider_id),
                lat=lat,
                lng=lng,
                recorded_at=now,
            )
        )

    def complete_stop(self, participant_id, completed_at=None) -> None:
        stop = self.stop_for_participant(participant_id)
        if stop is None:
            raise NotFound("Stop not found on this route")
        if stop.is_completed:
            raise InvalidState("Stop already completed")

        now = completed_at or datetime.now(UTC)
        stop.is_completed = True
        stop.completed_at = now
        self.last_updated = now

        remaining = sum(1 for s in self.route if not s.is_completed)
        if remaining == 0:
            self.status = TrackingStatus.COMPLETED.value

        self.raise_(
            RouteStopCompleted(
                tracking_id=str(self.id),
                order_id=str(self.order_id),
                participant_id=str(participant_id),
                sequence=stop.sequence,
                remaining_stops=remaining,
                completed_at=now,
            )
        )
