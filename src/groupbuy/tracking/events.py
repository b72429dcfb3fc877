"""Delivery tracking domain events."""

from protean.fields import DateTime, Float, Identifier, Integer

from groupbuy.domain import groupbuy


@groupbuy.event(part_of="DeliveryTracking")
class DeliveryTrackingStarted:
    """A route was fixed and tracking began at the reference start point."""

    __version__ = 1

    tracking_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    stop_count = Integer(required=True)
    total_distance_km = Float(required=True)
    estimated_duration_minutes = Integer(required=True)
    started_at = DateTime(required=True)


@groupbuy.event(part_of="DeliveryTracking")
class RiderLocationUpdated:
    """The rider reported a new position."""

    __version__ = 1

    tracking_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    lat = Float(required=True)
    lng = Float(required=True)
    recorded_at = DateTime(required=True)


@groupbuy.event(part_of="DeliveryTracking")
class RouteStopCompleted:
    """A stop on the route was handed its items."""

    __version__ = 1

    tracking_id = Identifier(required=True)
    order_id = Identifier(required=True)
    participant_id = Identifier(required=True)
    sequence = Integer(required=True)
    remaining_stops = Integer(required=True)
    completed_at = DateTime(required=True)
