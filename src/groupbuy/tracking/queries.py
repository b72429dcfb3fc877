"""Participant-facing delivery tracking view."""

from protean.utils.globals import current_domain

from groupbuy.errors import Forbidden
from groupbuy.shared_order.shared_order import SharedOrder
from groupbuy.tracking.delivery_tracking import DeliveryTracking


def get_delivery_tracking(order_id, user_id) -> dict:
    """Rider position and route, only for participants of the order.

    Includes the caller's own place on the route.
    """
    order = current_domain.repository_for(SharedOrder).get_order(order_id)
    participant = order.participant_for(user_id)
    if participant is None:
        raise Forbidden("Only participants can track this delivery")

    tracking = current_domain.repository_for(DeliveryTracking).get_for_order(order_id)
    location = tracking.current_location

    return {
        "order_id": str(order.id),
        "status": order.status,
        "tracking_status": tracking.status,
        "rider": (
            {"rider_id": str(order.rider.rider_id), "name": order.rider.name, "phone": order.rider.phone}
            if order.rider
            else None
        ),
        "current_location": (
            {"lat": location.lat, "lng": location.lng, "recorded_at": location.recorded_at} if location else None
        ),
        "route": [
            {
                "participant_id": str(stop.participant_id),
                "sequence": stop.sequence,
                "address": stop.address,
                "lat": stop.lat,
                "lng": stop.lng,
                "estimated_arrival": stop.estimated_arrival,
                "is_completed": bool(stop.is_completed),
                "completed_at": stop.completed_at,
            }
            for stop in tracking.ordered_route()
        ],
        "total_distance_km": tracking.total_distance_km,
        "estimated_duration_minutes": tracking.estimated_duration_minutes,
        "delivery_start_time": order.delivery_start_time,
        "last_updated": tracking.last_updated,
        "my_delivery_order": participant.delivery_order,
        "my_estimated_arrival": participant.estimated_arrival,
        "is_delivered": bool(participant.is_delivered),
    }
