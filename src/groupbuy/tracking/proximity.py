"""Proximity notifications driven by rider position updates.

After each committed location update, look at the next stop that is not yet
completed. Within ``NEARBY_RADIUS_KM`` its participant is told the rider is
nearby (at most once per ``NEARBY_DEDUP``); within ``NEXT_STOP_RADIUS_KM``
the participant of the stop after it is told they are next (at most once per
``NEXT_STOP_DEDUP``). Dedup reads may be stale, so suppression is best-effort.

The check is fire-and-forget: any failure is logged and swallowed.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.notification.helpers import notify_unless_recent
from groupbuy.notification.notification import NotificationType
from groupbuy.tracking.delivery_tracking import DeliveryTracking, planar_distance_km
from groupbuy.tracking.events import RiderLocationUpdated

logger = structlog.get_logger(__name__)

NEARBY_RADIUS_KM = 0.5
NEXT_STOP_RADIUS_KM = 1.0
NEARBY_DEDUP = timedelta(minutes=10)
NEXT_STOP_DEDUP = timedelta(minutes=15)


def check_proximity(order_id: str, rider_lat: float, rider_lng: float, now: datetime | None = None) -> list[str]:
    """Emit proximity notifications for the rider's position.

    Returns the ids of notifications created (empty when nothing was due).
    """
    now = now or datetime.now(UTC)
    tracking = current_domain.repository_for(DeliveryTracking).find_for_order(order_id)
    if tracking is None:
        return []

    stop = tracking.next_stop()
    if stop is None:
        return []

    created = []
    distance = planar_distance_km(rider_lat, rider_lng, stop.lat, stop.lng)

    if distance < NEARBY_RADIUS_KM:
        notification_id = notify_unless_recent(
            str(stop.user_id),
            str(order_id),
            NotificationType.RIDER_NEARBY.value,
            window=NEARBY_DEDUP,
            now=now,
        )
        if notification_id:
            created.append(notification_id)

    upcoming = tracking.stop_after(stop)
    if upcoming is not None and distance < NEXT_STOP_RADIUS_KM:
        notification_id = notify_unless_recent(
            str(upcoming.user_id),
            str(order_id),
            NotificationType.NEXT_STOP.value,
            window=NEXT_STOP_DEDUP,
            now=now,
        )
        if notification_id:
            created.append(notification_id)

    logger.debug(
        "Proximity checked",
        order_id=str(order_id),
        stop_sequence=stop.sequence,
        distance_km=round(distance, 3),
        notified=len(created),
    )
    return created


@groupbuy.event_handler(part_of=DeliveryTracking)
class ProximityHandler:
    @handle(RiderLocationUpdated)
    def on_rider_location_updated(self, event: RiderLocationUpdated) -> None:
        try:
            check_proximity(str(event.order_id), event.lat, event.lng, now=event.recorded_at)
        except Exception as exc:
            logger.error(
                "Proximity check failed",
                order_id=str(event.order_id),
                error=str(exc),
                exc_info=True,
            )
