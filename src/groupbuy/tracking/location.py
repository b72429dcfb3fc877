"""Rider position updates: command and handler.

The proximity check that follows is a separate event handler
(``groupbuy.tracking.proximity``) so that it cannot fail the update.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.tracking.delivery_tracking import DeliveryTracking

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="DeliveryTracking")
class UpdateRiderLocation:
    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    lat = Float(required=True, min_value=-90.0, max_value=90.0)
    lng = Float(required=True, min_value=-180.0, max_value=180.0)


@groupbuy.command_handler(part_of=DeliveryTracking)
class RiderLocationHandler:
    @handle(UpdateRiderLocation)
    def update_rider_location(self, command):
        repo = current_domain.repository_for(DeliveryTracking)
        tracking = repo.get_for_order(command.order_id)
        tracking.update_location(rider_id=command.rider_id, lat=command.lat, lng=command.lng)
        repo.add(tracking)

        logger.debug(
            "Rider location updated",
            order_id=str(command.order_id),
            lat=command.lat,
            lng=command.lng,
        )
