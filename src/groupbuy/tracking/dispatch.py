"""Hand an order to a rider and complete its stops: commands and handler.

Dispatch fixes the route on the SharedOrder (delivery order and ETA per
participant) and materialises it as a DeliveryTracking record with a
geocoded position per stop. Completing a stop updates both.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.geocoding import get_geocoder
from groupbuy.shared_order.shared_order import SharedOrder
from groupbuy.tracking.delivery_tracking import DeliveryTracking

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class DispatchSharedOrder:
    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    rider_name = String(required=True, max_length=100)
    rider_phone = String(max_length=30)


@groupbuy.command(part_of="SharedOrder")
class CompleteDeliveryStop:
    order_id = Identifier(required=True)
    participant_id = Identifier(required=True)


@groupbuy.command_handler(part_of=SharedOrder)
class DeliveryHandler:
    @handle(DispatchSharedOrder)
    def dispatch_shared_order(self, command):
        order_repo = current_domain.repository_for(SharedOrder)
        order = order_repo.get_order(command.order_id)
        stops = order.dispatch(
            rider_id=command.rider_id,
            rider_name=command.rider_name,
            rider_phone=command.rider_phone,
        )
        order_repo.add(order)

        geocoder = get_geocoder()
        for stop in stops:
            stop["lat"], stop["lng"] = geocoder.locate(stop["address"])

        tracking = DeliveryTracking.create(
            order_id=str(order.id),
            rider_id=command.rider_id,
            stops=stops,
            started_at=order.delivery_start_time,
        )
        current_domain.repository_for(DeliveryTracking).add(tracking)

        logger.info(
            "Shared order out for delivery",
            order_id=str(order.id),
            rider_id=str(command.rider_id),
            stops=len(stops),
        )
        return str(tracking.id)

    @handle(CompleteDeliveryStop)
    def complete_delivery_stop(self, command):
        order_repo = current_domain.repository_for(SharedOrder)
        order = order_repo.get_order(command.order_id)
        all_delivered = order.complete_stop(command.participant_id)
        order_repo.add(order)

        tracking_repo = current_domain.repository_for(DeliveryTracking)
        tracking = tracking_repo.find_for_order(command.order_id)
        if tracking is None:
            logger.warning("Stop completed without a tracking record", order_id=str(command.order_id))
        else:
            tracking.complete_stop(command.participant_id)
            tracking_repo.add(tracking)

        logger.info(
            "Delivery stop completed",
            order_id=str(command.order_id),
            participant_id=str(command.participant_id),
            all_delivered=all_delivered,
        )
        return {"all_delivered": all_delivered, "status": order.status}
