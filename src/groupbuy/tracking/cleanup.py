"""Remove a deleted order's delivery tracking record."""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.shared_order.events import SharedOrderDeleted
from groupbuy.shared_order.shared_order import SharedOrder
from groupbuy.tracking.delivery_tracking import DeliveryTracking

logger = structlog.get_logger(__name__)


@groupbuy.event_handler(part_of=SharedOrder)
class TrackingCleanupHandler:
    @handle(SharedOrderDeleted)
    def on_shared_order_deleted(self, event: SharedOrderDeleted) -> None:
        if current_domain.repository_for(DeliveryTracking).discard_for_order(str(event.order_id)):
            logger.info("Delivery tracking removed with its order", order_id=str(event.order_id))
