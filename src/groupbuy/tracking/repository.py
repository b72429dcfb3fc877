"""Repository for the DeliveryTracking aggregate."""

from groupbuy.domain import groupbuy
from groupbuy.errors import NotFound
from groupbuy.tracking.delivery_tracking import DeliveryTracking


@groupbuy.repository(part_of=DeliveryTracking)
class DeliveryTrackingRepository:
    def find_for_order(self, order_id) -> DeliveryTracking | None:
        records = self._dao.query.filter(order_id=str(order_id)).all().items
        return records[0] if records else None

    def get_for_order(self, order_id) -> DeliveryTracking:
        tracking = self.find_for_order(order_id)
        if tracking is None:
            raise NotFound("No delivery in progress for this order")
        return tracking

    def discard_for_order(self, order_id) -> bool:
        tracking = self.find_for_order(order_id)
        if tracking is None:
            return False
        self._dao.delete(tracking)
        return True
