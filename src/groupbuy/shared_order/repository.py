"""Repository for the SharedOrder aggregate."""

from protean.exceptions import ObjectNotFoundError

from groupbuy.domain import groupbuy
from groupbuy.errors import NotFound
from groupbuy.shared_order.shared_order import SharedOrder, SharedOrderStatus


@groupbuy.repository(part_of=SharedOrder)
class SharedOrderRepository:
    """Adds order-scoped lookups on top of the standard add/get."""

    def get_order(self, order_id) -> SharedOrder:
        """Load an order, raising ``NotFound`` instead of ``ObjectNotFoundError``."""
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise NotFound(f"Shared order {order_id} not found") from None

    def open_orders(self) -> list[SharedOrder]:
        return self._dao.query.filter(status=SharedOrderStatus.OPEN.value).all().items

    def all_orders(self) -> list[SharedOrder]:
        return self._dao.query.all().items

    def discard(self, order: SharedOrder) -> None:
        """Persist the order's final changes (removed children, events), then drop the record."""
        self.add(order)
        self._dao.delete(order)
