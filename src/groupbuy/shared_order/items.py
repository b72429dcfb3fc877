"""Add a product to a participant's share of the order: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from groupbuy.cart import get_catalog
from groupbuy.domain import groupbuy
from groupbuy.errors import NotFound
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class AddOrderItem:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@groupbuy.command_handler(part_of=SharedOrder)
class ManageOrderItemsHandler:
    @handle(AddOrderItem)
    def add_order_item(self, command):
        repo = current_domain.repository_for(SharedOrder)
        order = repo.get_order(command.order_id)

        product = get_catalog().get_product(command.product_id)
        if product is None:
            raise NotFound("Product not found")

        result = order.add_item(
            user_id=command.user_id,
            product_id=command.product_id,
            quantity=command.quantity,
            unit_price=product["price"],
        )
        repo.add(order)

        logger.info(
            "Item added to shared order",
            order_id=str(order.id),
            user_id=str(command.user_id),
            product_id=str(command.product_id),
            line_quantity=result["quantity"],
            order_total=result["order_total"],
        )
        return result
