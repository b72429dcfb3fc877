"""Open a shared order from the creator's cart: command and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from groupbuy.cart.pricing import price_cart
from groupbuy.domain import groupbuy
from groupbuy.errors import EmptyCart
from groupbuy.shared_order.cart_sync import drain_lines
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class CreateSharedOrder:
    """Open a new shared order seeded with everything in the creator's cart."""

    creator_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    description = Text()
    delivery_address = String(required=True, max_length=500)
    delivery_time = String(max_length=100)
    max_participants = Integer(required=True, min_value=2)
    min_order_amount = Float(default=0.0, min_value=0.0)
    expires_in_hours = Float(required=True)
    order_deadline_in_hours = Float()
    preparation_minutes = Integer(min_value=0)


@groupbuy.command_handler(part_of=SharedOrder)
class CreateSharedOrderHandler:
    @handle(CreateSharedOrder)
    def create_shared_order(self, command):
        lines, total = price_cart(command.creator_id)
        if not lines or total <= 0:
            raise EmptyCart()

        order = SharedOrder.create(
            creator_id=command.creator_id,
            title=command.title,
            description=command.description,
            delivery_address=command.delivery_address,
            delivery_time=command.delivery_time,
            max_participants=command.max_participants,
            min_order_amount=command.min_order_amount or 0.0,
            expires_in_hours=command.expires_in_hours,
            order_deadline_in_hours=command.order_deadline_in_hours,
            preparation_minutes=command.preparation_minutes,
            cart_lines=lines,
        )
        current_domain.repository_for(SharedOrder).add(order)
        drain_lines(command.creator_id, lines)

        logger.info(
            "Shared order created",
            order_id=str(order.id),
            creator_id=str(command.creator_id),
            total_amount=total,
            items=len(lines),
        )
        return str(order.id)
