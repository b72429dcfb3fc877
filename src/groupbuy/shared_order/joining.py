"""Join a shared order with the caller's cart: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from groupbuy.cart.pricing import price_cart
from groupbuy.domain import groupbuy
from groupbuy.errors import EmptyCart
from groupbuy.shared_order.cart_sync import drain_lines
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class JoinSharedOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    delivery_address = String(required=True, max_length=500)


@groupbuy.command_handler(part_of=SharedOrder)
class JoinSharedOrderHandler:
    @handle(JoinSharedOrder)
    def join_shared_order(self, command):
        # Cart is checked before the order is even looked up
        lines, total = price_cart(command.user_id)
        if not lines or total <= 0:
            raise EmptyCart()

        repo = current_domain.repository_for(SharedOrder)
        order = repo.get_order(command.order_id)
        result = order.join(
            user_id=command.user_id,
            delivery_address=command.delivery_address,
            cart_lines=lines,
        )
        repo.add(order)
        drain_lines(command.user_id, lines)

        logger.info(
            "Participant joined shared order",
            order_id=str(order.id),
            user_id=str(command.user_id),
            added_amount=result["added_amount"],
            participants=order.live_participant_count(),
        )
        return result
