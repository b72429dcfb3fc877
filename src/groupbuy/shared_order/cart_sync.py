"""Keep personal carts in step with the shared orders drained from them.

Draining happens inside the create and join handlers, right after the
order is staged, so a cart can never be priced into a second order while
event handlers are still pending. Only the quantities frozen into the
order are taken out; lines added meanwhile, or left out for lack of a
catalog price, stay in the cart.

Giving lines back runs after the order change has been committed, once
they are gone from the order.
"""

import json

import structlog
from protean import handle

from groupbuy.cart import get_cart_store
from groupbuy.domain import groupbuy
from groupbuy.shared_order.events import ParticipantLeft, SharedOrderDeleted
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


def drain_lines(user_id: str, lines: list[dict]) -> None:
    cart = get_cart_store()
    for line in lines:
        cart.remove(user_id, line["product_id"], int(line["quantity"]))
    logger.info("Cart drained into shared order", user_id=str(user_id), lines=len(lines))


def restore_lines(user_id: str, lines: list[dict]) -> None:
    cart = get_cart_store()
    for line in lines:
        cart.restore_or_add(user_id, line["product_id"], int(line["quantity"]))


@groupbuy.event_handler(part_of=SharedOrder)
class CartSyncHandler:
    @handle(ParticipantLeft)
    def on_participant_left(self, event: ParticipantLeft) -> None:
        lines = json.loads(event.items)
        restore_lines(str(event.user_id), lines)
        logger.info(
            "Items restored to cart",
            order_id=str(event.order_id),
            user_id=str(event.user_id),
            lines=len(lines),
        )

    @handle(SharedOrderDeleted)
    def on_shared_order_deleted(self, event: SharedOrderDeleted) -> None:
        by_user: dict[str, list[dict]] = {}
        for line in json.loads(event.items):
            by_user.setdefault(line["user_id"], []).append(line)

        for user_id, lines in by_user.items():
            restore_lines(user_id, lines)

        logger.info(
            "Items restored to carts after deletion",
            order_id=str(event.order_id),
            users=len(by_user),
        )
