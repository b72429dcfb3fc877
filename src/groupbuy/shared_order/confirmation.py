"""Confirm a shared order: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class ConfirmSharedOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)


@groupbuy.command_handler(part_of=SharedOrder)
class ConfirmSharedOrderHandler:
    @handle(ConfirmSharedOrder)
    def confirm_shared_order(self, command):
        repo = current_domain.repository_for(SharedOrder)
        order = repo.get_order(command.order_id)
        order.confirm(requester_id=command.requester_id)
        repo.add(order)

        logger.info(
            "Shared order confirmed",
            order_id=str(order.id),
            total_amount=order.current_amount,
            estimated_delivery_time=order.estimated_delivery_time.isoformat(),
        )
