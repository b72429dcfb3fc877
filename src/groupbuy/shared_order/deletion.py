"""Delete an open shared order: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class DeleteSharedOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)


@groupbuy.command_handler(part_of=SharedOrder)
class DeleteSharedOrderHandler:
    @handle(DeleteSharedOrder)
    def delete_shared_order(self, command):
        repo = current_domain.repository_for(SharedOrder)
        order = repo.get_order(command.order_id)
        order.delete(requester_id=command.requester_id)
        repo.discard(order)

        logger.info(
            "Shared order deleted",
            order_id=str(command.order_id),
            requester_id=str(command.requester_id),
        )
