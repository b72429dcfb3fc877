"""Leave a shared order: command and handler.

The items go back to the participant's cart in ``cart_sync`` once the
order change has been committed.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.command(part_of="SharedOrder")
class LeaveSharedOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


@groupbuy.command_handler(part_of=SharedOrder)
class LeaveSharedOrderHandler:
    @handle(LeaveSharedOrder)
    def leave_shared_order(self, command):
        repo = current_domain.repository_for(SharedOrder)
        order = repo.get_order(command.order_id)
        result = order.leave(user_id=command.user_id)
        repo.add(order)

        logger.info(
            "Participant left shared order",
            order_id=str(order.id),
            user_id=str(command.user_id),
            restored_amount=result["restored_amount"],
        )
        return result
