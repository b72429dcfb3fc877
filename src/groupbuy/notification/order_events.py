"""Notify participants as their shared order changes.

Reacts to SharedOrder events after they are committed and appends the
matching messages to each affected user's feed.
"""

import json

import structlog
from protean import handle
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.notification.helpers import notify, notify_all
from groupbuy.notification.notification import Notification, NotificationType
from groupbuy.shared_order.events import (
    OrderOutForDelivery,
    ParticipantDelivered,
    ParticipantLeft,
    SharedOrderConfirmed,
    SharedOrderDeleted,
)
from groupbuy.shared_order.shared_order import SharedOrder

logger = structlog.get_logger(__name__)


@groupbuy.event_handler(part_of=SharedOrder)
class SharedOrderNotificationsHandler:
    @handle(SharedOrderConfirmed)
    def on_confirmed(self, event: SharedOrderConfirmed) -> None:
        notify_all(
            json.loads(event.participant_user_ids),
            str(event.order_id),
            NotificationType.ORDER_CONFIRMED.value,
        )

    @handle(ParticipantLeft)
    def on_participant_left(self, event: ParticipantLeft) -> None:
        notify(
            str(event.creator_id),
            str(event.order_id),
            NotificationType.PARTICIPANT_LEFT.value,
            context={"user_id": str(event.user_id)},
        )

    @handle(SharedOrderDeleted)
    def on_deleted(self, event: SharedOrderDeleted) -> None:
        """Drop everything said about the order, then tell every former member it is gone."""
        repo = current_domain.repository_for(Notification)
        stale = repo.for_order(str(event.order_id))
        for notification in stale:
            repo.purge(notification)

        notify_all(
            json.loads(event.participant_user_ids),
            str(event.order_id),
            NotificationType.ORDER_CANCELLED.value,
            context={"title": event.title},
        )
        logger.info(
            "Order notifications replaced by cancellation notices",
            order_id=str(event.order_id),
            purged=len(stale),
        )

    @handle(OrderOutForDelivery)
    def on_out_for_delivery(self, event: OrderOutForDelivery) -> None:
        notify_all(
            json.loads(event.participant_user_ids),
            str(event.order_id),
            NotificationType.OUT_FOR_DELIVERY.value,
            context={"rider_name": event.rider_name},
        )

    @handle(ParticipantDelivered)
    def on_participant_delivered(self, event: ParticipantDelivered) -> None:
        notify(
            str(event.user_id),
            str(event.order_id),
            NotificationType.DELIVERED.value,
        )
