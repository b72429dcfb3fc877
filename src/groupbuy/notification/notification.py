"""Notification aggregate (CQRS): one message to one user about one shared order.

Notifications are append-only. The only change after creation is the
recipient flipping ``is_read``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from groupbuy.domain import groupbuy
from groupbuy.errors import NotFound
from groupbuy.notification.events import NotificationCreated, NotificationRead


class NotificationType(Enum):
    ORDER_CONFIRMED = "order_confirmed"
    PREPARATION_STARTED = "preparation_started"
    OUT_FOR_DELIVERY = "out_for_delivery"
    RIDER_NEARBY = "rider_nearby"
    NEXT_STOP = "next_stop"
    DELIVERED = "delivered"
    PARTICIPANT_LEFT = "participant_left"
    ORDER_CANCELLED = "order_cancelled"


@groupbuy.aggregate
class Notification:
    user_id: Identifier(required=True)
    order_id: Identifier(required=True)
    notification_type: String(choices=NotificationType, required=True)
    title: String(required=True, max_length=200)
    message: Text(required=True)
    is_read: Boolean(default=False)
    read_at: DateTime()
    created_at: DateTime()

    @classmethod
    def create(cls, user_id, order_id, notification_type, title, message, created_at=None):
        now = created_at or datetime.now(UTC)

        notification = cls(
            user_id=user_id,
            order_id=order_id,
            notification_type=notification_type,
            title=title,
            message=message,
            is_read=False,
            created_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                order_id=str(order_id),
                notification_type=notification_type,
                title=title,
                created_at=now,
            )
        )

        return notification

    def mark_read(self, user_id, read_at=None) -> None:
        """Flip ``is_read`` for the recipient; other callers are told it does not exist."""
        if str(user_id) != str(self.user_id):
            raise NotFound("Notification not found")
        if self.is_read:
            return

        now = read_at or datetime.now(UTC)
        self.is_read = True
        self.read_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                read_at=now,
            )
        )
