"""Notification domain events."""

from protean.fields import DateTime, Identifier, String

from groupbuy.domain import groupbuy


@groupbuy.event(part_of="Notification")
class NotificationCreated:
    """A message about a shared order was appended to a user's feed."""

    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    notification_type = String(required=True)
    title = String(required=True)
    created_at = DateTime(required=True)


@groupbuy.event(part_of="Notification")
class NotificationRead:
    """The recipient marked a notification as read."""

    __version__ = 1

    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)
    read_at = DateTime(required=True)
