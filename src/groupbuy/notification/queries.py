"""Per-user notification feed."""

from protean.utils.globals import current_domain

from groupbuy.notification.notification import Notification
from groupbuy.notification.repository import FEED_SIZE


def notification_view(notification: Notification) -> dict:
    return {
        "notification_id": str(notification.id),
        "order_id": str(notification.order_id),
        "type": notification.notification_type,
        "title": notification.title,
        "message": notification.message,
        "is_read": bool(notification.is_read),
        "created_at": notification.created_at,
    }


def recent_notifications(user_id, limit: int = FEED_SIZE) -> list[dict]:
    """The user's most recent notifications, newest first."""
    repo = current_domain.repository_for(Notification)
    return [notification_view(n) for n in repo.recent_for_user(user_id, limit=limit)]
