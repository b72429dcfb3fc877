"""Repository for the Notification aggregate: per-user feed and per-order lookups."""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from groupbuy.domain import groupbuy
from groupbuy.errors import NotFound
from groupbuy.notification.notification import Notification

FEED_SIZE = 20


@groupbuy.repository(part_of=Notification)
class NotificationRepository:
    def get_notification(self, notification_id) -> Notification:
        try:
            return self.get(str(notification_id))
        except ObjectNotFoundError:
            raise NotFound("Notification not found") from None

    def recent_for_user(self, user_id, limit: int = FEED_SIZE) -> list[Notification]:
        """Newest first, at most ``limit`` entries."""
        return (
            self._dao.query.filter(user_id=str(user_id)).order_by("-created_at").limit(limit).all().items
        )

    def for_order(self, order_id) -> list[Notification]:
        return self._dao.query.filter(order_id=str(order_id)).all().items

    def sent_since(self, user_id, order_id, notification_type: str, since: datetime) -> list[Notification]:
        """Notifications of one type for a user and order created after ``since``."""
        matches = self._dao.query.filter(
            user_id=str(user_id),
            order_id=str(order_id),
            notification_type=notification_type,
        ).all().items
        return [n for n in matches if n.created_at and n.created_at > since]

    def purge(self, notification: Notification) -> None:
        self._dao.delete(notification)
