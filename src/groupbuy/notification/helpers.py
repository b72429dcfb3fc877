"""Shared helpers for handlers that notify participants.

Render a template, then append one Notification per recipient.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean.utils.globals import current_domain

from groupbuy.notification.notification import Notification
from groupbuy.notification.templates import get_template

logger = structlog.get_logger(__name__)


def notify(user_id: str, order_id: str, notification_type: str, context: dict | None = None, created_at=None) -> str:
    """Append one notification to a user's feed. Returns its id."""
    rendered = get_template(notification_type).render(context or {})

    notification = Notification.create(
        user_id=user_id,
        order_id=order_id,
        notification_type=notification_type,
        title=rendered["title"],
        message=rendered["message"],
        created_at=created_at,
    )
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Notification created",
        user_id=str(user_id),
        order_id=str(order_id),
        notification_type=notification_type,
    )
    return str(notification.id)


def notify_all(user_ids, order_id: str, notification_type: str, context: dict | None = None) -> list[str]:
    return [notify(user_id, order_id, notification_type, context) for user_id in user_ids]


def notify_unless_recent(
    user_id: str,
    order_id: str,
    notification_type: str,
    window: timedelta,
    now: datetime | None = None,
    context: dict | None = None,
) -> str | None:
    """Notify unless the same kind went to this user for this order within ``window``.

    Returns the new notification id, or None when suppressed.
    """
    now = now or datetime.now(UTC)
    repo = current_domain.repository_for(Notification)
    if repo.sent_since(user_id, order_id, notification_type, since=now - window):
        logger.debug(
            "Notification suppressed, sent recently",
            user_id=str(user_id),
            order_id=str(order_id),
            notification_type=notification_type,
        )
        return None
    return notify(user_id, order_id, notification_type, context, created_at=now)
