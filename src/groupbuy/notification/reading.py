"""Mark a notification as read: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from groupbuy.domain import groupbuy
from groupbuy.notification.notification import Notification


@groupbuy.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    user_id = Identifier(required=True)


@groupbuy.command_handler(part_of=Notification)
class MarkNotificationReadHandler:
    @handle(MarkNotificationRead)
    def mark_notification_read(self, command):
        repo = current_domain.repository_for(Notification)
        notification = repo.get_notification(command.notification_id)
        notification.mark_read(user_id=command.user_id)
        repo.add(notification)
