"""Notification templates: title and message copy per notification type.

Each template renders from a small context dict (rider name, user id...).
"""

from groupbuy.notification.notification import NotificationType


class OrderConfirmedTemplate:
    notification_type = NotificationType.ORDER_CONFIRMED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Order Confirmed!",
            "message": (
                "Your group order has been confirmed and is being prepared. "
                "You'll receive updates as it progresses."
            ),
        }


class PreparationStartedTemplate:
    notification_type = NotificationType.PREPARATION_STARTED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Your order is being prepared",
            "message": "The store has started packing your group order.",
        }


class OutForDeliveryTemplate:
    notification_type = NotificationType.OUT_FOR_DELIVERY.value

    @staticmethod
    def render(context: dict) -> dict:
        rider_name = context.get("rider_name") or "Your rider"
        return {
            "title": "Your order is out for delivery!",
            "message": f"{rider_name} is on the way with your group order. Track live location in the app.",
        }


class RiderNearbyTemplate:
    notification_type = NotificationType.RIDER_NEARBY.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Rider is nearby!",
            "message": "Your delivery rider is approaching your location. Please be ready to receive your order.",
        }


class NextStopTemplate:
    notification_type = NotificationType.NEXT_STOP.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "You're next!",
            "message": (
                "Your stop is coming up next! The rider will be at your location in approximately 10-15 minutes."
            ),
        }


class DeliveredTemplate:
    notification_type = NotificationType.DELIVERED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Order Delivered!",
            "message": "Your items have been delivered successfully. Enjoy your groceries!",
        }


class ParticipantLeftTemplate:
    notification_type = NotificationType.PARTICIPANT_LEFT.value

    @staticmethod
    def render(context: dict) -> dict:
        who = context.get("user_name") or context.get("user_id") or "A participant"
        return {
            "title": "Participant Left Order",
            "message": f"{who} has left your group order. Their items have been removed from the order.",
        }


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Group Order Cancelled",
            "message": (
                "The group order has been cancelled by the creator. Your items have been restored to your cart."
            ),
        }


TEMPLATE_REGISTRY: dict[str, type] = {
    template.notification_type: template
    for template in (
        OrderConfirmedTemplate,
        PreparationStartedTemplate,
        OutForDeliveryTemplate,
        RiderNearbyTemplate,
        NextStopTemplate,
        DeliveredTemplate,
        ParticipantLeftTemplate,
        OrderCancelledTemplate,
    )
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
