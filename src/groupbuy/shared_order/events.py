"""Shared order domain events: facts about the group order and its members.

All events are past tense, versioned, and carry what downstream handlers
need (cart drain/restore, notification fan-out) without reloading the order.
List-valued payloads are JSON text.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from groupbuy.domain import groupbuy


@groupbuy.event(part_of="SharedOrder")
class SharedOrderCreated:
    """A user opened a shared order seeded with their own cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    creator_id = Identifier(required=True)
    participant_id = Identifier(required=True)
    title = String(required=True)
    max_participants = Integer(required=True)
    min_order_amount = Float(required=True)
    total_amount = Float(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity, unit_price, price}
    expires_at = DateTime(required=True)
    order_deadline = DateTime()
    created_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class ParticipantJoined:
    """A user joined a shared order, contributing their whole cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    participant_id = Identifier(required=True)
    user_id = Identifier(required=True)
    added_amount = Float(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity, unit_price, price}
    current_participants = Integer(required=True)
    joined_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class OrderItemAdded:
    """A participant added (or topped up) a product line."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    line_price = Float(required=True)
    participant_total = Float(required=True)
    order_total = Float(required=True)
    added_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class ParticipantLeft:
    """A non-creator participant left an open order; their items go back to their cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    creator_id = Identifier(required=True)
    user_id = Identifier(required=True)
    restored_amount = Float(required=True)
    items = Text(required=True)  # JSON list of {product_id, quantity}
    left_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class SharedOrderDeleted:
    """The creator deleted an open order; every participant's items go back."""

    __version__ = 1

    order_id = Identifier(required=True)
    creator_id = Identifier(required=True)
    title = String()
    participant_user_ids = Text(required=True)  # JSON list of user ids
    items = Text(required=True)  # JSON list of {user_id, product_id, quantity}
    deleted_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class SharedOrderConfirmed:
    """The creator confirmed an order that reached its minimum amount."""

    __version__ = 1

    order_id = Identifier(required=True)
    creator_id = Identifier(required=True)
    participant_user_ids = Text(required=True)  # JSON list of user ids
    total_amount = Float(required=True)
    estimated_delivery_time = DateTime(required=True)
    confirmed_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class OrderOutForDelivery:
    """A rider picked the order up and the delivery route was fixed."""

    __version__ = 1

    order_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    rider_name = String(required=True)
    rider_phone = String()
    participant_user_ids = Text(required=True)  # JSON list of user ids
    stop_count = Integer(required=True)
    delivery_start_time = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class ParticipantDelivered:
    """One participant's stop on the route was completed."""

    __version__ = 1

    order_id = Identifier(required=True)
    participant_id = Identifier(required=True)
    user_id = Identifier(required=True)
    delivery_order = Integer()
    delivered_at = DateTime(required=True)


@groupbuy.event(part_of="SharedOrder")
class SharedOrderDelivered:
    """Every participant has received their items."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
