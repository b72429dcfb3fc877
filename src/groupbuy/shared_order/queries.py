"""Authoritative read views of shared orders.

Every view recomputes the amount and participant count from the live
participant rows instead of trusting the cached counters on the order, and
derives the deadline fields against the current time.
"""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from groupbuy.shared_order.shared_order import SharedOrder, SharedOrderStatus


def _participant_view(participant) -> dict:
    return {
        "participant_id": str(participant.id),
        "user_id": str(participant.user_id),
        "total_amount": participant.total_amount,
        "joined_at": participant.joined_at,
        "delivery_address": participant.delivery_address,
        "delivery_order": participant.delivery_order,
        "estimated_arrival": participant.estimated_arrival,
        "is_delivered": bool(participant.is_delivered),
        "delivered_at": participant.delivered_at,
    }


def _item_view(item) -> dict:
    return {
        "item_id": str(item.id),
        "user_id": str(item.user_id),
        "product_id": str(item.product_id),
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "price": item.price,
    }


def order_view(order: SharedOrder, at: datetime | None = None, detailed: bool = True) -> dict:
    now = at or datetime.now(UTC)
    view = {
        "order_id": str(order.id),
        "creator_id": str(order.creator_id),
        "title": order.title,
        "description": order.description,
        "delivery_address": order.delivery_address,
        "delivery_time": order.delivery_time,
        "max_participants": order.max_participants,
        "min_order_amount": order.min_order_amount,
        "current_amount": order.live_total(),
        "current_participants": order.live_participant_count(),
        "status": order.status,
        "expires_at": order.expires_at,
        "order_deadline": order.order_deadline,
        "time_until_deadline": order.seconds_until_deadline(now),
        "is_ordering_closed": order.is_ordering_closed(now),
        "preparation_minutes": order.preparation_minutes,
        "estimated_delivery_time": order.estimated_delivery_time,
        "delivery_start_time": order.delivery_start_time,
        "rider": (
            {"rider_id": str(order.rider.rider_id), "name": order.rider.name, "phone": order.rider.phone}
            if order.rider
            else None
        ),
        "created_at": order.created_at,
    }
    if detailed:
        view["participants"] = [_participant_view(p) for p in order.route_order()]
        view["items"] = [_item_view(i) for i in order.items]
    return view


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def get_order_details(order_id, at: datetime | None = None) -> dict:
    order = current_domain.repository_for(SharedOrder).get_order(order_id)
    return order_view(order, at=at)


def list_active_orders(at: datetime | None = None) -> list[dict]:
    """Open orders that have not expired yet. Expired ones are filtered, never changed."""
    now = at or datetime.now(UTC)
    orders = current_domain.repository_for(SharedOrder).open_orders()
    return [order_view(o, at=now, detailed=False) for o in _newest_first(orders) if o.expires_at > now]


def list_my_orders(user_id, at: datetime | None = None) -> list[dict]:
    """Every order the user takes part in, any status."""
    now = at or datetime.now(UTC)
    views = []
    for order in _newest_first(current_domain.repository_for(SharedOrder).all_orders()):
        participant = order.participant_for(user_id)
        if participant is None:
            continue
        view = order_view(order, at=now, detailed=False)
        view["is_creator"] = str(order.creator_id) == str(user_id)
        view["my_total"] = participant.total_amount
        view["my_items"] = [_item_view(i) for i in order.items_for(user_id)]
        views.append(view)
    return views


def list_my_open_orders(user_id, at: datetime | None = None) -> list[dict]:
    """Orders the user is in that still accept items (open and before the deadline)."""
    now = at or datetime.now(UTC)
    return [
        view
        for view in list_my_orders(user_id, at=now)
        if view["status"] == SharedOrderStatus.OPEN.value and not view["is_ordering_closed"]
    ]
