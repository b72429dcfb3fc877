"""Application tests for leaving and deleting shared orders: cart restore and notifications."""

import pytest
from groupbuy.errors import CreatorCannotLeave, Forbidden, InvalidState, NotFound
from groupbuy.notification.notification import Notification, NotificationType
from groupbuy.shared_order.confirmation import ConfirmSharedOrder
from groupbuy.shared_order.creation import CreateSharedOrder
from groupbuy.shared_order.deletion import DeleteSharedOrder
from groupbuy.shared_order.items import AddOrderItem
from groupbuy.shared_order.joining import JoinSharedOrder
from groupbuy.shared_order.leaving import LeaveSharedOrder
from groupbuy.shared_order.shared_order import SharedOrder
from groupbuy.tracking.delivery_tracking import DeliveryTracking
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


def _order_with_member(carts):
    """Creator has 2 rice; user-2 joined with 2 dal and 1 tea."""
    carts.restore_or_add("user-creator", "prod-rice", 2)
    order_id = current_domain.process(
        CreateSharedOrder(
            creator_id="user-creator",
            title="Society bulk buy",
            delivery_address="Gate 1, Palm Meadows",
            max_participants=4,
            expires_in_hours=24,
        ),
        asynchronous=False,
    )
    carts.restore_or_add("user-2", "prod-dal", 2)
    carts.restore_or_add("user-2", "prod-tea", 1)
    current_domain.process(
        JoinSharedOrder(order_id=order_id, user_id="user-2", delivery_address="Villa 22"),
        asynchronous=False,
    )
    return order_id


def _leave(order_id, user_id="user-2"):
    return current_domain.process(LeaveSharedOrder(order_id=order_id, user_id=user_id), asynchronous=False)


def _delete(order_id, requester_id="user-creator"):
    return current_domain.process(
        DeleteSharedOrder(order_id=order_id, requester_id=requester_id),
        asynchronous=False,
    )


class TestLeaveSharedOrderCommand:
    def test_leave_restores_cart(self, catalog, carts):
        order_id = _order_with_member(carts)
        _leave(order_id)
        assert carts.quantity_of("user-2", "prod-dal") == 2
        assert carts.quantity_of("user-2", "prod-tea") == 1

    def test_leave_merges_with_existing_cart_lines(self, catalog, carts):
        order_id = _order_with_member(carts)
        carts.restore_or_add("user-2", "prod-dal", 4)
        _leave(order_id)
        assert carts.quantity_of("user-2", "prod-dal") == 6

    def test_leave_restores_items_added_later(self, catalog, carts):
        order_id = _order_with_member(carts)
        current_domain.process(
            AddOrderItem(order_id=order_id, user_id="user-2", product_id="prod-dal", quantity=3),
            asynchronous=False,
        )
        _leave(order_id)
        assert carts.quantity_of("user-2", "prod-dal") == 5

    def test_leave_removes_participation(self, catalog, carts):
        order_id = _order_with_member(carts)
        result = _leave(order_id)

        assert result["restored_amount"] == 125.0
        order = current_domain.repository_for(SharedOrder).get(order_id)
        assert not order.is_participant("user-2")
        assert order.items_for("user-2") == []
        assert order.live_total() == 200.0
        assert order.current_amount == 200.0

    def test_leave_notifies_creator(self, catalog, carts):
        order_id = _order_with_member(carts)
        _leave(order_id)

        feed = current_domain.repository_for(Notification).recent_for_user("user-creator")
        assert len(feed) == 1
        assert feed[0].notification_type == NotificationType.PARTICIPANT_LEFT.value
        assert feed[0].order_id == order_id
        assert "user-2" in feed[0].message

    def test_creator_cannot_leave(self, catalog, carts):
        order_id = _order_with_member(carts)
        with pytest.raises(CreatorCannotLeave):
            _leave(order_id, "user-creator")

    def test_cannot_leave_confirmed_order(self, catalog, carts):
        order_id = _order_with_member(carts)
        current_domain.process(
            ConfirmSharedOrder(order_id=order_id, requester_id="user-creator"),
            asynchronous=False,
        )
        with pytest.raises(InvalidState):
            _leave(order_id)
        assert carts.list_items("user-2") == []


class TestDeleteSharedOrderCommand:
    def test_delete_restores_every_cart(self, catalog, carts):
        order_id = _order_with_member(carts)
        _delete(order_id)

        assert carts.quantity_of("user-creator", "prod-rice") == 2
        assert carts.quantity_of("user-2", "prod-dal") == 2
        assert carts.quantity_of("user-2", "prod-tea") == 1

    def test_delete_removes_order(self, catalog, carts):
        order_id = _order_with_member(carts)
        _delete(order_id)

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(SharedOrder).get(order_id)
        with pytest.raises(NotFound):
            current_domain.repository_for(SharedOrder).get_order(order_id)

    def test_delete_replaces_notifications_with_cancellation(self, catalog, carts):
        order_id = _order_with_member(carts)
        carts.restore_or_add("user-3", "prod-oil", 1)
        current_domain.process(
            JoinSharedOrder(order_id=order_id, user_id="user-3", delivery_address="Villa 9"),
            asynchronous=False,
        )
        _leave(order_id, "user-3")  # creator gets a participant_left notice

        _delete(order_id)

        notifications = current_domain.repository_for(Notification).for_order(order_id)
        assert sorted(n.user_id for n in notifications) == ["user-2", "user-creator"]
        assert {n.notification_type for n in notifications} == {NotificationType.ORDER_CANCELLED.value}

    def test_delete_leaves_other_orders_alone(self, catalog, carts):
        first = _order_with_member(carts)
        _leave(first)
        second = _order_with_member(carts)
        _delete(second)

        repo = current_domain.repository_for(Notification)
        assert [n.notification_type for n in repo.for_order(first)] == [NotificationType.PARTICIPANT_LEFT.value]

    def test_only_creator_can_delete(self, catalog, carts):
        order_id = _order_with_member(carts)
        with pytest.raises(Forbidden):
            _delete(order_id, "user-2")
        assert current_domain.repository_for(SharedOrder).get(order_id).live_participant_count() == 2

    def test_confirmed_order_cannot_be_deleted(self, catalog, carts):
        order_id = _order_with_member(carts)
        current_domain.process(
            ConfirmSharedOrder(order_id=order_id, requester_id="user-creator"),
            asynchronous=False,
        )
        with pytest.raises(InvalidState):
            _delete(order_id)

    def test_delete_unknown_order(self, catalog, carts):
        with pytest.raises(NotFound):
            _delete("no-such-order")

    def test_no_tracking_left_behind(self, catalog, carts):
        order_id = _order_with_member(carts)
        _delete(order_id)
        assert current_domain.repository_for(DeliveryTracking).find_for_order(order_id) is None
