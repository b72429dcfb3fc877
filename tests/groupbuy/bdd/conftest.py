"""Shared BDD fixtures and step definitions for group orders."""

import pytest
from groupbuy.cart import get_cart_store, get_catalog
from groupbuy.notification.notification import Notification
from groupbuy.shared_order.creation import CreateSharedOrder
from groupbuy.shared_order.joining import JoinSharedOrder
from groupbuy.shared_order.leaving import LeaveSharedOrder
from groupbuy.shared_order.serialization import process_serialized
from groupbuy.shared_order.shared_order import SharedOrder
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def error():
    """Container for the error raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Process a command, capturing a refusal in ``error`` instead of raising it."""

    def _attempt(command):
        error["exc"] = None
        try:
            return process_serialized(command)
        except ValidationError as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalog lists "{product_id}" at {price:f}'))
def catalog_lists(product_id, price):
    get_catalog().add_product(product_id, product_id.removeprefix("prod-").title(), price)


@given(parsers.cfparse('user "{user_id}" has {quantity:d} of "{product_id}" in the cart'))
def user_has_cart_line(user_id, quantity, product_id):
    get_cart_store().restore_or_add(user_id, product_id, quantity)


@given(
    parsers.cfparse('user "{user_id}" opens a shared order for {size:d} people with a minimum of {minimum:f}'),
    target_fixture="order_id",
)
def open_shared_order(user_id, size, minimum):
    return current_domain.process(
        CreateSharedOrder(
            creator_id=user_id,
            title=f"{user_id.title()}'s group order",
            delivery_address=f"{user_id.title()} Residence",
            max_participants=size,
            min_order_amount=minimum,
            expires_in_hours=24,
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('user "{user_id}" joins the order'))
def user_joins(order_id, user_id, attempt):
    attempt(JoinSharedOrder(order_id=order_id, user_id=user_id, delivery_address=f"{user_id.title()} Flat"))


@when(parsers.cfparse('user "{user_id}" leaves the order'))
def user_leaves(order_id, user_id, attempt):
    attempt(LeaveSharedOrder(order_id=order_id, user_id=user_id))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{kind}"'))
def request_fails_with(error, kind):
    assert error["exc"] is not None
    assert error["exc"].kind == kind


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(SharedOrder).get(order_id).status == status


@then(parsers.cfparse("the order has {count:d} participants"))
@then(parsers.cfparse("the order has {count:d} participant"))
def order_has_participants(order_id, count):
    assert current_domain.repository_for(SharedOrder).get(order_id).live_participant_count() == count


@then(parsers.cfparse('user "{user_id}" has {count:d} "{notification_type}" notifications'))
@then(parsers.cfparse('user "{user_id}" has {count:d} "{notification_type}" notification'))
def user_has_notifications(user_id, count, notification_type):
    feed = current_domain.repository_for(Notification).recent_for_user(user_id)
    assert [n.notification_type for n in feed].count(notification_type) == count


@then(parsers.cfparse('user "{user_id}" has {quantity:d} of "{product_id}" in the cart'))
def user_cart_holds(user_id, quantity, product_id):
    assert get_cart_store().quantity_of(user_id, product_id) == quantity
