"""FastAPI routes for the Groupbuy domain: shared orders, deliveries, notifications.

Thin adapters that translate HTTP requests into domain commands and read
views. Commands scoped to an existing order are submitted through
``process_serialized`` so that each order has a single writer.
"""

from fastapi import APIRouter, Depends, Header
from protean.utils.globals import current_domain

from groupbuy.api.schemas import (
    AddItemResponse,
    AddOrderItemRequest,
    CompleteStopResponse,
    CreateSharedOrderRequest,
    DeliveryTrackingResponse,
    DispatchRequest,
    DispatchResponse,
    JoinResponse,
    JoinSharedOrderRequest,
    LeaveResponse,
    MySharedOrderListResponse,
    NotificationListResponse,
    OrderIdResponse,
    RiderLocationRequest,
    SharedOrderDetail,
    SharedOrderListResponse,
    StatusResponse,
)
from groupbuy.errors import Unauthenticated
from groupbuy.notification.queries import recent_notifications
from groupbuy.notification.reading import MarkNotificationRead
from groupbuy.shared_order.confirmation import ConfirmSharedOrder
from groupbuy.shared_order.creation import CreateSharedOrder
from groupbuy.shared_order.deletion import DeleteSharedOrder
from groupbuy.shared_order.items import AddOrderItem
from groupbuy.shared_order.joining import JoinSharedOrder
from groupbuy.shared_order.leaving import LeaveSharedOrder
from groupbuy.shared_order.queries import (
    get_order_details,
    list_active_orders,
    list_my_open_orders,
    list_my_orders,
)
from groupbuy.shared_order.serialization import process_serialized
from groupbuy.tracking.dispatch import CompleteDeliveryStop, DispatchSharedOrder
from groupbuy.tracking.location import UpdateRiderLocation
from groupbuy.tracking.queries import get_delivery_tracking


def current_user(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, as established by the gateway in front of this service."""
    if not x_user_id:
        raise Unauthenticated()
    return x_user_id


# ---------------------------------------------------------------------------
# Shared orders
# ---------------------------------------------------------------------------
shared_order_router = APIRouter(prefix="/shared-orders", tags=["shared-orders"])


@shared_order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_shared_order(body: CreateSharedOrderRequest, user_id: str = Depends(current_user)) -> OrderIdResponse:
    """Open a shared order from the caller's cart."""
    command = CreateSharedOrder(
        creator_id=user_id,
        title=body.title,
        description=body.description,
        delivery_address=body.delivery_address,
        delivery_time=body.delivery_time,
        max_participants=body.max_participants,
        min_order_amount=body.min_order_amount,
        expires_in_hours=body.expires_in_hours,
        order_deadline_in_hours=body.order_deadline_in_hours,
        preparation_minutes=body.preparation_minutes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


@shared_order_router.get("", response_model=SharedOrderListResponse)
async def active_shared_orders(user_id: str = Depends(current_user)) -> SharedOrderListResponse:
    """Open orders that have not expired."""
    orders = list_active_orders()
    return SharedOrderListResponse(orders=orders, total=len(orders))


@shared_order_router.get("/mine", response_model=MySharedOrderListResponse)
async def my_shared_orders(user_id: str = Depends(current_user)) -> MySharedOrderListResponse:
    orders = list_my_orders(user_id)
    return MySharedOrderListResponse(orders=orders, total=len(orders))


@shared_order_router.get("/mine/open", response_model=MySharedOrderListResponse)
async def my_open_shared_orders(user_id: str = Depends(current_user)) -> MySharedOrderListResponse:
    """Orders the caller is in that still accept items."""
    orders = list_my_open_orders(user_id)
    return MySharedOrderListResponse(orders=orders, total=len(orders))


@shared_order_router.get("/{order_id}", response_model=SharedOrderDetail)
async def shared_order_details(order_id: str, user_id: str = Depends(current_user)) -> SharedOrderDetail:
    return SharedOrderDetail(**get_order_details(order_id))


@shared_order_router.post("/{order_id}/join", response_model=JoinResponse)
async def join_shared_order(
    order_id: str, body: JoinSharedOrderRequest, user_id: str = Depends(current_user)
) -> JoinResponse:
    """Join with everything in the caller's cart."""
    command = JoinSharedOrder(order_id=order_id, user_id=user_id, delivery_address=body.delivery_address)
    result = process_serialized(command)
    return JoinResponse(**result)


@shared_order_router.post("/{order_id}/items", response_model=AddItemResponse)
async def add_order_item(
    order_id: str, body: AddOrderItemRequest, user_id: str = Depends(current_user)
) -> AddItemResponse:
    command = AddOrderItem(
        order_id=order_id,
        user_id=user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    result = process_serialized(command)
    return AddItemResponse(**result)


@shared_order_router.post("/{order_id}/leave", response_model=LeaveResponse)
async def leave_shared_order(order_id: str, user_id: str = Depends(current_user)) -> LeaveResponse:
    """Leave the order; the caller's items go back to their cart."""
    result = process_serialized(LeaveSharedOrder(order_id=order_id, user_id=user_id))
    return LeaveResponse(**result)


@shared_order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_shared_order(order_id: str, user_id: str = Depends(current_user)) -> StatusResponse:
    process_serialized(DeleteSharedOrder(order_id=order_id, requester_id=user_id))
    return StatusResponse()


@shared_order_router.post("/{order_id}/confirm", response_model=StatusResponse)
async def confirm_shared_order(order_id: str, user_id: str = Depends(current_user)) -> StatusResponse:
    process_serialized(ConfirmSharedOrder(order_id=order_id, requester_id=user_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Deliveries
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.post("/{order_id}/dispatch", status_code=201, response_model=DispatchResponse)
async def dispatch_shared_order(
    order_id: str, body: DispatchRequest, user_id: str = Depends(current_user)
) -> DispatchResponse:
    """Hand a confirmed order to a rider and build the route."""
    command = DispatchSharedOrder(
        order_id=order_id,
        rider_id=body.rider_id,
        rider_name=body.rider_name,
        rider_phone=body.rider_phone,
    )
    tracking_id = process_serialized(command)
    return DispatchResponse(tracking_id=tracking_id)


@delivery_router.post("/{order_id}/location", response_model=StatusResponse)
async def update_rider_location(
    order_id: str, body: RiderLocationRequest, user_id: str = Depends(current_user)
) -> StatusResponse:
    command = UpdateRiderLocation(order_id=order_id, rider_id=body.rider_id, lat=body.lat, lng=body.lng)
    process_serialized(command)
    return StatusResponse()


@delivery_router.post("/{order_id}/stops/{participant_id}/complete", response_model=CompleteStopResponse)
async def complete_delivery_stop(
    order_id: str, participant_id: str, user_id: str = Depends(current_user)
) -> CompleteStopResponse:
    result = process_serialized(CompleteDeliveryStop(order_id=order_id, participant_id=participant_id))
    return CompleteStopResponse(**result)


@delivery_router.get("/{order_id}", response_model=DeliveryTrackingResponse)
async def delivery_tracking(order_id: str, user_id: str = Depends(current_user)) -> DeliveryTrackingResponse:
    """Live tracking view, for participants of the order only."""
    return DeliveryTrackingResponse(**get_delivery_tracking(order_id, user_id))


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notification_router.get("", response_model=NotificationListResponse)
async def my_notifications(user_id: str = Depends(current_user)) -> NotificationListResponse:
    """The caller's 20 most recent notifications, newest first."""
    notifications = recent_notifications(user_id)
    return NotificationListResponse(notifications=notifications, total=len(notifications))


@notification_router.put("/{notification_id}/read", response_model=StatusResponse)
async def mark_notification_read(notification_id: str, user_id: str = Depends(current_user)) -> StatusResponse:
    current_domain.process(
        MarkNotificationRead(notification_id=notification_id, user_id=user_id),
        asynchronous=False,
    )
    return StatusResponse()
