"""Pydantic request/response schemas for the Groupbuy API.

These are external contracts, kept separate from the internal Protean
commands and read views.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared order requests
# ---------------------------------------------------------------------------
class CreateSharedOrderRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    delivery_address: str = Field(min_length=1, max_length=500)
    delivery_time: str | None = Field(default=None, max_length=100)
    max_participants: int = Field(ge=2)
    min_order_amount: float = Field(default=0.0, ge=0)
    expires_in_hours: float = Field(gt=0)
    order_deadline_in_hours: float | None = None
    preparation_minutes: int | None = Field(default=None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Friday veggie run",
                    "delivery_address": "Block C, Green Park",
                    "delivery_time": "Friday 6-7pm",
                    "max_participants": 5,
                    "min_order_amount": 500,
                    "expires_in_hours": 24,
                }
            ]
        }
    }


class JoinSharedOrderRequest(BaseModel):
    delivery_address: str = Field(min_length=1, max_length=500)


class AddOrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Delivery requests
# ---------------------------------------------------------------------------
class DispatchRequest(BaseModel):
    rider_id: str
    rider_name: str = Field(min_length=1, max_length=100)
    rider_phone: str | None = Field(default=None, max_length=30)


class RiderLocationRequest(BaseModel):
    rider_id: str
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class OrderIdResponse(BaseModel):
    order_id: str


class JoinResponse(BaseModel):
    participant_id: str
    added_amount: float
    items_added: int


class AddItemResponse(BaseModel):
    product_id: str
    quantity: int
    price: float
    participant_total: float
    order_total: float


class RestoredItemSchema(BaseModel):
    product_id: str
    quantity: int


class LeaveResponse(BaseModel):
    restored_amount: float
    restored_items: list[RestoredItemSchema]


class RiderSchema(BaseModel):
    rider_id: str
    name: str
    phone: str | None = None


class ParticipantSchema(BaseModel):
    participant_id: str
    user_id: str
    total_amount: float
    joined_at: datetime
    delivery_address: str | None = None
    delivery_order: int | None = None
    estimated_arrival: datetime | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None


class OrderItemSchema(BaseModel):
    item_id: str
    user_id: str
    product_id: str
    quantity: int
    unit_price: float
    price: float


class SharedOrderSummary(BaseModel):
    order_id: str
    creator_id: str
    title: str
    description: str | None = None
    delivery_address: str
    delivery_time: str | None = None
    max_participants: int
    min_order_amount: float
    current_amount: float
    current_participants: int
    status: str
    expires_at: datetime
    order_deadline: datetime | None = None
    time_until_deadline: float | None = None
    is_ordering_closed: bool
    preparation_minutes: int | None = None
    estimated_delivery_time: datetime | None = None
    delivery_start_time: datetime | None = None
    rider: RiderSchema | None = None
    created_at: datetime | None = None


class SharedOrderDetail(SharedOrderSummary):
    participants: list[ParticipantSchema]
    items: list[OrderItemSchema]


class MySharedOrder(SharedOrderSummary):
    is_creator: bool
    my_total: float
    my_items: list[OrderItemSchema]


class SharedOrderListResponse(BaseModel):
    orders: list[SharedOrderSummary]
    total: int


class MySharedOrderListResponse(BaseModel):
    orders: list[MySharedOrder]
    total: int


class DispatchResponse(BaseModel):
    tracking_id: str


class CompleteStopResponse(BaseModel):
    all_delivered: bool
    status: str


class LocationSchema(BaseModel):
    lat: float
    lng: float
    recorded_at: datetime | None = None


class RouteStopSchema(BaseModel):
    participant_id: str
    sequence: int
    address: str | None = None
    lat: float
    lng: float
    estimated_arrival: datetime | None = None
    is_completed: bool = False
    completed_at: datetime | None = None


class DeliveryTrackingResponse(BaseModel):
    order_id: str
    status: str
    tracking_status: str
    rider: RiderSchema | None = None
    current_location: LocationSchema | None = None
    route: list[RouteStopSchema]
    total_distance_km: float
    estimated_duration_minutes: int
    delivery_start_time: datetime | None = None
    last_updated: datetime | None = None
    my_delivery_order: int | None = None
    my_estimated_arrival: datetime | None = None
    is_delivered: bool = False


class NotificationSchema(BaseModel):
    notification_id: str
    order_id: str
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime | None = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationSchema]
    total: int
