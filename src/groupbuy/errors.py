"""Caller-facing error kinds for group orders.

Every kind is a ``ValidationError`` so that raising it inside a command
handler rolls back the unit of work exactly like any other domain rule
violation. Each carries a stable ``kind`` string, the HTTP status the API
maps it to, and optional structured details for rendering a message.
"""

from protean.exceptions import ValidationError


class GroupOrderError(ValidationError):
    kind = "GroupOrderError"
    status_code = 400
    field = "shared_order"
    default_message = "Group order operation failed"

    def __init__(self, message: str | None = None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__({self.field: [self.message]})

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, **self.details}


class Unauthenticated(GroupOrderError):
    kind = "Unauthenticated"
    status_code = 401
    field = "user_id"
    default_message = "Not authenticated"


class NotFound(GroupOrderError):
    kind = "NotFound"
    status_code = 404
    default_message = "Shared order not found"


class Forbidden(GroupOrderError):
    kind = "Forbidden"
    status_code = 403
    field = "user_id"
    default_message = "Not allowed"


class InvalidState(GroupOrderError):
    kind = "InvalidState"
    status_code = 409
    field = "status"
    default_message = "Operation not allowed in the current order status"


class NotOpen(InvalidState):
    default_message = "Order is no longer accepting participants"


class DeadlinePassed(GroupOrderError):
    kind = "DeadlinePassed"
    status_code = 409
    field = "order_deadline"
    default_message = "Order deadline has passed"


class Full(GroupOrderError):
    kind = "Full"
    status_code = 409
    field = "max_participants"
    default_message = "Order is full"


class AlreadyJoined(GroupOrderError):
    kind = "AlreadyJoined"
    status_code = 409
    field = "user_id"
    default_message = "Already joined this order"


class NotParticipant(GroupOrderError):
    kind = "NotParticipant"
    status_code = 403
    field = "user_id"
    default_message = "Not a participant of this order"


class EmptyCart(GroupOrderError):
    kind = "EmptyCart"
    status_code = 400
    field = "cart"
    default_message = "Cart is empty"


class BelowMinimum(GroupOrderError):
    kind = "BelowMinimum"
    status_code = 422
    field = "min_order_amount"

    def __init__(self, current: float, required: float):
        self.current = current
        self.required = required
        super().__init__(
            f"Minimum order amount not reached: {current:.2f} of {required:.2f}",
            current=current,
            required=required,
        )


class CreatorCannotLeave(GroupOrderError):
    kind = "CreatorCannotLeave"
    status_code = 409
    field = "user_id"
    default_message = "Order creator cannot leave. Delete the order instead."
