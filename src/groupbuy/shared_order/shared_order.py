"""SharedOrder aggregate (CQRS): one group purchase and everyone in it.

The aggregate owns its Participants and their OrderItems, so every rule that
spans them (capacity, one membership per user, items only for members) is
checked inside one consistency boundary. ``current_amount`` and
``current_participants`` are cached for list display only; authoritative
reads go through ``live_total()`` / ``live_participant_count()``.

State Machine:
    OPEN → CONFIRMED → OUT_FOR_DELIVERY → DELIVERED
    OPEN → (deleted, the aggregate is removed)
    CLOSED and PREPARING are reserved; nothing transitions into them.
"""

import json
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from groupbuy.domain import groupbuy
from groupbuy.errors import (
    AlreadyJoined,
    BelowMinimum,
    CreatorCannotLeave,
    DeadlinePassed,
    EmptyCart,
    Forbidden,
    Full,
    InvalidState,
    NotFound,
    NotOpen,
    NotParticipant,
)
from groupbuy.shared_order.events import (
    OrderItemAdded,
    OrderOutForDelivery,
    ParticipantDelivered,
    ParticipantJoined,
    ParticipantLeft,
    SharedOrderConfirmed,
    SharedOrderCreated,
    SharedOrderDeleted,
    SharedOrderDelivered,
)

DEFAULT_PREPARATION_MINUTES = 30
DEADLINE_LEAD = timedelta(hours=1)
STOP_INTERVAL = timedelta(minutes=15)


def round_money(amount) -> float:
    return round(float(amount or 0.0), 2)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class SharedOrderStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"


_VALID_TRANSITIONS = {
    SharedOrderStatus.OPEN: {SharedOrderStatus.CONFIRMED},
    SharedOrderStatus.CONFIRMED: {SharedOrderStatus.OUT_FOR_DELIVERY},
    SharedOrderStatus.OUT_FOR_DELIVERY: {SharedOrderStatus.DELIVERED},
    SharedOrderStatus.DELIVERED: set(),  # terminal
    SharedOrderStatus.CLOSED: set(),  # reserved
    SharedOrderStatus.PREPARING: set(),  # reserved
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@groupbuy.value_object(part_of="SharedOrder")
class RiderDetails:
    """The rider carrying the order, once dispatched."""

    rider_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    phone = String(max_length=30)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@groupbuy.entity(part_of="SharedOrder")
class Participant:
    """One user's membership in the order and their running total."""

    user_id = Identifier(required=True)
    total_amount = Float(default=0.0, min_value=0.0)
    joined_at = DateTime(required=True)
    join_sequence = Integer(required=True, min_value=1)
    delivery_address = String(max_length=500)
    delivery_order = Integer(min_value=1)
    estimated_arrival = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()


@groupbuy.entity(part_of="SharedOrder")
class OrderItem:
    """One product line contributed by one participant.

    ``price`` is ``unit_price * quantity`` frozen at contribution time.
    """

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    price = Float(required=True, min_value=0.0)
    added_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@groupbuy.aggregate
class SharedOrder:
    creator_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    description = Text()
    delivery_address = String(required=True, max_length=500)
    delivery_time = String(max_length=100)  # Human label, e.g. "Tonight 7-8pm"
    max_participants = Integer(required=True, min_value=2)
    min_order_amount = Float(default=0.0, min_value=0.0)
    current_amount = Float(default=0.0)  # Cached, see live_total()
    current_participants = Integer(default=0)  # Cached, see live_participant_count()
    status = String(
        max_length=30,
        choices=SharedOrderStatus,
        default=SharedOrderStatus.OPEN.value,
    )
    expires_at = DateTime(required=True)
    order_deadline = DateTime()
    preparation_minutes = Integer(default=DEFAULT_PREPARATION_MINUTES, min_value=0)
    delivery_start_time = DateTime()
    estimated_delivery_time = DateTime()
    rider = ValueObject(RiderDetails)
    participants = HasMany(Participant)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def participants_cannot_exceed_capacity(self):
        if self.max_participants is not None and len(self.participants) > self.max_participants:
            raise ValidationError({"participants": [f"Cannot have more than {self.max_participants} participants"]})

    @invariant.post
    def one_membership_per_user(self):
        user_ids = [str(p.user_id) for p in self.participants]
        if len(user_ids) != len(set(user_ids)):
            raise ValidationError({"participants": ["A user can join an order only once"]})

    @invariant.post
    def items_belong_to_participants(self):
        members = {str(p.user_id) for p in self.participants}
        seen = set()
        for item in self.items:
            if str(item.user_id) not in members:
                raise ValidationError({"items": ["Items can only be contributed by participants"]})
            key = (str(item.user_id), str(item.product_id))
            if key in seen:
                raise ValidationError({"items": ["Duplicate line for the same participant and product"]})
            seen.add(key)

    @invariant.post
    def deadline_cannot_be_after_expiry(self):
        if self.order_deadline and self.expires_at and self.order_deadline > self.expires_at:
            raise ValidationError({"order_deadline": ["Order deadline cannot be after the order expires"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        creator_id: str,
        title: str,
        delivery_address: str,
        max_participants: int,
        min_order_amount: float,
        expires_in_hours: float,
        cart_lines: list[dict],
        description: str | None = None,
        delivery_time: str | None = None,
        order_deadline_in_hours: float | None = None,
        preparation_minutes: int | None = None,
        created_at: datetime | None = None,
    ) -> "SharedOrder":
        """Open a new order with the creator as participant #1.

        ``cart_lines`` are the creator's priced cart lines; every one becomes
        an OrderItem. The order deadline defaults to one hour before expiry.
        """
        if not cart_lines or round_money(sum(line["price"] for line in cart_lines)) <= 0:
            raise EmptyCart()
        if expires_in_hours is None or expires_in_hours <= 0:
            raise ValidationError({"expires_in_hours": ["Expiry must be in the future"]})

        now = created_at or datetime.now(UTC)
        expires_at = now + timedelta(hours=expires_in_hours)
        if order_deadline_in_hours is not None:
            order_deadline = now + timedelta(hours=order_deadline_in_hours)
        else:
            order_deadline = expires_at - DEADLINE_LEAD
        if order_deadline > expires_at:
            raise ValidationError({"order_deadline": ["Order deadline cannot be after the order expires"]})

        order = cls(
            creator_id=creator_id,
            title=title,
            description=description,
            delivery_address=delivery_address,
            delivery_time=delivery_time,
            max_participants=max_participants,
            min_order_amount=round_money(min_order_amount),
            current_amount=0.0,
            current_participants=0,
            status=SharedOrderStatus.OPEN.value,
            expires_at=expires_at,
            order_deadline=order_deadline,
            preparation_minutes=(
                preparation_minutes if preparation_minutes is not None else DEFAULT_PREPARATION_MINUTES
            ),
            created_at=now,
            updated_at=now,
        )

        creator = order._enrol(creator_id, delivery_address, cart_lines, now)
        order.current_participants = 1
        order.current_amount = creator.total_amount

        order.raise_(
            SharedOrderCreated(
                order_id=str(order.id),
                creator_id=str(creator_id),
                participant_id=str(creator.id),
                title=title,
                max_participants=max_participants,
                min_order_amount=order.min_order_amount,
                total_amount=creator.total_amount,
                items=json.dumps(cart_lines),
                expires_at=expires_at,
                order_deadline=order_deadline,
                created_at=now,
            )
        )

        return order

    # -------------------------------------------------------------------
    # Lookups and derived values
    # -------------------------------------------------------------------
    def participant_for(self, user_id) -> Participant | None:
        return next((p for p in self.participants if str(p.user_id) == str(user_id)), None)

    def participant_by_id(self, participant_id) -> Participant | None:
        return next((p for p in self.participants if str(p.id) == str(participant_id)), None)

    def items_for(self, user_id) -> list[OrderItem]:
        return [i for i in self.items if str(i.user_id) == str(user_id)]

    def is_participant(self, user_id) -> bool:
        return self.participant_for(user_id) is not None

    def live_total(self) -> float:
        """Order amount recomputed from participant totals."""
        return round_money(sum(p.total_amount or 0.0 for p in self.participants))

    def live_participant_count(self) -> int:
        return len(self.participants)

    def is_ordering_closed(self, at: datetime | None = None) -> bool:
        now = at or datetime.now(UTC)
        return self.order_deadline is not None and now > self.order_deadline

    def seconds_until_deadline(self, at: datetime | None = None) -> float | None:
        """Seconds left before the deadline, floored at zero; None without a deadline."""
        if self.order_deadline is None:
            return None
        now = at or datetime.now(UTC)
        return max(0.0, (self.order_deadline - now).total_seconds())

    def route_order(self) -> list[Participant]:
        """Participants in join order, which is the delivery order."""
        return sorted(self.participants, key=lambda p: (p.join_sequence, p.joined_at))

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = SharedOrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidState(f"Cannot transition from {current.value} to {target_status.value}")

    def _assert_open(self, message=None):
        if SharedOrderStatus(self.status) != SharedOrderStatus.OPEN:
            raise NotOpen(message)

    def _assert_before_deadline(self, now):
        if self.is_ordering_closed(now):
            raise DeadlinePassed()

    def _assert_creator(self, user_id, message):
        if str(user_id) != str(self.creator_id):
            raise Forbidden(message)

    # -------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------
    def _enrol(self, user_id, delivery_address, cart_lines, now) -> Participant:
        """Add a participant and turn their cart lines into order items."""
        next_sequence = max((p.join_sequence for p in self.participants), default=0) + 1
        participant = Participant(
            user_id=user_id,
            total_amount=round_money(sum(line["price"] for line in cart_lines)),
            joined_at=now,
            join_sequence=next_sequence,
            delivery_address=delivery_address or self.delivery_address,
            is_delivered=False,
        )
        # Participant first: items are only valid for members
        self.add_participants(participant)

        for line in cart_lines:
            existing = next(
                (i for i in self.items_for(user_id) if str(i.product_id) == str(line["product_id"])),
                None,
            )
            if existing:
                existing.quantity += int(line["quantity"])
                existing.price = round_money(existing.unit_price * existing.quantity)
            else:
                self.add_items(
                    OrderItem(
                        user_id=user_id,
                        product_id=line["product_id"],
                        quantity=int(line["quantity"]),
                        unit_price=float(line["unit_price"]),
                        price=round_money(line["price"]),
                        added_at=now,
                    )
                )
        return participant

    def join(self, user_id, delivery_address, cart_lines, joined_at=None) -> dict:
        """Add a user with their priced cart lines.

        Returns:
            dict with participant_id, added_amount and items_added
        """
        if not cart_lines:
            raise EmptyCart()

        now = joined_at or datetime.now(UTC)
        self._assert_open()
        self._assert_before_deadline(now)
        if len(self.participants) >= self.max_participants:
            raise Full()
        if self.is_participant(user_id):
            raise AlreadyJoined()

        added_amount = round_money(sum(line["price"] for line in cart_lines))
        if added_amount <= 0:
            raise EmptyCart()

        participant = self._enrol(user_id, delivery_address, cart_lines, now)
        self.current_participants = (self.current_participants or 0) + 1
        self.current_amount = round_money((self.current_amount or 0.0) + added_amount)
        self.updated_at = now

        self.raise_(
            ParticipantJoined(
                order_id=str(self.id),
                participant_id=str(participant.id),
                user_id=str(user_id),
                added_amount=added_amount,
                items=json.dumps(cart_lines),
                current_participants=self.current_participants,
                joined_at=now,
            )
        )

        return {
            "participant_id": str(participant.id),
            "added_amount": added_amount,
            "items_added": len(cart_lines),
        }

    def add_item(self, user_id, product_id, quantity, unit_price, added_at=None) -> dict:
        """Add a product line for a participant, merging with an existing line.

        A merged line is re-priced at ``unit_price`` for its whole quantity.
        The order amount is recomputed from all participants afterwards.
        """
        now = added_at or datetime.now(UTC)
        self._assert_open()
        self._assert_before_deadline(now)
        participant = self.participant_for(user_id)
        if participant is None:
            raise NotParticipant("You must join the order before adding items")
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next((i for i in self.items_for(user_id) if str(i.product_id) == str(product_id)), None)
        if existing:
            previous_price = existing.price
            existing.quantity += quantity
            existing.unit_price = float(unit_price)
            existing.price = round_money(existing.unit_price * existing.quantity)
            line = existing
        else:
            previous_price = 0.0
            line = OrderItem(
                user_id=user_id,
                product_id=product_id,
                quantity=quantity,
                unit_price=float(unit_price),
                price=round_money(float(unit_price) * quantity),
                added_at=now,
            )
            self.add_items(line)

        participant.total_amount = round_money(participant.total_amount + line.price - previous_price)
        self.current_amount = self.live_total()
        self.current_participants = self.live_participant_count()
        self.updated_at = now

        self.raise_(
            OrderItemAdded(
                order_id=str(self.id),
                user_id=str(user_id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line.quantity,
                line_price=line.price,
                participant_total=participant.total_amount,
                order_total=self.current_amount,
                added_at=now,
            )
        )

        return {
            "product_id": str(product_id),
            "quantity": line.quantity,
            "price": line.price,
            "participant_total": participant.total_amount,
            "order_total": self.current_amount,
        }

    def leave(self, user_id, left_at=None) -> dict:
        """Remove a non-creator participant and their items.

        Returns:
            dict with restored_amount and restored_items ({product_id, quantity})
        """
        self._assert_open("Cannot leave an order that is no longer open")
        if str(user_id) == str(self.creator_id):
            raise CreatorCannotLeave()
        participant = self.participant_for(user_id)
        if participant is None:
            raise NotParticipant()

        now = left_at or datetime.now(UTC)
        restored = [{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items_for(user_id)]
        restored_amount = round_money(participant.total_amount)

        # Items first: they are only valid while their owner is a member
        for item in self.items_for(user_id):
            self.remove_items(item)
        self.remove_participants(participant)

        self.current_participants = max(0, (self.current_participants or 0) - 1)
        self.current_amount = max(0.0, round_money((self.current_amount or 0.0) - restored_amount))
        self.updated_at = now

        self.raise_(
            ParticipantLeft(
                order_id=str(self.id),
                creator_id=str(self.creator_id),
                user_id=str(user_id),
                restored_amount=restored_amount,
                items=json.dumps(restored),
                left_at=now,
            )
        )

        return {"restored_amount": restored_amount, "restored_items": restored}

    def delete(self, requester_id, deleted_at=None) -> None:
        """Dissolve an open order. The repository removes the record afterwards."""
        self._assert_creator(requester_id, "Only the order creator can delete this order")
        if SharedOrderStatus(self.status) != SharedOrderStatus.OPEN:
            raise InvalidState("Can only delete open orders")

        now = deleted_at or datetime.now(UTC)
        member_ids = [str(p.user_id) for p in self.route_order()]
        restored = [
            {"user_id": str(i.user_id), "product_id": str(i.product_id), "quantity": i.quantity} for i in self.items
        ]

        for item in list(self.items):
            self.remove_items(item)
        for participant in list(self.participants):
            self.remove_participants(participant)

        self.current_participants = 0
        self.current_amount = 0.0
        self.updated_at = now

        self.raise_(
            SharedOrderDeleted(
                order_id=str(self.id),
                creator_id=str(self.creator_id),
                title=self.title,
                participant_user_ids=json.dumps(member_ids),
                items=json.dumps(restored),
                deleted_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def confirm(self, requester_id, confirmed_at=None) -> None:
        self._assert_creator(requester_id, "Only the order creator can confirm this order")
        self._assert_open("Can only confirm open orders")

        current = self.live_total()
        if current < self.min_order_amount:
            raise BelowMinimum(current=current, required=self.min_order_amount)

        self._assert_can_transition(SharedOrderStatus.CONFIRMED)
        now = confirmed_at or datetime.now(UTC)
        self.status = SharedOrderStatus.CONFIRMED.value
        self.current_amount = current
        self.current_participants = self.live_participant_count()
        self.estimated_delivery_time = now + timedelta(
            minutes=self.preparation_minutes if self.preparation_minutes is not None else DEFAULT_PREPARATION_MINUTES
        )
        self.updated_at = now

        self.raise_(
            SharedOrderConfirmed(
                order_id=str(self.id),
                creator_id=str(self.creator_id),
                participant_user_ids=json.dumps([str(p.user_id) for p in self.route_order()]),
                total_amount=current,
                estimated_delivery_time=self.estimated_delivery_time,
                confirmed_at=now,
            )
        )

    def dispatch(self, rider_id, rider_name, rider_phone=None, dispatched_at=None) -> list[dict]:
        """Hand the order to a rider and fix the delivery route.

        Stops follow join order. Each participant gets a 1-based
        ``delivery_order`` and an ETA ``STOP_INTERVAL`` apart.

        Returns:
            list of stop dicts: participant_id, user_id, address, sequence, estimated_arrival
        """
        self._assert_can_transition(SharedOrderStatus.OUT_FOR_DELIVERY)

        now = dispatched_at or datetime.now(UTC)
        stops = []
        for index, participant in enumerate(self.route_order()):
            eta = now + STOP_INTERVAL * (index + 1)
            participant.delivery_order = index + 1
            participant.estimated_arrival = eta
            stops.append(
                {
                    "participant_id": str(participant.id),
                    "user_id": str(participant.user_id),
                    "address": participant.delivery_address or self.delivery_address,
                    "sequence": index + 1,
                    "estimated_arrival": eta,
                }
            )

        self.status = SharedOrderStatus.OUT_FOR_DELIVERY.value
        self.rider = RiderDetails(rider_id=rider_id, name=rider_name, phone=rider_phone)
        self.delivery_start_time = now
        self.updated_at = now

        self.raise_(
            OrderOutForDelivery(
                order_id=str(self.id),
                rider_id=str(rider_id),
                rider_name=rider_name,
                rider_phone=rider_phone,
                participant_user_ids=json.dumps([stop["user_id"] for stop in stops]),
                stop_count=len(stops),
                delivery_start_time=now,
            )
        )

        return stops

    def complete_stop(self, participant_id, completed_at=None) -> bool:
        """Mark one participant delivered; returns True once everyone is."""
        if SharedOrderStatus(self.status) != SharedOrderStatus.OUT_FOR_DELIVERY:
            raise InvalidState("Order is not out for delivery")
        participant = self.participant_by_id(participant_id)
        if participant is None:
            raise NotFound("Participant not found in this order")
        if participant.is_delivered:
            raise InvalidState("Stop already completed")

        now = completed_at or datetime.now(UTC)
        participant.is_delivered = True
        participant.delivered_at = now
        self.updated_at = now

        self.raise_(
            ParticipantDelivered(
                order_id=str(self.id),
                participant_id=str(participant.id),
                user_id=str(participant.user_id),
                delivery_order=participant.delivery_order,
                delivered_at=now,
            )
        )

        if all(p.is_delivered for p in self.participants):
            self._assert_can_transition(SharedOrderStatus.DELIVERED)
            self.status = SharedOrderStatus.DELIVERED.value
            self.raise_(SharedOrderDelivered(order_id=str(self.id), delivered_at=now))
            return True
        return False
