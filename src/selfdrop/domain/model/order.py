"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items and its status
history.  Line items and prices are captured once, at checkout, and never
change afterwards; the only mutation an Order accepts is a status
transition along the lifecycle graph:

    CREATED -> CONFIRMED -> OUT_FOR_DELIVERY -> DELIVERED -> COMPLETED
    CREATED | CONFIRMED -> CANCELLED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from selfdrop.domain.exceptions import InvalidTransitionError, ValidationError
from selfdrop.domain.model.actor import Actor, Role
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    Money,
    PaymentMethod,
    Quantity,
)


class OrderStatus(Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @classmethod
    def parse(cls, raw: str) -> OrderStatus:
        try:
            return cls(raw.strip().upper().replace("-", "_"))
        except ValueError as exc:
            raise ValidationError(f"Unknown order status '{raw}'") from exc


# ---------------------------------------------------------------------------
# Lifecycle graph
# ---------------------------------------------------------------------------
SUCCESSORS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Customers get a narrower cancellation window than operators.
CUSTOMER_CANCELLABLE = frozenset({OrderStatus.CREATED})

MAX_LINE_ITEMS = 50


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    category: str = "GENERAL"

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    """One entry of an order's audit trail."""

    status: OrderStatus
    timestamp: datetime
    actor_role: Role
    actor_id: str
    request_id: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    checkout rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: str
    items: tuple[OrderLineItem, ...]
    location: DeliveryLocation
    payment_method: PaymentMethod
    delivery_charge: Money
    idempotency_key: str
    payment_reference: str | None = None
    status: OrderStatus = OrderStatus.CREATED
    history: list[StatusChange] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        *,
        customer: Actor,
        items: list[OrderLineItem],
        location: DeliveryLocation | None,
        payment_method: PaymentMethod | None,
        delivery_charge: Money,
        idempotency_key: str,
    ) -> Order:
        """Create a new order in CREATED status, enforcing checkout rules."""
        Order.check_checkout(
            customer=customer,
            items=items,
            location=location,
            payment_method=payment_method,
            idempotency_key=idempotency_key,
        )

        order = Order(
            id=None,
            customer_id=customer.user_id,
            items=tuple(items),
            location=location,
            payment_method=payment_method,
            delivery_charge=delivery_charge,
            idempotency_key=idempotency_key.strip(),
        )
        order.history.append(
            StatusChange(
                status=OrderStatus.CREATED,
                timestamp=order.created_at,
                actor_role=customer.role,
                actor_id=customer.user_id,
            )
        )
        return order

    @staticmethod
    def check_checkout(
        *,
        customer: Actor,
        items: list[OrderLineItem],
        location: DeliveryLocation | None,
        payment_method: PaymentMethod | None,
        idempotency_key: str,
    ) -> None:
        """Raise ValidationError if an order could not be placed from these inputs."""
        if customer.role is not Role.CUSTOMER:
            raise ValidationError("Only customers can place orders")
        if not items:
            raise ValidationError("Cannot place an order from an empty cart")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        if location is None:
            raise ValidationError("A delivery location is required")
        if payment_method is None:
            raise ValidationError("A payment method is required")
        if not idempotency_key or not idempotency_key.strip():
            raise ValidationError("An idempotency key is required")

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        target: OrderStatus,
        actor: Actor,
        request_id: str | None = None,
    ) -> bool:
        """Move the order to *target* on behalf of *actor*.

        Returns False when the request is a repeat (the order is already at
        *target*, or *request_id* already moved it to *target*) and nothing
        changed.
        Raises InvalidTransitionError if the edge does not exist or the actor
        may not take it; the order is left untouched in that case.
        """
        if not self.check_transition(target, actor, request_id):
            return False

        # History stays monotonic even if the wall clock steps backwards.
        timestamp = datetime.now(timezone.utc)
        if self.history and timestamp < self.history[-1].timestamp:
            timestamp = self.history[-1].timestamp

        self.status = target
        self.history.append(
            StatusChange(
                status=target,
                timestamp=timestamp,
                actor_role=actor.role,
                actor_id=actor.user_id,
                request_id=request_id,
            )
        )
        return True

    def check_transition(
        self,
        target: OrderStatus,
        actor: Actor,
        request_id: str | None = None,
    ) -> bool:
        """Validate a transition without applying it.

        Same outcome as ``transition_to``: True if it would change the
        order, False for a repeat, InvalidTransitionError if illegal.
        """
        if actor.role is Role.CUSTOMER:
            self._check_customer_may_request(target, actor)

        if target is self.status:
            return False
        if request_id is not None and self.has_applied(request_id, target):
            return False

        if target not in SUCCESSORS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move order #{self.id} from {self.status.value} "
                f"to {target.value}"
            )
        if actor.role is Role.CUSTOMER and self.status not in CUSTOMER_CANCELLABLE:
            raise InvalidTransitionError(
                f"Order #{self.id} can no longer be cancelled by the customer "
                f"(status is {self.status.value})"
            )
        return True

    def _check_customer_may_request(self, target: OrderStatus, actor: Actor) -> None:
        if actor.user_id != self.customer_id:
            raise InvalidTransitionError(
                f"Order #{self.id} does not belong to customer '{actor.user_id}'"
            )
        if target is not OrderStatus.CANCELLED:
            raise InvalidTransitionError(
                f"Customers may only cancel orders, not move them to {target.value}"
            )

    def has_applied(self, request_id: str, target: OrderStatus) -> bool:
        """True if *request_id* already moved this order to *target*."""
        return any(
            change.request_id == request_id and change.status is target
            for change in self.history
        )

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero(self.delivery_charge.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def grand_total(self) -> Money:
        return self.subtotal + self.delivery_charge

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def is_revenue_recognized(self) -> bool:
        return self.status is OrderStatus.COMPLETED

    @property
    def completed_at(self) -> datetime | None:
        for change in reversed(self.history):
            if change.status is OrderStatus.COMPLETED:
                return change.timestamp
        return None
