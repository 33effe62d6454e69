"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from selfdrop.domain.model.order import Order


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the customer put in the cart (product id + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "Rs. 500.00"
    line_total: str


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    timestamp: str
    actor: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_id: str
    status: str
    items: list[OrderLineItemDTO]
    location: str
    payment_method: str
    subtotal: str
    delivery_charge: str
    grand_total: str
    created_at: str
    history: list[StatusChangeDTO]

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_id=order.customer_id,
            status=order.status.value,
            items=[
                OrderLineItemDTO(
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            location=str(order.location),
            payment_method=order.payment_method.value,
            subtotal=str(order.subtotal),
            delivery_charge=str(order.delivery_charge),
            grand_total=str(order.grand_total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            history=[
                StatusChangeDTO(
                    status=change.status.value,
                    timestamp=change.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"),
                    actor=f"{change.actor_role.value.lower()}:{change.actor_id}",
                )
                for change in order.history
            ],
        )
