"""Application service: Order Lifecycle Machine.

Owns the two state-changing entry points for orders:

* ``create()`` turns a customer's cart into a persisted CREATED order,
  reserving stock and authorizing payment on the way.  Either everything
  succeeds or nothing is persisted.
* ``transition()`` moves an existing order one step along the lifecycle
  graph, releasing stock on cancellation.

Both are serialized (per idempotency key and per order id respectively) and
both are safe to retry: a repeated ``create()`` with the same idempotency
key returns the original order, and a repeated ``transition()`` to the
status the order is already in is a no-op.
"""

from __future__ import annotations

import structlog

from selfdrop.application.keyed_lock import KeyedLock
from selfdrop.application.notification_dispatcher import (
    NotificationDispatcher,
    NotificationEvent,
)
from selfdrop.domain.exceptions import (
    EntityNotFoundError,
    InvalidTransitionError,
    PaymentDeclinedError,
    ValidationError,
)
from selfdrop.domain.model.actor import Actor
from selfdrop.domain.model.cart import Cart
from selfdrop.domain.model.notification import NotificationType
from selfdrop.domain.model.order import Order, OrderLineItem, OrderStatus
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    PaymentMethod,
    Quantity,
)
from selfdrop.domain.port.payment_processor import PaymentProcessor
from selfdrop.domain.repository.catalog import Catalog
from selfdrop.domain.repository.order_repository import OrderRepository
from selfdrop.domain.service.delivery_estimator import DeliveryEstimator
from selfdrop.domain.service.financial_aggregator import low_stock_products
from selfdrop.domain.service.stock_reservation_service import (
    StockReservationService,
)

logger = structlog.get_logger(__name__)

_STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: ("Order Confirmed", "Order #{id} has been confirmed"),
    OrderStatus.OUT_FOR_DELIVERY: ("Out for Delivery", "Order #{id} is on its way"),
    OrderStatus.DELIVERED: ("Order Delivered", "Order #{id} has been delivered"),
    OrderStatus.COMPLETED: ("Order Completed", "Order #{id} is complete"),
    OrderStatus.CANCELLED: ("Order Cancelled", "Order #{id} has been cancelled"),
}


class OrderLifecycleMachine:

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: Catalog,
        estimator: DeliveryEstimator,
        payments: PaymentProcessor,
        dispatcher: NotificationDispatcher,
        low_stock_threshold: int | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._catalog = catalog
        self._estimator = estimator
        self._payments = payments
        self._dispatcher = dispatcher
        self._low_stock_threshold = low_stock_threshold
        self._stock = StockReservationService(catalog)
        self._creation_locks = KeyedLock()
        self._order_locks = KeyedLock()

    # --- Creation -------------------------------------------------------------

    def create(
        self,
        cart: Cart,
        location: DeliveryLocation | None,
        payment_method: PaymentMethod | None,
        *,
        actor: Actor,
        idempotency_key: str,
    ) -> Order:
        """Place an order from *cart*.

        Steps:
        1. Replay: an order already placed with this key is returned as is.
        2. Snapshot current catalog prices into order lines.
        3. Quote delivery for *location* and build the Order (validates).
        4. Reserve stock for every line (all or nothing).
        5. Authorize payment; release stock if it is declined.
        6. Persist, clear the cart, notify customer and operators.
        7. Alert operators about products this order left low on stock.
        """
        if not idempotency_key or not idempotency_key.strip():
            raise ValidationError("An idempotency key is required")
        key = idempotency_key.strip()

        with self._creation_locks.hold(key):
            existing = self._order_repo.get_by_idempotency_key(key)
            if existing is not None:
                logger.info(
                    "Order creation replayed",
                    order_id=existing.id,
                    idempotency_key=key,
                )
                return existing

            if cart.is_empty:
                raise ValidationError("Cannot place an order from an empty cart")

            items = self._snapshot(cart)
            Order.check_checkout(
                customer=actor,
                items=items,
                location=location,
                payment_method=payment_method,
                idempotency_key=key,
            )
            cart.set_delivery_location(location)
            charge = cart.quote_delivery(self._estimator)

            order = Order.create(
                customer=actor,
                items=items,
                location=location,
                payment_method=payment_method,
                delivery_charge=charge,
                idempotency_key=key,
            )

            self._stock.reserve_for_items(order.items)
            try:
                order.payment_reference = self._payments.authorize(
                    order.payment_method, order.grand_total, key
                )
                self._order_repo.save(order)
            except PaymentDeclinedError:
                self._stock.release_items(order.items)
                logger.warning(
                    "Payment declined, order not placed",
                    customer_id=actor.user_id,
                    amount=str(order.grand_total),
                )
                raise
            except Exception:
                self._stock.release_items(order.items)
                raise

            cart.clear()
            logger.info(
                "Order created",
                order_id=order.id,
                customer_id=order.customer_id,
                grand_total=str(order.grand_total),
                payment_method=order.payment_method.value,
            )
            low_stock = self._low_stock_after(order)

        self._dispatcher.publish(
            NotificationEvent(
                type=NotificationType.ORDER_CREATED,
                title="New Order",
                message=f"Order #{order.id} placed for {order.grand_total}",
                order_id=order.id,
                payload={"status": order.status.value, "grandTotal": str(order.grand_total.amount)},
            )
        )
        for product in low_stock:
            self._dispatcher.publish(
                NotificationEvent(
                    type=NotificationType.LOW_STOCK,
                    title="Low Stock",
                    message=f"{product.name} is running low ({product.stock} left)",
                    payload={"productId": product.id, "stock": product.stock},
                )
            )
        return order

    def _low_stock_after(self, order: Order) -> list[Product]:
        if self._low_stock_threshold is None:
            return []
        ids = dict.fromkeys(item.product_id for item in order.items)
        products = [self._catalog.get_product(product_id) for product_id in ids]
        return low_stock_products(
            (p for p in products if p is not None), self._low_stock_threshold
        )

    def _snapshot(self, cart: Cart) -> list[OrderLineItem]:
        items: list[OrderLineItem] = []
        for line in cart.lines:
            product = self._catalog.get_product(line.product_id)
            if product is None:
                raise ValidationError(
                    f"Product '{line.product_id}' is no longer available"
                )
            items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(line.quantity),
                    unit_price=product.price,  # <-- price snapshot
                    category=product.category,
                )
            )
        return items

    # --- Transitions ----------------------------------------------------------

    def transition(
        self,
        order_id: int,
        target: OrderStatus,
        actor: Actor,
        request_id: str | None = None,
    ) -> Order:
        """Move order *order_id* to *target* on behalf of *actor*.

        A request for the status the order is already in (or a retry of a
        *request_id* that already moved it there) succeeds without changing
        anything.  If the save fails, a cancellation takes its stock back.
        """
        with self._order_locks.hold(order_id):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            try:
                changed = order.check_transition(target, actor, request_id)
            except InvalidTransitionError as exc:
                logger.warning(
                    "Order transition rejected",
                    order_id=order_id,
                    current=previous.value,
                    target=target.value,
                    actor=actor.user_id,
                    role=actor.role.value,
                    reason=str(exc),
                )
                raise

            if not changed:
                logger.info(
                    "Order transition already applied",
                    order_id=order_id,
                    status=previous.value,
                    request_id=request_id,
                )
                return order

            cancelling = target is OrderStatus.CANCELLED
            # Release reserved stock before the cancellation is recorded.
            if cancelling:
                self._stock.release_for_order(order)

            applied = len(order.history)
            try:
                order.transition_to(target, actor, request_id)
                self._order_repo.save(order)
            except Exception:
                # Not persisted: undo the status change and take the stock back.
                order.status = previous
                del order.history[applied:]
                if cancelling:
                    self._stock.reserve_for_items(order.items)
                raise
            logger.info(
                "Order transitioned",
                order_id=order_id,
                previous=previous.value,
                status=target.value,
                actor=actor.user_id,
                role=actor.role.value,
            )

            title, message = _STATUS_MESSAGES[target]
            self._dispatcher.publish(
                NotificationEvent(
                    type=NotificationType.for_status(target),
                    title=title,
                    message=message.format(id=order.id),
                    order_id=order.id,
                    payload={"status": target.value, "previous": previous.value},
                )
            )
        return order
