"""Domain service: Stock Reservation.

This service coordinates the cross-aggregate operation of reserving or
releasing catalog stock for an order's lines.  It lives in the domain layer
because the all-or-nothing rule is a core business rule, not just
orchestration.

Each line is reserved through the catalog's atomic decrement.  If any line
fails, the lines already reserved are released again before the error
propagates, so stock is never left partially reserved.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from selfdrop.domain.exceptions import DomainException
from selfdrop.domain.model.order import Order, OrderLineItem
from selfdrop.domain.repository.catalog import Catalog

logger = structlog.get_logger(__name__)


class StockReservationService:

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def reserve_for_items(self, items: Iterable[OrderLineItem]) -> None:
        """Reserve stock for every line, or for none of them."""
        reserved: list[OrderLineItem] = []
        try:
            for line in items:
                self._catalog.reserve_stock(line.product_id, line.quantity.value)
                reserved.append(line)
        except DomainException:
            self.release_items(reserved)
            raise

    def release_items(self, items: Iterable[OrderLineItem]) -> None:
        for line in items:
            self._catalog.release_stock(line.product_id, line.quantity.value)

    def release_for_order(self, order: Order) -> None:
        """Give back everything the order reserved (compensating action)."""
        self.release_items(order.items)
        logger.info(
            "Stock released for order",
            order_id=order.id,
            units=order.item_count,
        )
