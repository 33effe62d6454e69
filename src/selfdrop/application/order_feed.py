"""Customer-side order list.

The server is the only authority on orders.  ``OrderFeed`` is a read-through
cache of one customer's orders: it loads from the repository on demand and
throws its copy away whenever a notification arrives, so it can never drift
from the authoritative state for longer than one event.
"""

from __future__ import annotations

import threading

from selfdrop.application.dto import OrderDTO
from selfdrop.domain.model.notification import Notification
from selfdrop.domain.repository.order_repository import OrderRepository


class OrderFeed:

    def __init__(self, order_repo: OrderRepository, customer_id: str) -> None:
        self._order_repo = order_repo
        self._customer_id = customer_id
        self._lock = threading.Lock()
        self._cached: list[OrderDTO] | None = None

    def orders(self) -> list[OrderDTO]:
        """This customer's orders, newest first."""
        with self._lock:
            if self._cached is None:
                orders = self._order_repo.list_by_customer(self._customer_id)
                orders.sort(key=lambda o: o.created_at, reverse=True)
                self._cached = [OrderDTO.from_order(o) for o in orders]
            return list(self._cached)

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None

    def __call__(self, notification: Notification) -> None:
        """Subscriber hook: any lifecycle event invalidates the cache."""
        self.invalidate()
