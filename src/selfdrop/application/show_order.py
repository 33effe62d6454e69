"""Application service: order queries (read side)."""

from __future__ import annotations

from selfdrop.application.dto import OrderDTO
from selfdrop.domain.exceptions import EntityNotFoundError
from selfdrop.domain.model.order import OrderStatus
from selfdrop.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return OrderDTO.from_order(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        status: OrderStatus | None = None,
        customer_id: str | None = None,
    ) -> list[OrderDTO]:
        """Newest first, optionally filtered by status and/or customer."""
        if customer_id is not None:
            orders = self._order_repo.list_by_customer(customer_id)
        else:
            orders = self._order_repo.list_all()
        if status is not None:
            orders = [o for o in orders if o.status is status]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [OrderDTO.from_order(o) for o in orders]
