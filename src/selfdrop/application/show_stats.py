"""Application service: Show Stats use case (query).

Loads the current orders, expenses and products and hands them to the pure
financial aggregator.  Nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from selfdrop.domain.model.product import Product
from selfdrop.domain.repository.catalog import Catalog
from selfdrop.domain.repository.expense_repository import ExpenseRepository
from selfdrop.domain.repository.order_repository import OrderRepository
from selfdrop.domain.service.financial_aggregator import (
    FinancialStats,
    compute_stats,
    low_stock_products,
)


@dataclass(frozen=True)
class DashboardDTO:
    stats: FinancialStats
    low_stock: list[Product]


class ShowStatsHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        expense_repo: ExpenseRepository,
        catalog: Catalog,
    ) -> None:
        self._order_repo = order_repo
        self._expense_repo = expense_repo
        self._catalog = catalog

    def handle(self, low_stock_threshold: int) -> DashboardDTO:
        stats = compute_stats(self._order_repo.list_all(), self._expense_repo.list_all())
        low_stock = low_stock_products(self._catalog.list_products(), low_stock_threshold)
        return DashboardDTO(stats=stats, low_stock=low_stock)
