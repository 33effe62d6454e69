"""Application service: Set Stock use case."""

from __future__ import annotations

import structlog

from selfdrop.domain.exceptions import ValidationError
from selfdrop.domain.repository.catalog import Catalog

logger = structlog.get_logger(__name__)


class SetStockHandler:

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def handle(self, product_id: str, quantity: int) -> None:
        """Set the units in stock for a product (operator restock or count)."""
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        self._catalog.set_stock(product_id, quantity)
        logger.info("Stock set", product_id=product_id, stock=quantity)
