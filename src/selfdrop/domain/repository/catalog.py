"""Abstract catalog — the product collaborator the ordering core consumes.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer.

``reserve_stock`` and ``release_stock`` are the only writes the core
performs against the catalog.  Implementations must make each of them an
atomic check-and-decrement / increment so concurrent checkouts can never
oversell a product.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfdrop.domain.model.product import Product


class Catalog(ABC):

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def reserve_stock(self, product_id: str, quantity: int) -> None:
        """Atomically take *quantity* units out of stock.

        Raises InsufficientStockError if not enough units are available and
        EntityNotFoundError for an unknown product.
        """

    @abstractmethod
    def release_stock(self, product_id: str, quantity: int) -> None:
        """Atomically put *quantity* units back into stock."""

    @abstractmethod
    def set_stock(self, product_id: str, quantity: int) -> None:
        """Atomically overwrite the stock count (operator restock)."""
