"""JSON-file-backed implementation of Catalog.

Every stock mutation reads, checks and writes the file under one lock, so
a reservation can never be computed from a stale count.
"""

from __future__ import annotations

import json
import threading
from decimal import Decimal
from pathlib import Path

from selfdrop.domain.exceptions import EntityNotFoundError
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import Money
from selfdrop.domain.repository.catalog import Catalog


class JsonCatalog(Catalog):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    # --- Catalog interface ----------------------------------------------------

    def get_product(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def list_products(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._lock:
            products = self._load()
            products[product.id] = product
            self._persist(products)

    def reserve_stock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            products = self._load()
            self._require(products, product_id).take_stock(quantity)
            self._persist(products)

    def release_stock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            products = self._load()
            self._require(products, product_id).return_stock(quantity)
            self._persist(products)

    def set_stock(self, product_id: str, quantity: int) -> None:
        with self._lock:
            products = self._load()
            self._require(products, product_id).stock = quantity
            self._persist(products)

    @staticmethod
    def _require(products: dict[str, Product], product_id: str) -> Product:
        product = products.get(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        return product

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        with self._lock:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {
            item["id"]: Product(
                id=item["id"],
                name=item["name"],
                price=Money(Decimal(item["price"]), item.get("currency", "NPR")),
                category=item.get("category", "GENERAL"),
                stock=item.get("stock", 0),
            )
            for item in raw
        }

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [
            {
                "id": p.id,
                "name": p.name,
                "price": str(p.price.amount),
                "currency": p.price.currency,
                "category": p.category,
                "stock": p.stock,
            }
            for p in products.values()
        ]
        self._file_path.write_text(
            json.dumps(raw, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
