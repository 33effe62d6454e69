"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from selfdrop.domain.model.actor import Role
from selfdrop.domain.model.order import Order, OrderLineItem, OrderStatus, StatusChange
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    Money,
    PaymentMethod,
    Quantity,
)
from selfdrop.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        with self._lock:
            orders = self._load_raw()
            if not orders:
                return 1
            return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, key: str) -> Order | None:
        for raw in self._load_raw():
            if raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "idempotency_key": order.idempotency_key,
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "category": item.category,
                    "unit_price_at_order": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                    "quantity": item.quantity.value,
                }
                for item in order.items
            ],
            "location": {
                "address": order.location.address,
                "lat": order.location.latitude,
                "lng": order.location.longitude,
                "area": order.location.area,
            },
            "payment_method": order.payment_method.value,
            "payment_reference": order.payment_reference,
            # Written for consumers; recomputed from items on load.
            "subtotal": str(order.subtotal.amount),
            "delivery_charge": str(order.delivery_charge.amount),
            "grand_total": str(order.grand_total.amount),
            "currency": order.delivery_charge.currency,
            "status": order.status.value,
            "history": [
                {
                    "status": change.status.value,
                    "timestamp": change.timestamp.isoformat(),
                    "actor": change.actor_role.value,
                    "actor_id": change.actor_id,
                    "request_id": change.request_id,
                }
                for change in order.history
            ],
            "created_at": order.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "NPR")
        items = tuple(
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price_at_order"]), i.get("currency", currency)),
                category=i.get("category", "GENERAL"),
            )
            for i in raw["items"]
        )
        loc = raw["location"]
        return Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            items=items,
            location=DeliveryLocation(
                address=loc["address"],
                latitude=loc["lat"],
                longitude=loc["lng"],
                area=loc.get("area"),
            ),
            payment_method=PaymentMethod(raw["payment_method"]),
            delivery_charge=Money(Decimal(raw["delivery_charge"]), currency),
            idempotency_key=raw["idempotency_key"],
            payment_reference=raw.get("payment_reference"),
            status=OrderStatus(raw["status"]),
            history=[
                StatusChange(
                    status=OrderStatus(h["status"]),
                    timestamp=datetime.fromisoformat(h["timestamp"]),
                    actor_role=Role(h["actor"]),
                    actor_id=h["actor_id"],
                    request_id=h.get("request_id"),
                )
                for h in raw.get("history", [])
            ],
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
