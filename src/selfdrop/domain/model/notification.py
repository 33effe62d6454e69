"""Notifications — lifecycle events as seen by a customer or operator.

``Notification`` is the message itself, including its wire form.
``NotificationInbox`` is the receiving side: delivery is at-least-once, so
the inbox applies each notification identity exactly once and ignores
redeliveries.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from selfdrop.domain.exceptions import ValidationError
from selfdrop.domain.model.order import OrderStatus


class NotificationType(Enum):
    ORDER_CREATED = "order_created"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_OUT_FOR_DELIVERY = "order_out_for_delivery"
    ORDER_DELIVERED = "order_delivered"
    ORDER_COMPLETED = "order_completed"
    ORDER_CANCELLED = "order_cancelled"
    LOW_STOCK = "low_stock"
    GENERAL = "general"

    @classmethod
    def for_status(cls, status: OrderStatus) -> NotificationType:
        return cls("order_" + status.value.lower())


@dataclass(frozen=True)
class Notification:
    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    order_id: int | None = None
    payload: dict[str, Any] | None = None
    read: bool = False

    # --- Wire format ----------------------------------------------------------

    def to_wire(self) -> dict[str, Any]:
        raw: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "read": self.read,
        }
        if self.order_id is not None:
            raw["orderId"] = str(self.order_id)
        if self.payload is not None:
            raw["payload"] = dict(self.payload)
        return raw

    @staticmethod
    def from_wire(raw: dict[str, Any]) -> Notification:
        try:
            order_id = raw.get("orderId")
            return Notification(
                id=str(raw["id"]),
                type=NotificationType(raw["type"]),
                title=raw["title"],
                message=raw["message"],
                timestamp=datetime.fromisoformat(raw["timestamp"]),
                order_id=int(order_id) if order_id is not None else None,
                payload=raw.get("payload"),
                read=bool(raw.get("read", False)),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise ValidationError(f"Malformed notification: {exc}") from exc


@dataclass
class NotificationInbox:
    """A recipient's notification list.

    Invariants:
    - a notification id is applied at most once, even after it was cleared
    - ``unread_count`` is always derived from the current list

    Applied ids are remembered for the life of the inbox, so ``_seen`` grows
    with every notification received.  Inboxes are per session; a new
    session starts with an empty one.
    """

    _items: dict[str, Notification] = field(default_factory=dict)
    _seen: set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def apply(self, notification: Notification) -> bool:
        """Add *notification*; returns False if its id was already applied."""
        with self._lock:
            if notification.id in self._seen:
                return False
            self._seen.add(notification.id)
            self._items[notification.id] = replace(notification, read=False)
            return True

    __call__ = apply

    @property
    def notifications(self) -> list[Notification]:
        """Newest first."""
        with self._lock:
            return sorted(self._items.values(), key=lambda n: n.timestamp, reverse=True)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._items.values() if not n.read)

    def mark_read(self, notification_id: str) -> None:
        with self._lock:
            existing = self._items.get(notification_id)
            if existing is not None:
                self._items[notification_id] = replace(existing, read=True)

    def mark_all_read(self) -> None:
        with self._lock:
            for key, existing in self._items.items():
                self._items[key] = replace(existing, read=True)

    def clear(self, notification_id: str) -> None:
        with self._lock:
            self._items.pop(notification_id, None)

    def clear_all(self) -> None:
        with self._lock:
            self._items.clear()
