"""Application service: Notification Dispatcher.

Fans lifecycle events out to the sessions that care about them: the
customer subscribed to a specific order's channel, and every operator
session subscribed to the operators channel.

Delivery is at-least-once.  A subscriber that raises is retried a few
times; if it still fails the failure is logged and dropped.  A failed
delivery never reaches the publisher, so notifications can never block or
roll back an order.  Receivers deduplicate by notification id (see
``NotificationInbox``).
"""

from __future__ import annotations

import itertools
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from selfdrop.domain.exceptions import DispatchFailureError
from selfdrop.domain.model.notification import Notification, NotificationType

logger = structlog.get_logger(__name__)

Subscriber = Callable[[Notification], Any]

OPERATORS = "operators"
ORDER = "order"


@dataclass(frozen=True)
class Channel:
    kind: str
    key: str = ""

    @staticmethod
    def for_order(order_id: int) -> Channel:
        return Channel(ORDER, str(order_id))

    @staticmethod
    def operators() -> Channel:
        return Channel(OPERATORS)

    def __str__(self) -> str:
        return f"{self.kind}:{self.key}" if self.key else self.kind


@dataclass(frozen=True)
class Subscription:
    id: int
    channel: Channel
    subscriber: Subscriber


@dataclass(frozen=True)
class NotificationEvent:
    """What a publisher hands the dispatcher; identity is assigned on publish."""

    type: NotificationType
    title: str
    message: str
    order_id: int | None = None
    payload: dict[str, Any] | None = None


class NotificationDispatcher:

    def __init__(self, max_attempts: int = 3) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscriptions: dict[Channel, dict[int, Subscription]] = {}

    # --- Subscriptions --------------------------------------------------------

    def subscribe(self, channel: Channel, subscriber: Subscriber) -> Subscription:
        with self._lock:
            subscription = Subscription(next(self._ids), channel, subscriber)
            self._subscriptions.setdefault(channel, {})[subscription.id] = subscription
        logger.debug("Subscribed", channel=str(channel), subscription_id=subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove *subscription*; unknown or repeated calls are ignored."""
        with self._lock:
            subscribers = self._subscriptions.get(subscription.channel)
            if subscribers is None:
                return
            subscribers.pop(subscription.id, None)
            if not subscribers:
                del self._subscriptions[subscription.channel]

    def subscriber_count(self, channel: Channel) -> int:
        with self._lock:
            return len(self._subscriptions.get(channel, {}))

    # --- Publishing -----------------------------------------------------------

    def publish(self, event: NotificationEvent) -> Notification:
        """Stamp *event* with an identity and deliver it."""
        notification = Notification(
            id=str(uuid.uuid4()),
            type=event.type,
            title=event.title,
            message=event.message,
            timestamp=datetime.now(timezone.utc),
            order_id=event.order_id,
            payload=event.payload,
        )
        self.redeliver(notification)
        return notification

    def redeliver(self, notification: Notification) -> int:
        """Deliver an already-stamped notification to current subscribers.

        Returns the number of subscribers that accepted it.
        """
        channels = [Channel.operators()]
        if notification.order_id is not None:
            channels.append(Channel.for_order(notification.order_id))

        with self._lock:
            targets = [
                subscription
                for channel in channels
                for subscription in self._subscriptions.get(channel, {}).values()
            ]

        delivered = sum(1 for sub in targets if self._deliver(sub, notification))
        logger.info(
            "Notification dispatched",
            notification_id=notification.id,
            type=notification.type.value,
            order_id=notification.order_id,
            delivered=delivered,
            subscribers=len(targets),
        )
        return delivered

    def _deliver(self, subscription: Subscription, notification: Notification) -> bool:
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                subscription.subscriber(notification)
                return True
            except Exception as exc:  # subscribers are arbitrary session callbacks
                last_error = exc
                logger.warning(
                    "Notification delivery failed, retrying",
                    notification_id=notification.id,
                    channel=str(subscription.channel),
                    attempt=attempt,
                    error=str(exc),
                )

        failure = DispatchFailureError(
            f"Notification {notification.id} not delivered to subscription "
            f"{subscription.id} after {self._max_attempts} attempts: {last_error}"
        )
        logger.error(
            "Notification dispatch failed",
            notification_id=notification.id,
            channel=str(subscription.channel),
            error=str(failure),
        )
        return False
