"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from selfdrop.application.notification_dispatcher import NotificationDispatcher
from selfdrop.application.order_lifecycle import OrderLifecycleMachine
from selfdrop.domain.model.value_objects import GeoPoint, Money
from selfdrop.domain.service.delivery_estimator import DeliveryEstimator
from selfdrop.infrastructure.config import Settings
from selfdrop.infrastructure.delivery.distance_rate_provider import (
    DistanceRateProvider,
)
from selfdrop.infrastructure.payments.offline_payment_processor import (
    OfflinePaymentProcessor,
)
from selfdrop.infrastructure.persistence.json_catalog import JsonCatalog
from selfdrop.infrastructure.persistence.json_expense_repository import (
    JsonExpenseRepository,
)
from selfdrop.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


def catalog(settings: Settings) -> JsonCatalog:
    return JsonCatalog(settings.data_dir / "products.json")


def order_repository(settings: Settings) -> JsonOrderRepository:
    return JsonOrderRepository(settings.data_dir / "orders.json")


def expense_repository(settings: Settings) -> JsonExpenseRepository:
    return JsonExpenseRepository(settings.data_dir / "expenses.json")


def delivery_estimator(settings: Settings) -> DeliveryEstimator:
    currency = settings.currency
    provider = DistanceRateProvider(
        base_fee=Money(settings.delivery_base_fee, currency),
        rate_per_km=Money(settings.delivery_rate_per_km, currency),
        max_distance_km=settings.delivery_max_km,
    )
    return DeliveryEstimator(
        provider=provider,
        origin=GeoPoint(settings.origin_lat, settings.origin_lng),
        free_delivery_threshold=Money(settings.free_delivery_threshold, currency),
        flat_charge=Money(settings.flat_delivery_charge, currency),
    )


def notification_dispatcher(settings: Settings) -> NotificationDispatcher:
    return NotificationDispatcher(max_attempts=settings.dispatch_max_attempts)


def order_lifecycle(
    settings: Settings, dispatcher: NotificationDispatcher | None = None
) -> OrderLifecycleMachine:
    return OrderLifecycleMachine(
        order_repo=order_repository(settings),
        catalog=catalog(settings),
        estimator=delivery_estimator(settings),
        payments=OfflinePaymentProcessor(),
        dispatcher=dispatcher or notification_dispatcher(settings),
        low_stock_threshold=settings.low_stock_threshold,
    )
