"""Payment processor used when no gateway is configured.

Authorizes every request and hands back a reference derived from the
idempotency key, so a retried checkout maps onto the same authorization.
"""

from __future__ import annotations

import threading

import structlog

from selfdrop.domain.model.value_objects import Money, PaymentMethod
from selfdrop.domain.port.payment_processor import PaymentProcessor

logger = structlog.get_logger(__name__)


class OfflinePaymentProcessor(PaymentProcessor):

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._authorized: dict[str, str] = {}

    def authorize(self, method: PaymentMethod, amount: Money, idempotency_key: str) -> str:
        with self._lock:
            reference = self._authorized.get(idempotency_key)
            if reference is None:
                reference = f"{method.value.lower()}-{idempotency_key}"
                self._authorized[idempotency_key] = reference
                logger.info(
                    "Payment authorized",
                    method=method.value,
                    amount=str(amount),
                    reference=reference,
                )
        return reference
