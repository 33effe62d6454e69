"""Port for the external payment collaborator.

Only authorization is in scope: the processor is told how much to hold
for which method and hands back an opaque reference.  Capture and
settlement happen elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfdrop.domain.model.value_objects import Money, PaymentMethod


class PaymentProcessor(ABC):

    @abstractmethod
    def authorize(
        self, method: PaymentMethod, amount: Money, idempotency_key: str
    ) -> str:
        """Authorize *amount* and return the processor's reference.

        Calling again with the same *idempotency_key* must not authorize
        twice.  Raises PaymentDeclinedError if the payment is refused.
        """
