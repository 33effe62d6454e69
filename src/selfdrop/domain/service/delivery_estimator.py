"""Domain service: Delivery Estimator.

Turns a destination and a cart subtotal into a delivery charge.  Orders at
or above the free-delivery threshold ship for free; below it the external
provider is asked for a quote.  A failing provider never blocks checkout:
the configured flat charge is used instead.
"""

from __future__ import annotations

import structlog

from selfdrop.domain.exceptions import EstimationUnavailableError
from selfdrop.domain.model.value_objects import DeliveryLocation, GeoPoint, Money
from selfdrop.domain.port.delivery_cost_provider import DeliveryCostProvider

logger = structlog.get_logger(__name__)


class DeliveryEstimator:

    def __init__(
        self,
        provider: DeliveryCostProvider,
        origin: GeoPoint,
        free_delivery_threshold: Money,
        flat_charge: Money,
    ) -> None:
        self._provider = provider
        self._origin = origin
        self._free_delivery_threshold = free_delivery_threshold
        self._flat_charge = flat_charge

    @property
    def free_delivery_threshold(self) -> Money:
        return self._free_delivery_threshold

    def is_free(self, subtotal: Money) -> bool:
        """True when *subtotal* qualifies for free delivery (inclusive)."""
        return subtotal >= self._free_delivery_threshold

    def estimate(self, location: DeliveryLocation, subtotal: Money) -> Money:
        if self.is_free(subtotal):
            return Money.zero(subtotal.currency)

        try:
            charge = self._provider.quote(self._origin, location)
        except Exception as exc:  # any provider failure degrades to the flat charge
            logger.warning(
                "Delivery estimate unavailable, using flat charge",
                destination=str(location),
                flat_charge=str(self._flat_charge),
                error=str(exc),
                exc_info=not isinstance(exc, EstimationUnavailableError),
            )
            return self._flat_charge

        logger.debug(
            "Delivery estimated",
            destination=str(location),
            subtotal=str(subtotal),
            charge=str(charge),
        )
        return charge
