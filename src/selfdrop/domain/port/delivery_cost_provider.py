"""Port for the external delivery-cost collaborator."""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfdrop.domain.model.value_objects import DeliveryLocation, GeoPoint, Money


class DeliveryCostProvider(ABC):

    @abstractmethod
    def quote(self, origin: GeoPoint, destination: DeliveryLocation) -> Money:
        """Return the cost of delivering from *origin* to *destination*.

        Raises EstimationUnavailableError when no quote can be produced
        (timeout, destination unreachable from the origin, ...).
        """
