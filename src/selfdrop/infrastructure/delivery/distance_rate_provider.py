"""Distance-based delivery-cost provider.

Charges a base fee plus a per-kilometre rate over the great-circle distance
from the fulfillment origin, rounded up to whole currency units.  Destinations
beyond the service radius cannot be served and produce no quote.
"""

from __future__ import annotations

import math
from decimal import ROUND_CEILING, Decimal

from selfdrop.domain.exceptions import EstimationUnavailableError
from selfdrop.domain.model.value_objects import DeliveryLocation, GeoPoint, Money
from selfdrop.domain.port.delivery_cost_provider import DeliveryCostProvider

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class DistanceRateProvider(DeliveryCostProvider):

    def __init__(self, base_fee: Money, rate_per_km: Money, max_distance_km: float) -> None:
        self._base_fee = base_fee
        self._rate_per_km = rate_per_km
        self._max_distance_km = max_distance_km

    def quote(self, origin: GeoPoint, destination: DeliveryLocation) -> Money:
        distance = haversine_km(
            origin.latitude, origin.longitude, destination.latitude, destination.longitude
        )
        if distance > self._max_distance_km:
            raise EstimationUnavailableError(
                f"{destination} is {distance:.1f} km away, beyond the "
                f"{self._max_distance_km:g} km service radius"
            )
        variable = self._rate_per_km.amount * Decimal(str(distance))
        amount = (self._base_fee.amount + variable).quantize(Decimal("1"), rounding=ROUND_CEILING)
        return Money(amount, self._base_fee.currency)
