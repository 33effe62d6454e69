"""Product — the catalog's view of something that can be sold.

Products are owned by the catalog.  The ordering core reads them (live
prices while a cart is being built, price snapshot at checkout) and only
ever changes ``stock`` through the catalog's atomic reserve/release calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from selfdrop.domain.exceptions import InsufficientStockError, ValidationError
from selfdrop.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Invariants:
    - ``stock`` is never negative
    """

    id: str
    name: str
    price: Money
    category: str = "GENERAL"
    stock: int = 0

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(f"Stock for {self.name} cannot be negative")

    def take_stock(self, quantity: int) -> None:
        """Decrement stock for a reservation.

        Raises InsufficientStockError if fewer than *quantity* units remain.
        """
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.stock:
            raise InsufficientStockError(self.id, quantity, self.stock)
        self.stock -= quantity

    def return_stock(self, quantity: int) -> None:
        """Put previously reserved units back (e.g. on order cancellation)."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.stock += quantity

    def is_low_on_stock(self, threshold: int) -> bool:
        return self.stock <= threshold
