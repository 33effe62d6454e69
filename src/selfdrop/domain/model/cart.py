"""Cart aggregate — one shopper's in-progress selection.

A Cart belongs to a single session and is passed around explicitly; it is
cleared when an order is placed from it.  Prices are read live from the
catalog while the cart exists; the Order takes its own snapshot at checkout.
"""

from __future__ import annotations

from dataclasses import dataclass

from selfdrop.domain.exceptions import ValidationError
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import DeliveryLocation, Money
from selfdrop.domain.repository.catalog import Catalog
from selfdrop.domain.service.delivery_estimator import DeliveryEstimator


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValidationError("Cart line quantity must be at least 1")


@dataclass(frozen=True)
class _DeliveryQuote:
    location: DeliveryLocation
    free: bool
    charge: Money


class Cart:
    """Aggregate root for a shopping cart.

    Invariants:
    - every line has ``quantity >= 1``; driving a quantity to zero or below
      removes the line
    - product ids are unique across lines
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._lines: dict[str, CartLine] = {}
        self._delivery_location: DeliveryLocation | None = None
        self._quote: _DeliveryQuote | None = None

    # --- Line management ------------------------------------------------------

    def add_item(self, product: Product | None) -> None:
        """Add one unit of *product*; silently ignored without a product id."""
        if product is None or not product.id:
            return
        existing = self._lines.get(product.id)
        quantity = existing.quantity + 1 if existing else 1
        self._lines[product.id] = CartLine(product.id, quantity)

    def update_quantity(self, product_id: str, new_quantity: int) -> None:
        """Set a line's quantity.  Zero or less removes the line.

        Stock is not checked here; it is enforced when the order is placed.
        """
        if new_quantity <= 0:
            self.remove_item(product_id)
            return
        if product_id not in self._lines:
            return
        self._lines[product_id] = CartLine(product_id, new_quantity)

    def remove_item(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        """Empty the cart and forget the chosen delivery location."""
        self._lines.clear()
        self._delivery_location = None
        self._quote = None

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def subtotal(self) -> Money:
        """Sum of live catalog price x quantity over all lines.

        Lines whose product has left the catalog count as zero here; checkout
        rejects them.
        """
        total = Money.zero()
        for line in self._lines.values():
            product = self._catalog.get_product(line.product_id)
            if product is None:
                continue
            total = total + product.price * line.quantity
        return total

    def item_count(self) -> int:
        """Total units in the cart (not the number of lines)."""
        return sum(line.quantity for line in self._lines.values())

    # --- Delivery -------------------------------------------------------------

    @property
    def delivery_location(self) -> DeliveryLocation | None:
        return self._delivery_location

    @property
    def delivery_charge(self) -> Money | None:
        """The last quoted charge, or None if no quote has been made."""
        return self._quote.charge if self._quote else None

    def set_delivery_location(self, location: DeliveryLocation | None) -> None:
        if location != self._delivery_location:
            self._quote = None
        self._delivery_location = location

    def quote_delivery(self, estimator: DeliveryEstimator) -> Money:
        """Return the delivery charge for the current location and subtotal.

        The estimator is consulted again whenever the location changed or the
        subtotal moved across the free-delivery threshold since the last
        quote; otherwise the previous quote is reused.
        """
        if self._delivery_location is None:
            raise ValidationError("Choose a delivery location first")

        subtotal = self.subtotal()
        free = estimator.is_free(subtotal)
        quote = self._quote
        if quote is not None and quote.location == self._delivery_location and quote.free == free:
            return quote.charge

        charge = estimator.estimate(self._delivery_location, subtotal)
        self._quote = _DeliveryQuote(self._delivery_location, free, charge)
        return charge
