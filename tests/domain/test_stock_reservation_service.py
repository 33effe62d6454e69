"""Unit tests for the StockReservationService domain service."""

import pytest

from selfdrop.domain.exceptions import EntityNotFoundError, InsufficientStockError
from selfdrop.domain.model.order import OrderLineItem
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import Money, Quantity
from selfdrop.domain.service.stock_reservation_service import StockReservationService
from tests.fakes import FakeCatalog


def _line(product_id: str, qty: int) -> OrderLineItem:
    return OrderLineItem(
        product_id=product_id,
        product_name=product_id.title(),
        quantity=Quantity(qty),
        unit_price=Money.of("100"),
    )


def _setup() -> tuple[StockReservationService, FakeCatalog]:
    catalog = FakeCatalog([
        Product(id="momo", name="Momo", price=Money.of("400"), stock=5),
        Product(id="lassi", name="Lassi", price=Money.of("150"), stock=1),
    ])
    return StockReservationService(catalog), catalog


class TestReserve:

    def test_reserves_every_line(self):
        service, catalog = _setup()
        service.reserve_for_items([_line("momo", 3), _line("lassi", 1)])
        assert catalog.stock_of("momo") == 2
        assert catalog.stock_of("lassi") == 0

    def test_all_or_nothing_on_insufficient_stock(self):
        service, catalog = _setup()
        with pytest.raises(InsufficientStockError, match="lassi"):
            service.reserve_for_items([_line("momo", 3), _line("lassi", 2)])
        assert catalog.stock_of("momo") == 5
        assert catalog.stock_of("lassi") == 1

    def test_unknown_product_rolls_back(self):
        service, catalog = _setup()
        with pytest.raises(EntityNotFoundError):
            service.reserve_for_items([_line("momo", 2), _line("ghost", 1)])
        assert catalog.stock_of("momo") == 5


class TestRelease:

    def test_release_returns_stock(self):
        service, catalog = _setup()
        lines = [_line("momo", 4)]
        service.reserve_for_items(lines)
        service.release_items(lines)
        assert catalog.stock_of("momo") == 5
