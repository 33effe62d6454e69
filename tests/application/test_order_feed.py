"""Tests for the customer order feed and the order query handlers."""

from datetime import datetime, timedelta, timezone

import pytest

from selfdrop.application.order_feed import OrderFeed
from selfdrop.application.show_order import ListOrdersHandler, ShowOrderHandler
from selfdrop.domain.exceptions import EntityNotFoundError
from selfdrop.domain.model.actor import Actor
from selfdrop.domain.model.order import Order, OrderLineItem, OrderStatus
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    Money,
    PaymentMethod,
    Quantity,
)
from tests.fakes import FakeOrderRepository

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _save_order(repo: FakeOrderRepository, customer: str, key: str) -> Order:
    order = Order.create(
        customer=Actor.customer(customer),
        items=[
            OrderLineItem(
                product_id="momo",
                product_name="Momo",
                quantity=Quantity(2),
                unit_price=Money.of("400"),
            )
        ],
        location=DeliveryLocation("Thamel, Kathmandu", 27.7154, 85.3123, area="Thamel"),
        payment_method=PaymentMethod.ESEWA,
        delivery_charge=Money.of("150"),
        idempotency_key=key,
    )
    order.created_at = T0 + timedelta(minutes=len(repo.list_all()))
    repo.save(order)
    return order


class TestOrderFeed:

    def test_lists_only_the_customers_orders_newest_first(self):
        repo = FakeOrderRepository()
        first = _save_order(repo, "alice", "k-1")
        _save_order(repo, "bob", "k-2")
        second = _save_order(repo, "alice", "k-3")

        feed = OrderFeed(repo, "alice")

        assert [dto.id for dto in feed.orders()] == [second.id, first.id]

    def test_cached_until_invalidated(self):
        repo = FakeOrderRepository()
        _save_order(repo, "alice", "k-1")
        feed = OrderFeed(repo, "alice")
        assert len(feed.orders()) == 1

        _save_order(repo, "alice", "k-2")
        assert len(feed.orders()) == 1

        feed.invalidate()
        assert len(feed.orders()) == 2

    def test_notification_invalidates(self):
        repo = FakeOrderRepository()
        order = _save_order(repo, "alice", "k-1")
        feed = OrderFeed(repo, "alice")
        assert feed.orders()[0].status == "CREATED"

        order.transition_to(OrderStatus.CONFIRMED, Actor.operator("op-1"))
        feed(notification=None)

        assert feed.orders()[0].status == "CONFIRMED"


class TestShowOrder:

    def test_shows_formatted_order(self):
        repo = FakeOrderRepository()
        order = _save_order(repo, "alice", "k-1")
        dto = ShowOrderHandler(repo).handle(order.id)
        assert dto.subtotal == "Rs. 800.00"
        assert dto.delivery_charge == "Rs. 150.00"
        assert dto.grand_total == "Rs. 950.00"
        assert dto.location == "Thamel, Kathmandu (Thamel)"
        assert dto.history[0].actor == "customer:alice"

    def test_unknown_order(self):
        with pytest.raises(EntityNotFoundError, match="Order #42 not found"):
            ShowOrderHandler(FakeOrderRepository()).handle(42)


class TestListOrders:

    def test_filter_by_status(self):
        repo = FakeOrderRepository()
        confirmed = _save_order(repo, "alice", "k-1")
        _save_order(repo, "bob", "k-2")
        confirmed.transition_to(OrderStatus.CONFIRMED, Actor.operator("op-1"))

        dtos = ListOrdersHandler(repo).handle(status=OrderStatus.CONFIRMED)

        assert [dto.id for dto in dtos] == [confirmed.id]

    def test_filter_by_customer(self):
        repo = FakeOrderRepository()
        _save_order(repo, "alice", "k-1")
        _save_order(repo, "bob", "k-2")

        dtos = ListOrdersHandler(repo).handle(customer_id="bob")

        assert [dto.customer_id for dto in dtos] == ["bob"]
