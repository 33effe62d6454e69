"""Concurrency: racing transitions and checkouts stay consistent."""

import threading

from selfdrop.application.keyed_lock import KeyedLock
from selfdrop.application.notification_dispatcher import NotificationDispatcher
from selfdrop.application.order_lifecycle import OrderLifecycleMachine
from selfdrop.domain.exceptions import DomainException, InsufficientStockError
from selfdrop.domain.model.actor import Actor
from selfdrop.domain.model.cart import Cart
from selfdrop.domain.model.order import OrderStatus
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    GeoPoint,
    Money,
    PaymentMethod,
)
from selfdrop.domain.service.delivery_estimator import DeliveryEstimator
from tests.fakes import (
    FakeCatalog,
    FakeDeliveryCostProvider,
    FakeOrderRepository,
    FakePaymentProcessor,
)

THAMEL = DeliveryLocation("Thamel, Kathmandu", 27.7154, 85.3123)
THREADS = 8


def _setup(stock: int = 100) -> tuple[OrderLifecycleMachine, FakeOrderRepository, FakeCatalog]:
    order_repo = FakeOrderRepository()
    catalog = FakeCatalog([
        Product(id="momo", name="Momo", price=Money.of("400"), stock=stock),
    ])
    estimator = DeliveryEstimator(
        provider=FakeDeliveryCostProvider(charge="150"),
        origin=GeoPoint(27.7172, 85.3240),
        free_delivery_threshold=Money.of("2000"),
        flat_charge=Money.of("100"),
    )
    machine = OrderLifecycleMachine(
        order_repo, catalog, estimator, FakePaymentProcessor(), NotificationDispatcher()
    )
    return machine, order_repo, catalog


def _place(machine: OrderLifecycleMachine, catalog: FakeCatalog, customer: str, key: str):
    cart = Cart(catalog)
    cart.add_item(catalog.get_product("momo"))
    return machine.create(
        cart, THAMEL, PaymentMethod.CARD,
        actor=Actor.customer(customer), idempotency_key=key,
    )


def _run_all(target, count: int = THREADS) -> list[BaseException]:
    errors: list[BaseException] = []
    barrier = threading.Barrier(count)

    def worker(index: int) -> None:
        barrier.wait()
        try:
            target(index)
        except DomainException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


class TestConcurrentTransitions:

    def test_racing_confirms_record_one_change(self):
        machine, _, catalog = _setup()
        order = _place(machine, catalog, "alice", "k-1")
        operator = Actor.operator("op-1")

        errors = _run_all(lambda i: machine.transition(order.id, OrderStatus.CONFIRMED, operator))

        assert errors == []
        assert order.status == OrderStatus.CONFIRMED
        assert [c.status for c in order.history] == [OrderStatus.CREATED, OrderStatus.CONFIRMED]

    def test_racing_cancel_and_confirm_have_one_winner(self):
        machine, _, catalog = _setup()
        order = _place(machine, catalog, "alice", "k-1")
        operator = Actor.operator("op-1")
        customer = Actor.customer("alice")

        def race(index: int) -> None:
            if index % 2:
                machine.transition(order.id, OrderStatus.CONFIRMED, operator)
            else:
                machine.transition(order.id, OrderStatus.CANCELLED, customer)

        _run_all(race)

        assert order.status in (OrderStatus.CONFIRMED, OrderStatus.CANCELLED)
        assert len(order.history) == 2
        expected_stock = 100 if order.status is OrderStatus.CANCELLED else 99
        assert catalog.stock_of("momo") == expected_stock


class TestConcurrentCheckout:

    def test_same_idempotency_key_creates_one_order(self):
        machine, order_repo, catalog = _setup()
        results = []
        errors = _run_all(lambda i: results.append(_place(machine, catalog, "alice", "same-key")))

        assert errors == []
        assert len(order_repo.list_all()) == 1
        assert len({id(o) for o in results}) == 1
        assert catalog.stock_of("momo") == 99

    def test_last_unit_is_sold_once(self):
        machine, order_repo, catalog = _setup(stock=1)
        errors = _run_all(lambda i: _place(machine, catalog, f"customer-{i}", f"k-{i}"))

        assert len(order_repo.list_all()) == 1
        assert len(errors) == THREADS - 1
        assert all(isinstance(e, InsufficientStockError) for e in errors)
        assert catalog.stock_of("momo") == 0


def test_keyed_lock_forgets_released_keys():
    locks = KeyedLock()
    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0
