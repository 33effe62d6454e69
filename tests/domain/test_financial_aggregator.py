"""Unit tests for the financial aggregator (operator dashboard figures)."""

from decimal import Decimal

from selfdrop.domain.model.actor import Actor
from selfdrop.domain.model.expense import Expense, ExpenseCategory
from selfdrop.domain.model.order import Order, OrderLineItem, OrderStatus
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import (
    DeliveryLocation,
    Money,
    PaymentMethod,
    Quantity,
)
from selfdrop.domain.service.financial_aggregator import (
    FinancialStats,
    compute_stats,
    low_stock_products,
    percentage,
)

OPERATOR = Actor.operator("op-1")
PATH_TO_COMPLETED = (
    OrderStatus.CONFIRMED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
)


def _order(
    order_id: int,
    price: str,
    *,
    charge: str = "0",
    category: str = "FOOD",
    method: PaymentMethod = PaymentMethod.ESEWA,
    path: tuple[OrderStatus, ...] = (),
) -> Order:
    order = Order.create(
        customer=Actor.customer("alice"),
        items=[
            OrderLineItem(
                product_id="p",
                product_name="Product",
                quantity=Quantity(1),
                unit_price=Money.of(price),
                category=category,
            )
        ],
        location=DeliveryLocation("Thamel", 27.7154, 85.3123),
        payment_method=method,
        delivery_charge=Money.of(charge),
        idempotency_key=f"key-{order_id}",
    )
    order.id = order_id
    for status in path:
        order.transition_to(status, OPERATOR)
    return order


def _labels(entries) -> dict[str, Decimal]:
    return {e.label: e.value for e in entries}


class TestRevenueRecognition:

    def test_only_completed_orders_count(self):
        completed = _order(1, "2200", charge="150", path=PATH_TO_COMPLETED)
        pending = _order(2, "5000")
        cancelled = _order(3, "800", path=(OrderStatus.CANCELLED,))

        stats = compute_stats([completed, pending, cancelled], [])

        assert stats.total_revenue == Decimal("2350")
        assert stats.delivery_revenue == Decimal("150")
        assert stats.total_orders == 3
        assert stats.pending_orders == 1
        assert stats.completed_orders == 1
        assert stats.cancelled_orders == 1

    def test_cancelled_order_contributes_nothing(self):
        cancelled = _order(1, "5000", path=(OrderStatus.CANCELLED,))
        completed = _order(2, "5000", path=PATH_TO_COMPLETED)
        assert compute_stats([cancelled], []).total_revenue == Decimal("0")
        assert compute_stats([completed], []).total_revenue == Decimal("5000")

    def test_delivered_but_not_completed_is_excluded(self):
        delivered = _order(1, "5000", path=PATH_TO_COMPLETED[:-1])
        stats = compute_stats([delivered], [])
        assert stats.total_revenue == Decimal("0")
        assert stats.daily_revenue == []

    def test_net_profit_can_be_negative(self):
        completed = _order(1, "1000", path=PATH_TO_COMPLETED)
        expenses = [Expense(1, "Fuel", Money.of("1500"), ExpenseCategory.FUEL)]
        stats = compute_stats([completed], expenses)
        assert stats.total_expenses == Decimal("1500")
        assert stats.net_profit == Decimal("-500")
        assert stats.profit_margin == Decimal("-50.00")


class TestDistributions:

    def test_category_and_payment_distributions(self):
        orders = [
            _order(1, "1000", category="FOOD", method=PaymentMethod.ESEWA, path=PATH_TO_COMPLETED),
            _order(2, "300", category="DRINKS", method=PaymentMethod.CARD, path=PATH_TO_COMPLETED),
            _order(3, "700", category="FOOD", method=PaymentMethod.ESEWA, path=PATH_TO_COMPLETED),
            _order(4, "9999", category="DESSERT", method=PaymentMethod.KHALTI),
        ]
        stats = compute_stats(orders, [])

        assert _labels(stats.category_distribution) == {
            "DRINKS": Decimal("300"),
            "FOOD": Decimal("1700"),
        }
        assert _labels(stats.payment_distribution) == {
            "ESEWA": Decimal("1700"),
            "CARD": Decimal("300"),
        }

    def test_order_distribution_counts_every_status(self):
        orders = [
            _order(1, "100"),
            _order(2, "100"),
            _order(3, "100", path=(OrderStatus.CONFIRMED,)),
        ]
        stats = compute_stats(orders, [])
        assert _labels(stats.order_distribution) == {
            "CREATED": Decimal("2"),
            "CONFIRMED": Decimal("1"),
        }

    def test_expense_distribution(self):
        expenses = [
            Expense(1, "Diesel", Money.of("500"), ExpenseCategory.FUEL),
            Expense(2, "Boxes", Money.of("200"), ExpenseCategory.PACKAGING),
            Expense(3, "Petrol", Money.of("300"), ExpenseCategory.FUEL),
        ]
        stats = compute_stats([], expenses)
        assert _labels(stats.expense_distribution) == {
            "FUEL": Decimal("800"),
            "PACKAGING": Decimal("200"),
        }

    def test_daily_revenue_keyed_by_completion_day(self):
        order = _order(1, "1200", path=PATH_TO_COMPLETED)
        stats = compute_stats([order], [])
        assert len(stats.daily_revenue) == 1
        assert stats.daily_revenue[0].day == order.completed_at.date()
        assert stats.daily_revenue[0].income == Decimal("1200")


class TestEmptyInputs:

    def test_no_orders_no_expenses(self):
        stats = compute_stats([], [])
        assert stats == FinancialStats()
        assert stats.profit_margin == Decimal("0")

    def test_percentage_of_zero_is_zero(self):
        assert percentage(Decimal("5"), Decimal("0")) == Decimal("0")

    def test_percentage_rounds_to_two_places(self):
        assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.33")


def test_low_stock_products_sorted_by_stock_then_name():
    products = [
        Product(id="1", name="Momo", price=Money.of("400"), stock=3),
        Product(id="2", name="Lassi", price=Money.of("150"), stock=3),
        Product(id="3", name="Chowmein", price=Money.of("500"), stock=40),
        Product(id="4", name="Kheer", price=Money.of("250"), stock=0),
    ]
    assert [p.name for p in low_stock_products(products, 5)] == ["Kheer", "Lassi", "Momo"]
