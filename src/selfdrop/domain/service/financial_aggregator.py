"""Domain service: Financial Aggregator.

Pure functions that derive the operator dashboard figures from the full set
of orders and expenses.  Nothing is cached here; every call re-derives the
numbers from its inputs.

Revenue is recognized only for COMPLETED orders.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from selfdrop.domain.model.expense import Expense, ExpenseCategory
from selfdrop.domain.model.order import Order, OrderStatus
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import PaymentMethod

ZERO = Decimal("0")


@dataclass(frozen=True)
class DistributionEntry:
    label: str
    value: Decimal


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    income: Decimal


@dataclass(frozen=True)
class FinancialStats:
    total_revenue: Decimal = ZERO
    delivery_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_profit: Decimal = ZERO
    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    cancelled_orders: int = 0
    order_distribution: list[DistributionEntry] = field(default_factory=list)
    category_distribution: list[DistributionEntry] = field(default_factory=list)
    payment_distribution: list[DistributionEntry] = field(default_factory=list)
    expense_distribution: list[DistributionEntry] = field(default_factory=list)
    daily_revenue: list[DailyRevenue] = field(default_factory=list)

    @property
    def profit_margin(self) -> Decimal:
        """Net profit as a percentage of revenue (0 without revenue)."""
        return percentage(self.net_profit, self.total_revenue)


def compute_stats(orders: Iterable[Order], expenses: Iterable[Expense]) -> FinancialStats:
    orders = list(orders)
    expenses = list(expenses)
    completed = [o for o in orders if o.is_revenue_recognized]

    total_revenue = sum((o.grand_total.amount for o in completed), ZERO)
    delivery_revenue = sum((o.delivery_charge.amount for o in completed), ZERO)
    total_expenses = sum((e.amount.amount for e in expenses), ZERO)

    status_counts = Counter(o.status for o in orders)

    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_payment: dict[PaymentMethod, Decimal] = defaultdict(lambda: ZERO)
    by_day: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for order in completed:
        for item in order.items:
            by_category[item.category] += item.line_total.amount
        by_payment[order.payment_method] += order.grand_total.amount
        completed_at = order.completed_at or order.created_at
        by_day[completed_at.date()] += order.grand_total.amount

    by_expense_category: dict[ExpenseCategory, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        by_expense_category[expense.category] += expense.amount.amount

    return FinancialStats(
        total_revenue=total_revenue,
        delivery_revenue=delivery_revenue,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
        total_orders=len(orders),
        pending_orders=sum(1 for o in orders if not o.status.is_terminal),
        completed_orders=status_counts[OrderStatus.COMPLETED],
        cancelled_orders=status_counts[OrderStatus.CANCELLED],
        order_distribution=_distribution(
            (s.value, Decimal(status_counts[s])) for s in OrderStatus
        ),
        category_distribution=_distribution(sorted(by_category.items())),
        payment_distribution=_distribution(
            (m.value, by_payment[m]) for m in PaymentMethod
        ),
        expense_distribution=_distribution(
            (c.value, by_expense_category[c]) for c in ExpenseCategory
        ),
        daily_revenue=[DailyRevenue(day, by_day[day]) for day in sorted(by_day)],
    )


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """*part* as a percentage of *whole*, rounded to 2 places; 0 if *whole* is 0."""
    if whole == ZERO:
        return ZERO
    return (Decimal(part) * 100 / Decimal(whole)).quantize(Decimal("0.01"))


def low_stock_products(products: Iterable[Product], threshold: int) -> list[Product]:
    """Products with stock at or below *threshold*, lowest stock first."""
    return sorted(
        (p for p in products if p.is_low_on_stock(threshold)),
        key=lambda p: (p.stock, p.name),
    )


def _distribution(pairs: Iterable[tuple[str, Decimal]]) -> list[DistributionEntry]:
    return [DistributionEntry(label, value) for label, value in pairs if value != ZERO]
