"""Tests for the expense ledger, restocking, and the stats dashboard."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from selfdrop.application.record_expense import ListExpensesHandler, RecordExpenseHandler
from selfdrop.application.set_stock import SetStockHandler
from selfdrop.application.show_stats import ShowStatsHandler
from selfdrop.domain.exceptions import EntityNotFoundError, ValidationError
from selfdrop.domain.model.expense import Expense, ExpenseCategory
from selfdrop.domain.model.product import Product
from selfdrop.domain.model.value_objects import Money
from tests.fakes import FakeCatalog, FakeExpenseRepository, FakeOrderRepository

T0 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class TestRecordExpense:

    def test_records_expense(self):
        repo = FakeExpenseRepository()
        expense = RecordExpenseHandler(repo).handle("Diesel", "1500.50", "fuel", "Van refill")
        assert expense.id == 1
        assert expense.amount == Money.of("1500.50")
        assert expense.category == ExpenseCategory.FUEL
        assert repo.list_all() == [expense]

    def test_default_category_is_others(self):
        expense = RecordExpenseHandler(FakeExpenseRepository()).handle("Misc", "10")
        assert expense.category == ExpenseCategory.OTHERS

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="title is required"):
            RecordExpenseHandler(FakeExpenseRepository()).handle("  ", "10")

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError, match="Unknown expense category"):
            RecordExpenseHandler(FakeExpenseRepository()).handle("Rent", "10", "RENT")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            RecordExpenseHandler(FakeExpenseRepository()).handle("Refund", "-10")

    def test_list_is_newest_first(self):
        repo = FakeExpenseRepository()
        repo.add(Expense(1, "First", Money.of("10"), created_at=T0))
        repo.add(Expense(2, "Second", Money.of("20"), created_at=T0 + timedelta(hours=1)))
        titles = [e.title for e in ListExpensesHandler(repo).handle()]
        assert titles == ["Second", "First"]


class TestSetStock:

    def test_sets_stock(self):
        catalog = FakeCatalog([Product(id="momo", name="Momo", price=Money.of("400"), stock=2)])
        SetStockHandler(catalog).handle("momo", 40)
        assert catalog.stock_of("momo") == 40

    def test_negative_rejected(self):
        catalog = FakeCatalog([Product(id="momo", name="Momo", price=Money.of("400"), stock=2)])
        with pytest.raises(ValidationError, match="cannot be negative"):
            SetStockHandler(catalog).handle("momo", -1)

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            SetStockHandler(FakeCatalog()).handle("ghost", 5)


class TestShowStats:

    def test_dashboard_combines_expenses_and_low_stock(self):
        expense_repo = FakeExpenseRepository()
        RecordExpenseHandler(expense_repo).handle("Boxes", "300", "PACKAGING")
        catalog = FakeCatalog([
            Product(id="momo", name="Momo", price=Money.of("400"), stock=2),
            Product(id="lassi", name="Lassi", price=Money.of("150"), stock=30),
        ])

        dashboard = ShowStatsHandler(FakeOrderRepository(), expense_repo, catalog).handle(5)

        assert dashboard.stats.total_expenses == Decimal("300")
        assert dashboard.stats.net_profit == Decimal("-300")
        assert [p.id for p in dashboard.low_stock] == ["momo"]
