"""Application service: Record Expense use case."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from selfdrop.domain.model.expense import Expense, ExpenseCategory
from selfdrop.domain.model.value_objects import Money
from selfdrop.domain.repository.expense_repository import ExpenseRepository

logger = structlog.get_logger(__name__)


class RecordExpenseHandler:

    def __init__(self, expense_repo: ExpenseRepository) -> None:
        self._expense_repo = expense_repo

    def handle(
        self,
        title: str,
        amount: str,
        category: str = ExpenseCategory.OTHERS.value,
        description: str | None = None,
    ) -> Expense:
        """Append an expense to the ledger."""
        expense = Expense(
            id=self._expense_repo.next_id(),
            title=title.strip() if title else title,
            amount=Money.of(amount),
            category=ExpenseCategory.parse(category),
            description=description or None,
            created_at=datetime.now(timezone.utc),
        )
        self._expense_repo.add(expense)
        logger.info(
            "Expense recorded",
            expense_id=expense.id,
            category=expense.category.value,
            amount=str(expense.amount),
        )
        return expense


class ListExpensesHandler:

    def __init__(self, expense_repo: ExpenseRepository) -> None:
        self._expense_repo = expense_repo

    def handle(self) -> list[Expense]:
        """Newest first."""
        return sorted(
            self._expense_repo.list_all(), key=lambda e: e.created_at, reverse=True
        )
