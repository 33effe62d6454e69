"""Abstract repository for the append-only expense ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfdrop.domain.model.expense import Expense


class ExpenseRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique expense ID."""

    @abstractmethod
    def add(self, expense: Expense) -> None:
        """Append an expense.  Existing entries are never rewritten."""

    @abstractmethod
    def list_all(self) -> list[Expense]:
        """Return every expense, oldest first."""
