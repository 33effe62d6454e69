"""Expense — an entry in the operator's cost ledger.

Expenses are independent of orders and are never edited once recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from selfdrop.domain.exceptions import ValidationError
from selfdrop.domain.model.value_objects import Money


class ExpenseCategory(Enum):
    FUEL = "FUEL"
    PACKAGING = "PACKAGING"
    PREPARATION = "PREPARATION"
    MARKETING = "MARKETING"
    SALARY = "SALARY"
    OTHERS = "OTHERS"

    @classmethod
    def parse(cls, raw: str) -> ExpenseCategory:
        try:
            return cls(raw.strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown expense category '{raw}'") from exc


@dataclass(frozen=True)
class Expense:
    id: int
    title: str
    amount: Money
    category: ExpenseCategory = ExpenseCategory.OTHERS
    description: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Expense title is required")
