"""JSON-file-backed implementation of ExpenseRepository."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from selfdrop.domain.model.expense import Expense, ExpenseCategory
from selfdrop.domain.model.value_objects import Money
from selfdrop.domain.repository.expense_repository import ExpenseRepository


class JsonExpenseRepository(ExpenseRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.RLock()
        self._ensure_file()

    def next_id(self) -> int:
        records = self._load_raw()
        if not records:
            return 1
        return max(r["id"] for r in records) + 1

    def add(self, expense: Expense) -> None:
        with self._lock:
            records = self._load_raw()
            records.append(
                {
                    "id": expense.id,
                    "title": expense.title,
                    "amount": str(expense.amount.amount),
                    "currency": expense.amount.currency,
                    "category": expense.category.value,
                    "description": expense.description,
                    "created_at": expense.created_at.isoformat(),
                }
            )
            self._file_path.write_text(
                json.dumps(records, indent=2) + "\n", encoding="utf-8"
            )

    def list_all(self) -> list[Expense]:
        return [
            Expense(
                id=raw["id"],
                title=raw["title"],
                amount=Money(Decimal(raw["amount"]), raw.get("currency", "NPR")),
                category=ExpenseCategory(raw["category"]),
                description=raw.get("description"),
                created_at=datetime.fromisoformat(raw["created_at"]),
            )
            for raw in self._load_raw()
        ]

    def _load_raw(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
