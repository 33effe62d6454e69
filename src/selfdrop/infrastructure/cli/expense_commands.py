"""CLI commands for the expense ledger."""

from __future__ import annotations

import click

from selfdrop.application.record_expense import ListExpensesHandler, RecordExpenseHandler
from selfdrop.domain.exceptions import DomainException
from selfdrop.domain.model.expense import ExpenseCategory
from selfdrop.infrastructure.bootstrap import expense_repository
from selfdrop.infrastructure.config import Settings


@click.command("add")
@click.option("--title", required=True, help="What the money was spent on.")
@click.option("--amount", required=True, help="Amount (e.g. 450).")
@click.option(
    "--category",
    default=ExpenseCategory.OTHERS.value,
    type=click.Choice([c.value for c in ExpenseCategory], case_sensitive=False),
    help="Expense category.",
)
@click.option("--description", default=None, help="Optional details.")
@click.pass_obj
def expense_add(settings: Settings, title: str, amount: str, category: str, description: str | None) -> None:
    """Record an operating expense."""
    handler = RecordExpenseHandler(expense_repository(settings))

    try:
        expense = handler.handle(title=title, amount=amount, category=category, description=description)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Expense #{expense.id} '{expense.title}' recorded: {expense.amount} ({expense.category.value})")


@click.command("list")
@click.pass_obj
def expense_list(settings: Settings) -> None:
    """List recorded expenses, newest first."""
    expenses = ListExpensesHandler(expense_repository(settings)).handle()

    if not expenses:
        click.echo("No expenses recorded.")
        return

    click.echo(f"{'ID':<5} {'Date':<11} {'Category':<12} {'Title':<24} {'Amount':>14}")
    click.echo("-" * 70)
    for e in expenses:
        click.echo(
            f"{e.id:<5} {e.created_at:%Y-%m-%d} {e.category.value:<12} {e.title:<24} {str(e.amount):>14}"
        )
