"""CLI command for the operator dashboard figures."""

from __future__ import annotations

import click

from selfdrop.application.show_stats import ShowStatsHandler
from selfdrop.domain.model.value_objects import Money
from selfdrop.domain.service.financial_aggregator import DistributionEntry
from selfdrop.infrastructure.bootstrap import catalog, expense_repository, order_repository
from selfdrop.infrastructure.config import Settings


def _echo_distribution(title: str, entries: list[DistributionEntry]) -> None:
    if not entries:
        return
    click.echo()
    click.echo(title)
    for entry in entries:
        click.echo(f"  {entry.label:<20} {entry.value:>14}")


@click.command("stats")
@click.option("--low-stock", "low_stock", type=int, default=None, help="Low-stock threshold.")
@click.pass_obj
def stats(settings: Settings, low_stock: int | None) -> None:
    """Show revenue, expenses, profit and order breakdowns."""
    handler = ShowStatsHandler(
        order_repo=order_repository(settings),
        expense_repo=expense_repository(settings),
        catalog=catalog(settings),
    )
    threshold = settings.low_stock_threshold if low_stock is None else low_stock
    dashboard = handler.handle(low_stock_threshold=threshold)
    s = dashboard.stats

    click.echo(f"{'Gross revenue':<20} {str(Money(s.total_revenue, settings.currency)):>18}")
    click.echo(f"{'  of which delivery':<20} {str(Money(s.delivery_revenue, settings.currency)):>18}")
    click.echo(f"{'Expenses':<20} {str(Money(s.total_expenses, settings.currency)):>18}")
    click.echo(f"{'Net profit':<20} {s.net_profit:>18,.2f}  ({s.profit_margin}%)")
    click.echo(
        f"Orders: {s.total_orders} total, {s.pending_orders} pending, "
        f"{s.completed_orders} completed, {s.cancelled_orders} cancelled"
    )

    _echo_distribution("By status", s.order_distribution)
    _echo_distribution("Revenue by category", s.category_distribution)
    _echo_distribution("Revenue by payment method", s.payment_distribution)
    _echo_distribution("Expenses by category", s.expense_distribution)

    if dashboard.low_stock:
        click.echo()
        click.echo(f"Low stock (<= {threshold})")
        for p in dashboard.low_stock:
            click.echo(f"  {p.name:<20} {p.stock:>6}")
