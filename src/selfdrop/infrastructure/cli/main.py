import click

from selfdrop.infrastructure.cli.delivery_commands import delivery_quote
from selfdrop.infrastructure.cli.expense_commands import expense_add, expense_list
from selfdrop.infrastructure.cli.order_commands import (
    order_advance,
    order_cancel,
    order_create,
    order_list,
    order_show,
)
from selfdrop.infrastructure.cli.product_commands import product_list, product_stock
from selfdrop.infrastructure.cli.stats_commands import stats
from selfdrop.infrastructure.config import ConfigurationError, Settings
from selfdrop.infrastructure.logging import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Override SELFDROP_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """SelfDrop — cart, checkout and order fulfillment"""
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging(level=(log_level or settings.log_level).upper(), fmt=settings.log_format)
    ctx.obj = settings


@cli.group()
def order() -> None:
    """Place and progress orders."""


@cli.group()
def product() -> None:
    """Inspect products and stock."""


@cli.group()
def expense() -> None:
    """Record operating expenses."""


@cli.group()
def delivery() -> None:
    """Delivery charges."""


# Register subcommands
order.add_command(order_advance)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
product.add_command(product_list)
product.add_command(product_stock)
expense.add_command(expense_add)
expense.add_command(expense_list)
delivery.add_command(delivery_quote)
cli.add_command(stats)
