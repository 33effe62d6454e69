"""CLI commands for products and stock."""

from __future__ import annotations

import click

from selfdrop.application.set_stock import SetStockHandler
from selfdrop.domain.exceptions import DomainException
from selfdrop.infrastructure.bootstrap import catalog
from selfdrop.infrastructure.config import Settings


@click.command("list")
@click.pass_obj
def product_list(settings: Settings) -> None:
    """List all products in the catalog."""
    products = catalog(settings).list_products()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Category':<12} {'Price':>14} {'Stock':>6}")
    click.echo("-" * 62)
    for p in products:
        click.echo(f"{p.id:<6} {p.name:<20} {p.category:<12} {str(p.price):>14} {p.stock:>6}")


@click.command("stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units in stock.")
@click.pass_obj
def product_stock(settings: Settings, product_id: str, quantity: int) -> None:
    """Set the stock level of a product."""
    handler = SetStockHandler(catalog(settings))

    try:
        handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} set to {quantity}")
