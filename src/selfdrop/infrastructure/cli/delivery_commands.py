"""CLI commands for delivery charges."""

from __future__ import annotations

import click

from selfdrop.domain.exceptions import DomainException
from selfdrop.domain.model.value_objects import DeliveryLocation, Money
from selfdrop.infrastructure.bootstrap import delivery_estimator
from selfdrop.infrastructure.config import Settings


@click.command("quote")
@click.option("--lat", required=True, type=float, help="Destination latitude.")
@click.option("--lng", required=True, type=float, help="Destination longitude.")
@click.option("--subtotal", required=True, help="Cart subtotal (e.g. 1500).")
@click.option("--address", default="Pinned location", help="Destination address.")
@click.pass_obj
def delivery_quote(settings: Settings, lat: float, lng: float, subtotal: str, address: str) -> None:
    """Show the delivery charge for a destination and cart value."""
    estimator = delivery_estimator(settings)

    try:
        location = DeliveryLocation(address=address, latitude=lat, longitude=lng)
        charge = estimator.estimate(location, Money.of(subtotal, settings.currency))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if charge.is_zero:
        click.echo(f"Delivery: free (orders of {estimator.free_delivery_threshold} or more)")
    else:
        click.echo(f"Delivery: {charge}")
