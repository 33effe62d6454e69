"""CLI commands for the Order aggregate."""

from __future__ import annotations

import uuid

import click

from selfdrop.application.dto import CartItemSpec, OrderDTO
from selfdrop.application.notification_dispatcher import Channel, NotificationDispatcher
from selfdrop.application.show_order import ListOrdersHandler, ShowOrderHandler
from selfdrop.domain.exceptions import DomainException
from selfdrop.domain.model.actor import Role
from selfdrop.domain.model.cart import Cart
from selfdrop.domain.model.notification import Notification
from selfdrop.domain.model.order import OrderStatus
from selfdrop.domain.model.value_objects import DeliveryLocation, PaymentMethod
from selfdrop.infrastructure.auth import StaticAuthenticator
from selfdrop.infrastructure.bootstrap import (
    catalog,
    notification_dispatcher,
    order_lifecycle,
    order_repository,
)
from selfdrop.infrastructure.config import Settings


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse '1:2,2:1' into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(CartItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _echo_notification(notification: Notification) -> None:
    click.echo(f"[notify] {notification.title}: {notification.message}")


def _dispatcher(settings: Settings) -> NotificationDispatcher:
    dispatcher = notification_dispatcher(settings)
    dispatcher.subscribe(Channel.operators(), _echo_notification)
    return dispatcher


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Deliver:  {dto.location}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*55}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>14} {item.line_total:>14}"
        )
    click.echo(f"  {'-'*55}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>27}")
    click.echo(f"  {'Delivery':<27} {dto.delivery_charge:>27}")
    click.echo(f"  {'Grand Total':<27} {dto.grand_total:>27}")


@click.command("create")
@click.option("--customer", required=True, help="Customer user id.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--address", required=True, help="Delivery address.")
@click.option("--lat", required=True, type=float, help="Delivery latitude.")
@click.option("--lng", required=True, type=float, help="Delivery longitude.")
@click.option("--area", default=None, help="Delivery area.")
@click.option(
    "--payment",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    help="Payment method.",
)
@click.option("--key", default=None, help="Idempotency key (generated if omitted).")
@click.pass_obj
def order_create(
    settings: Settings,
    customer: str,
    items: str,
    address: str,
    lat: float,
    lng: float,
    area: str | None,
    payment: str,
    key: str | None,
) -> None:
    """Place an order for a customer."""
    specs = _parse_items(items)
    products = catalog(settings)
    lifecycle = order_lifecycle(settings, dispatcher=_dispatcher(settings))

    try:
        actor = StaticAuthenticator(customer, Role.CUSTOMER).current_actor()
        cart = Cart(products)
        for spec in specs:
            product = products.get_product(spec.product_id)
            if product is None:
                raise click.ClickException(f"Product with ID '{spec.product_id}' not found")
            cart.add_item(product)
            cart.update_quantity(spec.product_id, spec.quantity)
        order = lifecycle.create(
            cart,
            DeliveryLocation(address=address, latitude=lat, longitude=lng, area=area),
            PaymentMethod.parse(payment),
            actor=actor,
            idempotency_key=key or uuid.uuid4().hex,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order.id} created  (status={order.status.value})")
    _display_order(OrderDTO.from_order(order))


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(settings: Settings, order_id: int) -> None:
    """Show details and history of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository(settings))

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)
    click.echo()
    click.echo("History:")
    for change in dto.history:
        click.echo(f"  {change.timestamp}  {change.status:<17} by {change.actor}")


@click.command("list")
@click.option(
    "--status",
    default=None,
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="Only orders in this status.",
)
@click.option("--customer", default=None, help="Only this customer's orders.")
@click.pass_obj
def order_list(settings: Settings, status: str | None, customer: str | None) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_repo=order_repository(settings))
    dtos = handler.handle(
        status=OrderStatus.parse(status) if status else None,
        customer_id=customer,
    )

    if not dtos:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<14} {'Status':<17} {'Total':>14}  Created")
    click.echo("-" * 74)
    for dto in dtos:
        click.echo(
            f"{dto.id:<6} {dto.customer_id:<14} {dto.status:<17} {dto.grand_total:>14}  {dto.created_at}"
        )


@click.command("advance")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--to",
    "target",
    required=True,
    type=click.Choice([s.value for s in OrderStatus], case_sensitive=False),
    help="Target status.",
)
@click.option("--operator", required=True, help="Operator user id.")
@click.option("--request-id", default=None, help="Retry-safe request id.")
@click.pass_obj
def order_advance(
    settings: Settings, order_id: int, target: str, operator: str, request_id: str | None
) -> None:
    """Move an order to its next status (operator)."""
    lifecycle = order_lifecycle(settings, dispatcher=_dispatcher(settings))

    try:
        actor = StaticAuthenticator(operator, Role.OPERATOR).current_actor()
        order = lifecycle.transition(order_id, OrderStatus.parse(target), actor, request_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is {order.status.value}.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--customer", required=True, help="Customer user id.")
@click.pass_obj
def order_cancel(settings: Settings, order_id: int, customer: str) -> None:
    """Cancel an order as its customer (only before confirmation)."""
    lifecycle = order_lifecycle(settings, dispatcher=_dispatcher(settings))

    try:
        actor = StaticAuthenticator(customer, Role.CUSTOMER).current_actor()
        lifecycle.transition(order_id, OrderStatus.CANCELLED, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled.")
