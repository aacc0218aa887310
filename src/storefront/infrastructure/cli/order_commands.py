"""CLI commands for placing and inspecting HostBill orders."""

from __future__ import annotations

import click

from storefront.application.dto import CustomerSpec, OrderItemSpec, OrderResultDTO
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    billing_gateway,
    cart_session,
    catalog_mapper,
    settings,
)


def _parse_items(raw: str, addons: str | None) -> list[OrderItemSpec]:
    """Parse '1:m,3:a' (product[:cycle]) into OrderItemSpec list."""
    addon_ids = [a.strip() for a in addons.split(",") if a.strip()] if addons else []
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        product_id, _, cycle = pair.partition(":")
        specs.append(OrderItemSpec(
            product_id=product_id.strip(),
            cycle=cycle.strip() or "m",
            addon_ids=list(addon_ids),
        ))
    if not specs:
        raise click.BadParameter("Expected 'ProductID[:cycle],...'.")
    return specs


def _display_result(dto: OrderResultDTO) -> None:
    status = "succeeded" if dto.success else "FAILED"
    click.echo(f"Checkout {dto.processing_id} {status}  (client={dto.client_id})")
    click.echo()
    click.echo(f"  {'Step':<18} {'Status':<8} {'Product':<10} {'Order':<10} Detail")
    click.echo(f"  {'-'*70}")
    for step in dto.steps:
        detail = step.error or step.message or ""
        click.echo(
            f"  {step.step:<18} {step.status:<8} {step.product_id or '':<10} "
            f"{step.order_id or '':<10} {detail}"
        )
    if dto.affiliate_id:
        click.echo()
        click.echo(f"Affiliate: {dto.affiliate_id}")


@click.command("place")
@click.option("--email", required=True, help="Customer email.")
@click.option("--first-name", required=True, help="Customer first name.")
@click.option("--last-name", required=True, help="Customer last name.")
@click.option("--phone", default="", help="Customer phone.")
@click.option("--country", default="", help="Customer country code.")
@click.option("--items", default=None, help="Items as 'ProductID[:cycle],...'. Omit to order the cart.")
@click.option("--addons", default=None, help="Addon IDs applied to every item, comma separated.")
@click.option("--cycle", default="m", help="Billing cycle for cart items.")
@click.option("--affiliate", "affiliate_id", default=None, help="Affiliate ID (defaults to the stored attribution).")
def order_place(
    email: str,
    first_name: str,
    last_name: str,
    phone: str,
    country: str,
    items: str | None,
    addons: str | None,
    cycle: str,
    affiliate_id: str | None,
) -> None:
    """Place HostBill orders for the given items or the current cart."""
    config = settings()
    session = cart_session(config)
    cart = session.load()

    if items:
        specs = _parse_items(items, addons)
    else:
        specs = [
            OrderItemSpec(product_id=item.id, name=item.name, price=item.unit_price, cycle=cycle)
            for item in cart.items
            for _ in range(item.quantity.value)
        ]
    affiliate_id = affiliate_id or cart.affiliate_id

    customer = CustomerSpec(
        email=email,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        country=country,
    )
    try:
        handler = PlaceOrderHandler(
            gateway=billing_gateway(config),
            mapper=catalog_mapper(config),
            currency=config.default_currency,
        )
        dto = handler.handle(customer=customer, items=specs, affiliate_id=affiliate_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_result(dto)
    if not dto.success:
        raise click.ClickException("No order was created.")
    if not items:
        session.clear()


@click.command("show")
@click.option("--id", "order_id", required=True, help="HostBill order ID.")
def order_show(order_id: str) -> None:
    """Show an order as HostBill reports it."""
    config = settings()
    try:
        dto = ShowOrderHandler(billing_gateway(config)).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.order_number}  (id={dto.order_id}, status={dto.status})")
    click.echo(f"Client:  {dto.client_id or '-'}")
    click.echo(f"Invoice: {dto.invoice_id or '-'}")
    click.echo(f"Total:   {dto.total or '-'}")
