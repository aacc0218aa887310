"""CLI commands for the product catalog and commissions."""

from __future__ import annotations

import click

from storefront.application.list_products import ListProductsHandler, ProductCommissionHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import billing_gateway, catalog_mapper, settings


@click.command("list")
@click.option("--remote", is_flag=True, default=False, help="List products from HostBill instead of the local catalog.")
@click.option("--commission", is_flag=True, default=False, help="Include affiliate commission (with --remote).")
def catalog_list(remote: bool, commission: bool) -> None:
    """List products."""
    config = settings()
    try:
        mapper = catalog_mapper(config)
        if not remote:
            _display_local(mapper)
            return
        products = ListProductsHandler(billing_gateway(config), mapper).handle(with_commission=commission)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return
    click.echo(f"{'ID':<6} {'HostBill':<9} {'Name':<24} {'Monthly':>10} {'Commission':>11}")
    click.echo("-" * 64)
    for p in products:
        earned = p.commission.monthly if p.commission and p.commission.has_commission else "-"
        click.echo(f"{p.id:<6} {p.billing_id:<9} {p.name:<24} {p.monthly_price:>10} {earned:>11}")


def _display_local(mapper) -> None:
    click.echo(f"{'ID':<6} {'HostBill':<9} {'Name':<18} {'Monthly':>14} {'Annually':>14}")
    click.echo("-" * 65)
    for p in mapper.table.products.values():
        annually = p.pricing.annually
        click.echo(
            f"{p.internal_id:<6} {p.billing_id:<9} {p.name:<18} "
            f"{str(p.pricing.monthly):>14} {str(annually) if annually else '-':>14}"
        )


@click.command("addons")
@click.option("--product", "product_id", required=True, help="Storefront product ID.")
def catalog_addons(product_id: str) -> None:
    """List the addons offered with a product."""
    addons = catalog_mapper(settings()).available_addons(product_id)
    if not addons:
        click.echo("No addons available.")
        return
    click.echo(f"{'ID':<12} {'HostBill':<9} {'Name':<24} {'Price':>12} Cycle")
    click.echo("-" * 66)
    for a in addons:
        click.echo(f"{a.internal_id:<12} {a.billing_id:<9} {a.name:<24} {str(a.price):>12} {a.cycle.name.lower()}")


@click.command("commission")
@click.option("--product", "product_id", required=True, help="Storefront product ID.")
def catalog_commission(product_id: str) -> None:
    """Show the affiliate commission a product earns per billing cycle."""
    config = settings()
    try:
        dto = ProductCommissionHandler(billing_gateway(config), catalog_mapper(config)).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not dto.has_commission:
        click.echo(f"Product {product_id} earns no commission.")
        return
    click.echo(f"Plan: {dto.plan_name} (#{dto.plan_id}, {dto.type} {dto.rate})")
    click.echo(f"  {'Monthly':<14} {dto.monthly:>10}")
    click.echo(f"  {'Quarterly':<14} {dto.quarterly:>10}")
    click.echo(f"  {'Semiannually':<14} {dto.semiannually:>10}")
    click.echo(f"  {'Annually':<14} {dto.annually:>10}")
