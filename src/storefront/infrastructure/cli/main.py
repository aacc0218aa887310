import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.cli.affiliate_commands import (
    affiliate_capture,
    affiliate_show,
    affiliate_validate,
)
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.catalog_commands import (
    catalog_addons,
    catalog_commission,
    catalog_list,
)
from storefront.infrastructure.cli.order_commands import order_place, order_show
from storefront.infrastructure.cli.payment_commands import (
    payments_charge,
    payments_methods,
    payments_record,
)
from storefront.infrastructure.config import Settings
from storefront.infrastructure.logging_setup import configure_logging


@click.group()
def cli() -> None:
    """Storefront — VPS orders, affiliates and payments via HostBill"""
    try:
        configure_logging(Settings.from_env().log_level)
    except DomainException as exc:
        raise click.ClickException(str(exc))


@cli.group()
def cart() -> None:
    """Manage the cart."""


@cli.group()
def affiliate() -> None:
    """Manage affiliate attribution."""


@cli.group()
def order() -> None:
    """Place and inspect orders."""


@cli.group()
def catalog() -> None:
    """Browse the product catalog."""


@cli.group()
def payments() -> None:
    """Payment methods and invoice payments."""


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", default=None, type=int, help="Port (defaults to PORT).")
def serve(host: str | None, port: int | None) -> None:
    """Run the storefront HTTP API."""
    import uvicorn

    from storefront.infrastructure.bootstrap import build_container
    from storefront.infrastructure.web.app import create_app

    try:
        container = build_container()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    config = container.settings
    uvicorn.run(
        create_app(container),
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
    )


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_remove)
cart.add_command(cart_update)
cart.add_command(cart_clear)
cart.add_command(cart_show)
affiliate.add_command(affiliate_capture)
affiliate.add_command(affiliate_show)
affiliate.add_command(affiliate_validate)
order.add_command(order_place)
order.add_command(order_show)
catalog.add_command(catalog_list)
catalog.add_command(catalog_addons)
catalog.add_command(catalog_commission)
payments.add_command(payments_methods)
payments.add_command(payments_record)
payments.add_command(payments_charge)
