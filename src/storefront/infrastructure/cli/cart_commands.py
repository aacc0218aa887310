"""CLI commands for the visitor's cart."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.model.cart import Cart, CartItem
from storefront.infrastructure.bootstrap import cart_session, catalog_mapper, settings


def _display_cart(cart: Cart) -> None:
    """Shared formatting for displaying a cart."""
    if cart.is_empty:
        click.echo("Cart is empty.")
    else:
        click.echo(f"  {'ID':<6} {'Product':<20} {'Qty':>5} {'Price':>12} {'Total':>14}")
        click.echo(f"  {'-'*61}")
        for item in cart.items:
            click.echo(
                f"  {item.id:<6} {item.name:<20} {item.quantity.value:>5} "
                f"{item.unit_price:>12} {str(item.line_total):>14}"
            )
        click.echo(f"  {'-'*61}")
        click.echo(f"  {'Items':<27} {cart.item_count:>5}")
        click.echo(f"  {'Cart Total':<27} {str(cart.total):>33}")
    if cart.affiliate_id or cart.affiliate_code:
        click.echo(f"Affiliate: {cart.affiliate_id or '-'} (code {cart.affiliate_code or '-'})")


@click.command("add")
@click.option("--id", "product_id", required=True, help="Storefront product ID.")
def cart_add(product_id: str) -> None:
    """Add one unit of a catalog product to the cart."""
    config = settings()
    try:
        product = catalog_mapper(config).product(product_id)
        session = cart_session(config)
        session.load()
        cart = session.add_item(CartItem(
            id=product.internal_id,
            name=product.name,
            unit_price=f"{product.pricing.monthly.amount:.0f} {product.pricing.monthly.currency}",
            specs=product.specs,
            billing_product_id=product.billing_id,
        ))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added '{product.name}' to cart.")
    _display_cart(cart)


@click.command("remove")
@click.option("--id", "product_id", required=True, help="Storefront product ID.")
def cart_remove(product_id: str) -> None:
    """Remove a line from the cart."""
    session = cart_session(settings())
    session.load()
    _display_cart(session.remove_item(product_id))


@click.command("update")
@click.option("--id", "product_id", required=True, help="Storefront product ID.")
@click.option("--qty", required=True, type=int, help="New quantity (0 removes the line).")
def cart_update(product_id: str, qty: int) -> None:
    """Change the quantity of a cart line."""
    session = cart_session(settings())
    session.load()
    try:
        cart = session.update_quantity(product_id, qty)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_cart(cart)


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart (affiliate attribution is kept)."""
    session = cart_session(settings())
    session.load()
    session.clear()
    click.echo("Cart cleared.")


@click.command("show")
@click.option("--url", default=None, help="Landing URL; affiliate parameters on it are captured.")
def cart_show(url: str | None) -> None:
    """Show the cart as restored from storage."""
    session = cart_session(settings())
    _display_cart(session.load(url))
