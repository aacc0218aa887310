"""CLI commands for affiliate attribution."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import attribution_service, billing_gateway, settings


@click.command("capture")
@click.argument("url")
def affiliate_capture(url: str) -> None:
    """Capture affiliate parameters from a landing URL."""
    attribution = attribution_service(settings()).capture(url)
    if attribution is None:
        click.echo("No affiliate parameters in URL and no stored attribution.")
        return
    click.echo(f"Affiliate {attribution.affiliate_id or '-'} (code {attribution.affiliate_code or '-'})")
    click.echo(f"Expires:  {attribution.expires_at.strftime('%Y-%m-%d %H:%M UTC')}")


@click.command("show")
def affiliate_show() -> None:
    """Show the stored affiliate attribution."""
    attribution = attribution_service(settings()).read()
    if attribution is None:
        click.echo("No affiliate attribution stored.")
        return
    p = attribution.params
    click.echo(f"Affiliate: {p.id or '-'}")
    click.echo(f"Code:      {p.code or '-'}")
    click.echo(f"Campaign:  {p.campaign or '-'}  Source: {p.source or '-'}  Medium: {p.medium or '-'}")
    click.echo(f"Captured:  {attribution.captured_at.strftime('%Y-%m-%d %H:%M UTC')}")
    click.echo(f"Expires:   {attribution.expires_at.strftime('%Y-%m-%d %H:%M UTC')}")


@click.command("validate")
@click.option("--id", "affiliate_id", required=True, help="HostBill affiliate ID.")
def affiliate_validate(affiliate_id: str) -> None:
    """Check an affiliate against HostBill."""
    config = settings()
    try:
        service = attribution_service(config, billing_gateway(config))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if service.validate(affiliate_id):
        click.echo(f"Affiliate {affiliate_id} is active.")
    else:
        raise click.ClickException(f"Affiliate {affiliate_id} is not valid.")
