"""CLI commands for payment gateways."""

from __future__ import annotations

import click

from storefront.application.payment_methods import ListPaymentMethodsHandler
from storefront.application.record_payment import ChargeCardHandler, RecordPaymentHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import billing_gateway, settings


@click.command("methods")
def payments_methods() -> None:
    """List the payment methods checkout can offer."""
    try:
        gateways = ListPaymentMethodsHandler(billing_gateway(settings())).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{'ID':<5} {'Method':<14} {'Name':<28} {'Source':<13} Enabled")
    click.echo("-" * 70)
    for g in gateways:
        flag = "yes" if g.enabled else "no"
        click.echo(f"{g.id:<5} {g.method:<14} {g.name:<28} {g.source:<13} {flag}")


@click.command("record")
@click.option("--invoice", "invoice_id", required=True, help="HostBill invoice ID.")
@click.option("--amount", required=True, help="Amount received.")
@click.option("--module", "gateway_module_id", required=True, help="HostBill payment module ID.")
@click.option("--transaction", "transaction_id", required=True, help="Gateway transaction ID.")
@click.option("--date", "paid_on", default=None, help="Payment date (YYYY-MM-DD, defaults to today).")
@click.option("--fee", default="0", help="Gateway fee.")
@click.option("--send-email", is_flag=True, default=False, help="Email the client a receipt.")
def payments_record(invoice_id: str, amount: str, gateway_module_id: str, transaction_id: str,
                    paid_on: str | None, fee: str, send_email: bool) -> None:
    """Book a completed payment against an invoice."""
    try:
        RecordPaymentHandler(billing_gateway(settings())).handle(
            invoice_id=invoice_id,
            amount=amount,
            gateway_module_id=gateway_module_id,
            transaction_id=transaction_id,
            paid_on=paid_on,
            fee=fee,
            send_email=send_email,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Payment {transaction_id} recorded on invoice #{invoice_id}.")


@click.command("charge")
@click.option("--invoice", "invoice_id", required=True, help="HostBill invoice ID.")
@click.option("--card", "card_id", default=None, help="Stored card ID (defaults to the client's card).")
@click.option("--amount", default=None, help="Partial amount (defaults to the invoice balance).")
def payments_charge(invoice_id: str, card_id: str | None, amount: str | None) -> None:
    """Charge a stored credit card for an invoice."""
    try:
        ChargeCardHandler(billing_gateway(settings())).handle(invoice_id, card_id=card_id, amount=amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Card charged for invoice #{invoice_id}.")
