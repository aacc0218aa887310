"""Application service: Record Payment use cases.

Books a completed gateway payment against a HostBill invoice, or charges
a card HostBill already has on file.
"""

from __future__ import annotations

import logging
from datetime import date as date_type

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.payment import PaymentRecord
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.billing_gateway import BillingGateway

logger = logging.getLogger(__name__)


class RecordPaymentHandler:

    def __init__(self, gateway: BillingGateway, today=date_type.today) -> None:
        self._gateway = gateway
        self._today = today

    def handle(
        self,
        invoice_id: str,
        amount: str,
        gateway_module_id: str,
        transaction_id: str,
        paid_on: str | None = None,
        fee: str = "0",
        send_email: bool = False,
    ) -> dict:
        if not invoice_id:
            raise ValidationError("Invoice ID is required")
        if not transaction_id:
            raise ValidationError("Transaction ID is required")
        price = Money.of(amount)

        record = PaymentRecord(
            invoice_id=str(invoice_id),
            amount=f"{price.amount:.2f}",
            gateway_module_id=str(gateway_module_id),
            transaction_id=transaction_id,
            date=paid_on or self._today().isoformat(),
            fee=str(fee),
            send_email=send_email,
        )
        result = self._gateway.add_invoice_payment(record)
        logger.info(
            "Payment %s recorded on invoice %s (%s)",
            transaction_id, invoice_id, record.amount,
        )
        return result


class ChargeCardHandler:

    def __init__(self, gateway: BillingGateway) -> None:
        self._gateway = gateway

    def handle(self, invoice_id: str, card_id: str | None = None,
               amount: str | None = None) -> dict:
        if not invoice_id:
            raise ValidationError("Invoice ID is required")
        if amount is not None:
            amount = f"{Money.of(amount).amount:.2f}"
        result = self._gateway.charge_credit_card(str(invoice_id), card_id=card_id, amount=amount)
        logger.info("Stored card charged for invoice %s", invoice_id)
        return result
