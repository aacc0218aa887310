"""Application service: Initialize Payment use case.

Checks that the chosen method is both supported by the storefront and
currently active, then hands the visitor either a HostBill payment URL
(redirect gateways) or bank transfer instructions (manual gateways).
"""

from __future__ import annotations

import logging
import uuid

from storefront.application.dto import PaymentInitDTO
from storefront.application.payment_methods import (
    SUPPORTED_GATEWAYS,
    ListPaymentMethodsHandler,
)
from storefront.domain.exceptions import ValidationError
from storefront.domain.model.payment import PaymentFlow
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money

logger = logging.getLogger(__name__)


def invoice_payment_url(client_url: str, invoice_id: str, gateway_id: str) -> str:
    return f"{client_url.rstrip('/')}/cart.php?a=complete&i={invoice_id}&gateway={gateway_id}"


class InitializePaymentHandler:

    def __init__(
        self,
        resolver: ListPaymentMethodsHandler,
        client_url: str,
        bank_account: str = "",
    ) -> None:
        self._resolver = resolver
        self._client_url = client_url
        self._bank_account = bank_account

    def handle(
        self,
        order_id: str,
        invoice_id: str,
        method: str,
        amount: str,
        currency: str = DEFAULT_CURRENCY,
    ) -> PaymentInitDTO:
        if not invoice_id:
            raise ValidationError("Invoice ID is required")
        supported = SUPPORTED_GATEWAYS.get(method)
        if supported is None:
            raise ValidationError(f"Unsupported payment method: {method}")

        active = [
            g for g in self._resolver.list_active_gateways()
            if g.method == method and g.enabled
        ]
        if not active:
            raise ValidationError(f"Payment method '{method}' is not active in HostBill configuration")

        payment_id = str(uuid.uuid4())
        price = Money.of(amount or "0", currency)
        logger.info(
            "Initializing payment %s: order=%s invoice=%s method=%s amount=%s",
            payment_id, order_id, invoice_id, method, price,
        )

        if supported.flow is PaymentFlow.REDIRECT:
            return PaymentInitDTO(
                payment_id=payment_id,
                order_id=order_id,
                invoice_id=invoice_id,
                method=method,
                gateway_id=supported.id,
                amount=f"{price.amount:.2f}",
                currency=price.currency,
                status="initialized",
                redirect_required=True,
                payment_url=invoice_payment_url(self._client_url, invoice_id, supported.id),
            )

        return PaymentInitDTO(
            payment_id=payment_id,
            order_id=order_id,
            invoice_id=invoice_id,
            method=method,
            gateway_id=supported.id,
            amount=f"{price.amount:.2f}",
            currency=price.currency,
            status="initialized",
            redirect_required=False,
            instructions=self._manual_instructions(invoice_id),
        )

    def _manual_instructions(self, invoice_id: str) -> str:
        account = self._bank_account or "the account shown on the invoice"
        return (
            f"Transfer the amount to {account}. "
            f"Use invoice number {invoice_id} as the variable symbol."
        )
