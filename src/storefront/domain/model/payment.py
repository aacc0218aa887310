"""Payment gateways as presented to the checkout."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class GatewaySource(Enum):
    BILLING = "hostbill-api"
    FALLBACK = "fallback"
    DEFAULT = "default"


class PaymentFlow(Enum):
    REDIRECT = "redirect"
    MANUAL = "manual"


@dataclass(frozen=True)
class GatewayInfo:
    id: str
    name: str
    method: str
    icon: str
    source: GatewaySource
    enabled: bool = True
    unknown: bool = False
    billing_module_id: str | None = None
    flow: PaymentFlow = PaymentFlow.REDIRECT


@dataclass(frozen=True)
class PaymentRecord:
    """A payment to book against an invoice."""

    invoice_id: str
    amount: str
    gateway_module_id: str
    transaction_id: str
    date: str
    fee: str = "0"
    send_email: bool = False
