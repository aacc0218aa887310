"""Application service: Payment Method Resolver.

Lists the payment gateways the checkout may offer.  Active HostBill
payment modules are mapped onto the storefront's own gateway ids; when
HostBill cannot be asked, a fixed fallback list keeps checkout usable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.application.dto import GatewayDTO
from storefront.domain.exceptions import BillingError
from storefront.domain.model.payment import GatewayInfo, GatewaySource, PaymentFlow
from storefront.domain.repository.billing_gateway import BillingGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupportedGateway:
    id: str
    name: str
    method: str
    icon: str
    flow: PaymentFlow


# Storefront payment methods, keyed by method name.
SUPPORTED_GATEWAYS: dict[str, SupportedGateway] = {
    "card": SupportedGateway("1", "Credit Card", "card", "💳", PaymentFlow.REDIRECT),
    "paypal": SupportedGateway("2", "PayPal", "paypal", "🅿️", PaymentFlow.REDIRECT),
    "banktransfer": SupportedGateway("3", "Bank Transfer", "banktransfer", "🏦", PaymentFlow.MANUAL),
    "crypto": SupportedGateway("4", "Cryptocurrency", "crypto", "₿", PaymentFlow.REDIRECT),
    "payu": SupportedGateway("5", "PayU", "payu", "💰", PaymentFlow.REDIRECT),
}

# HostBill payment module id -> storefront method.
MODULE_METHODS: dict[str, str] = {
    "10": "payu",
    "112": "paypal",
    "121": "card",
}

# Offered even when HostBill has no module for them (shown disabled).
_ALWAYS_LISTED = ("banktransfer", "crypto")

UNKNOWN_MODULE_ICON = "💳"


def fallback_gateways() -> list[GatewayInfo]:
    return [
        GatewayInfo(
            id=g.id,
            name=g.name,
            method=g.method,
            icon=g.icon,
            source=GatewaySource.FALLBACK,
            flow=g.flow,
        )
        for g in SUPPORTED_GATEWAYS.values()
    ]


class ListPaymentMethodsHandler:

    def __init__(self, gateway: BillingGateway) -> None:
        self._gateway = gateway

    def handle(self) -> list[GatewayDTO]:
        return [self._to_dto(g) for g in self.list_active_gateways()]

    def list_active_gateways(self) -> list[GatewayInfo]:
        try:
            modules = self._gateway.list_payment_modules()
        except BillingError as exc:
            logger.warning("Payment modules unavailable, using fallback gateways: %s", exc)
            return fallback_gateways()
        if not modules:
            logger.warning("HostBill reported no payment modules, using fallback gateways")
            return fallback_gateways()

        gateways: list[GatewayInfo] = []
        for module_id, module_name in modules.items():
            method = MODULE_METHODS.get(str(module_id))
            if method is None:
                logger.info("Unknown payment module %s (%s)", module_name, module_id)
                gateways.append(GatewayInfo(
                    id=str(module_id),
                    name=module_name,
                    method=f"module{module_id}",
                    icon=UNKNOWN_MODULE_ICON,
                    source=GatewaySource.BILLING,
                    unknown=True,
                    billing_module_id=str(module_id),
                ))
                continue
            supported = SUPPORTED_GATEWAYS[method]
            gateways.append(GatewayInfo(
                id=supported.id,
                name=module_name,
                method=supported.method,
                icon=supported.icon,
                source=GatewaySource.BILLING,
                billing_module_id=str(module_id),
                flow=supported.flow,
            ))

        known_ids = {g.id for g in gateways}
        for method in _ALWAYS_LISTED:
            supported = SUPPORTED_GATEWAYS[method]
            if supported.id not in known_ids:
                gateways.append(GatewayInfo(
                    id=supported.id,
                    name=supported.name,
                    method=supported.method,
                    icon=supported.icon,
                    source=GatewaySource.DEFAULT,
                    enabled=False,
                    flow=supported.flow,
                ))

        logger.info(
            "Payment gateways resolved: %d total, %d enabled",
            len(gateways), sum(1 for g in gateways if g.enabled),
        )
        return gateways

    @staticmethod
    def _to_dto(gateway: GatewayInfo) -> GatewayDTO:
        return GatewayDTO(
            id=gateway.id,
            name=gateway.name,
            method=gateway.method,
            icon=gateway.icon,
            source=gateway.source.value,
            enabled=gateway.enabled,
            unknown=gateway.unknown,
            billing_module_id=gateway.billing_module_id,
            flow=gateway.flow.value,
        )
