"""Application service: Show Order use case (query)."""

from __future__ import annotations

from storefront.application.dto import OrderDetailsDTO
from storefront.domain.exceptions import EntityNotFoundError, ValidationError
from storefront.domain.repository.billing_gateway import BillingGateway


class ShowOrderHandler:

    def __init__(self, gateway: BillingGateway) -> None:
        self._gateway = gateway

    def handle(self, order_id: str) -> OrderDetailsDTO:
        if not order_id:
            raise ValidationError("Order ID is required")
        details = self._gateway.get_order_details(str(order_id))
        if not details:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return self._to_dto(str(order_id), details)

    @staticmethod
    def _to_dto(order_id: str, details: dict) -> OrderDetailsDTO:
        def text(key: str) -> str | None:
            value = details.get(key)
            return str(value) if value not in (None, "") else None

        return OrderDetailsDTO(
            order_id=text("id") or order_id,
            order_number=text("number") or order_id,
            status=text("status") or "unknown",
            client_id=text("client_id"),
            invoice_id=text("invoice_id"),
            total=text("total"),
            details=details,
        )
