"""Application service: Place Order use case.

Turns a checkout into HostBill orders.  This is the only place that
coordinates the billing gateway, the catalog mapper and affiliate
attribution for a single checkout.

Steps:
1. Validate the submitted customer and items (nothing is sent to billing
   for an invalid checkout).
2. Reuse the client registered under the customer's email or create one.
   Without a client nothing can be ordered, so a failure here aborts.
3. Create one order per item.  Items fail independently: a broken item
   becomes an error step and the remaining items are still ordered.
4. Attribute every successful order to the affiliate, if one was given
   and HostBill confirms it is active.

There is no rollback and no retry.  Orders already created stay created.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
import uuid
from dataclasses import replace

from storefront.application.affiliate_attribution import ValidateAffiliateHandler
from storefront.application.dto import (
    CustomerSpec,
    OrderItemSpec,
    OrderResultDTO,
    OrderStepDTO,
    PlacedOrderDTO,
)
from storefront.domain.exceptions import BillingError, DomainException, ValidationError
from storefront.domain.model.order import (
    Client,
    Customer,
    OrderRequest,
    OrderResult,
    OrderStep,
    PlacedOrder,
    StepStatus,
)
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, BillingCycle
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.domain.service.catalog_mapper import CatalogMapper

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PASSWORD_ALPHABET = string.ascii_letters + string.digits
PASSWORD_LENGTH = 12


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


class PlaceOrderHandler:

    def __init__(
        self,
        gateway: BillingGateway,
        mapper: CatalogMapper,
        currency: str = DEFAULT_CURRENCY,
        password_factory=generate_password,
    ) -> None:
        self._gateway = gateway
        self._mapper = mapper
        self._currency = currency
        self._password_factory = password_factory
        self._affiliates = ValidateAffiliateHandler(gateway)

    def handle(
        self,
        customer: CustomerSpec,
        items: list[OrderItemSpec],
        affiliate_id: str | None = None,
    ) -> OrderResultDTO:
        problems = self._customer_problems(customer) + self._item_problems(items)
        if problems:
            raise ValidationError("; ".join(problems))

        result = OrderResult(processing_id=str(uuid.uuid4()))
        logger.info(
            "[%s] Placing order for %s: %d item(s), affiliate=%s",
            result.processing_id, customer.email, len(items), affiliate_id,
        )
        result.client = self._resolve_client(result, customer)
        return self._place(result, items, affiliate_id)

    def handle_for_client(
        self,
        client_id: str,
        items: list[OrderItemSpec],
        affiliate_id: str | None = None,
    ) -> OrderResultDTO:
        """Order for a client that already exists in HostBill."""
        problems = self._item_problems(items)
        if not client_id:
            problems.insert(0, "Client ID is required")
        if problems:
            raise ValidationError("; ".join(problems))

        result = OrderResult(processing_id=str(uuid.uuid4()))
        logger.info(
            "[%s] Placing order for client %s: %d item(s), affiliate=%s",
            result.processing_id, client_id, len(items), affiliate_id,
        )
        result.client = Client(client_id=str(client_id), email="")
        return self._place(result, items, affiliate_id)

    def _place(
        self,
        result: OrderResult,
        items: list[OrderItemSpec],
        affiliate_id: str | None,
    ) -> OrderResultDTO:
        for spec in items:
            self._create_order(result, result.client, spec)

        if affiliate_id and result.orders:
            self._assign_affiliate(result, str(affiliate_id))

        logger.info(
            "[%s] Order placement finished: %d order(s), %d error(s)",
            result.processing_id, len(result.orders), len(result.errors),
        )
        return self._to_dto(result)

    # --- Validation -----------------------------------------------------------

    @staticmethod
    def _customer_problems(customer: CustomerSpec) -> list[str]:
        problems: list[str] = []
        if not customer.first_name:
            problems.append("Customer first name is required")
        if not customer.last_name:
            problems.append("Customer last name is required")
        if not customer.email:
            problems.append("Customer email is required")
        elif not _EMAIL_RE.match(customer.email):
            problems.append("Invalid email format")
        return problems

    @staticmethod
    def _item_problems(items: list[OrderItemSpec]) -> list[str]:
        if not items:
            return ["At least one item is required"]
        return [
            f"Item {index}: Product ID is required"
            for index, item in enumerate(items, start=1)
            if not item.product_id
        ]

    # --- Steps ----------------------------------------------------------------

    def _resolve_client(self, result: OrderResult, spec: CustomerSpec) -> Client:
        existing = self._gateway.find_client_by_email(spec.email)
        if existing is not None:
            logger.info("[%s] Reusing client %s", result.processing_id, existing.client_id)
            result.steps.append(OrderStep(
                step="resolve_client",
                status=StepStatus.SUCCESS,
                message=f"Existing client {existing.client_id}",
            ))
            return existing

        customer = Customer(
            email=spec.email,
            first_name=spec.first_name,
            last_name=spec.last_name,
            phone=spec.phone,
            address=spec.address,
            city=spec.city,
            postal_code=spec.postal_code,
            country=spec.country,
            state=spec.state,
            company=spec.company,
        )
        client = self._gateway.add_client(customer, self._password_factory(), self._currency)
        logger.info("[%s] Created client %s", result.processing_id, client.client_id)
        result.steps.append(OrderStep(
            step="resolve_client",
            status=StepStatus.SUCCESS,
            message=f"Created client {client.client_id}",
        ))
        return client

    def _create_order(self, result: OrderResult, client: Client, spec: OrderItemSpec) -> None:
        try:
            cycle = BillingCycle.parse(spec.cycle)
            billing_product_id = self._mapper.to_billing_product_id(spec.product_id)
            billing_addon_ids = self._mapper.addons_for_order(spec.product_id, spec.addon_ids)
            self._mapper.check_config_options(spec.product_id, spec.config_options)
            request = OrderRequest(
                client_id=client.client_id,
                billing_product_id=billing_product_id,
                cycle=cycle,
                config_options=dict(spec.config_options),
                billing_addon_ids=billing_addon_ids,
            )
            created = self._gateway.add_order(request)
        except DomainException as exc:
            logger.error(
                "[%s] Order for product %s failed: %s",
                result.processing_id, spec.product_id, exc,
            )
            result.steps.append(OrderStep(
                step="create_order",
                status=StepStatus.ERROR,
                product_id=spec.product_id,
                product_name=spec.name or None,
                error=f"{spec.name or spec.product_id}: {exc}",
            ))
            return

        order_number = self._order_number(result, created.order_id)
        result.orders.append(PlacedOrder(
            order_id=created.order_id,
            order_number=order_number,
            invoice_id=created.invoice_id,
            client_id=client.client_id,
            billing_product_id=billing_product_id,
            cycle=cycle,
            config_options=request.prefixed_config_options(),
            addons=billing_addon_ids,
            status=created.status,
        ))
        result.steps.append(OrderStep(
            step="create_order",
            status=StepStatus.SUCCESS,
            product_id=spec.product_id,
            product_name=spec.name or None,
            order_id=created.order_id,
            message=f"Order {order_number} created",
        ))
        logger.info(
            "[%s] Created order %s (#%s) for product %s",
            result.processing_id, created.order_id, order_number, spec.product_id,
        )

    def _order_number(self, result: OrderResult, order_id: str) -> str:
        """Best effort: the order id stands in when HostBill has no number."""
        try:
            number = self._gateway.get_order_number(order_id)
        except BillingError as exc:
            logger.warning(
                "[%s] Could not fetch order number for %s: %s",
                result.processing_id, order_id, exc,
            )
            return order_id
        return number or order_id

    def _assign_affiliate(self, result: OrderResult, affiliate_id: str) -> None:
        if not self._affiliate_is_active(result, affiliate_id):
            result.steps.append(OrderStep(
                step="assign_affiliate",
                status=StepStatus.ERROR,
                error=f"Invalid affiliate ID: {affiliate_id}",
            ))
            return

        result.affiliate_id = affiliate_id
        for index, order in enumerate(result.orders):
            try:
                self._gateway.set_order_referrer(order.order_id, affiliate_id)
            except BillingError as exc:
                logger.error(
                    "[%s] Affiliate %s not assigned to order %s: %s",
                    result.processing_id, affiliate_id, order.order_id, exc,
                )
                result.steps.append(OrderStep(
                    step="assign_affiliate",
                    status=StepStatus.ERROR,
                    order_id=order.order_id,
                    error=f"Failed to assign affiliate to order {order.order_id}: {exc}",
                ))
                continue
            result.orders[index] = replace(order, affiliate_id=affiliate_id)
            result.steps.append(OrderStep(
                step="assign_affiliate",
                status=StepStatus.SUCCESS,
                order_id=order.order_id,
                message=f"Order {order.order_id} assigned to affiliate {affiliate_id}",
            ))

    def _affiliate_is_active(self, result: OrderResult, affiliate_id: str) -> bool:
        active = self._affiliates.handle(affiliate_id)
        if not active:
            logger.warning("[%s] Affiliate %s rejected", result.processing_id, affiliate_id)
        return active

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_dto(result: OrderResult) -> OrderResultDTO:
        return OrderResultDTO(
            success=result.success,
            processing_id=result.processing_id,
            client_id=result.client.client_id if result.client else None,
            affiliate_id=result.affiliate_id,
            orders=[
                PlacedOrderDTO(
                    order_id=o.order_id,
                    order_number=o.order_number,
                    invoice_id=o.invoice_id,
                    client_id=o.client_id,
                    billing_product_id=o.billing_product_id,
                    cycle=o.cycle.value,
                    config_options=dict(o.config_options),
                    addons=list(o.addons),
                    status=o.status,
                    affiliate_id=o.affiliate_id,
                )
                for o in result.orders
            ],
            steps=[
                OrderStepDTO(
                    step=s.step,
                    status=s.status.value,
                    product_id=s.product_id,
                    product_name=s.product_name,
                    order_id=s.order_id,
                    error=s.error,
                    message=s.message,
                )
                for s in result.steps
            ],
            errors=result.errors,
        )
