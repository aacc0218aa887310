"""Application service: List Products use cases (queries).

Products come from HostBill order pages.  Each listed product is marked
with its storefront id when the catalog maps it, and can carry the
affiliate commission it would earn per billing cycle.
"""

from __future__ import annotations

import logging

from storefront.application.dto import CommissionDTO, ProductDTO
from storefront.domain.exceptions import BillingError
from storefront.domain.model.catalog import (
    BillingProduct,
    CommissionBreakdown,
    CommissionPlan,
    commission_breakdown,
)
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.domain.service.catalog_mapper import CatalogMapper

logger = logging.getLogger(__name__)


class ListProductsHandler:

    def __init__(self, gateway: BillingGateway, mapper: CatalogMapper) -> None:
        self._gateway = gateway
        self._mapper = mapper

    def handle(self, with_commission: bool = False) -> list[ProductDTO]:
        """List every product on every order page.

        An order page that fails to load is skipped; the others are still
        listed.  Commission plans are fetched once per call.
        """
        plans = self._commission_plans() if with_commission else None

        products: list[ProductDTO] = []
        for page in self._gateway.list_order_pages():
            try:
                page_products = self._gateway.list_products(page.id)
            except BillingError as exc:
                logger.warning("Skipping order page %s (%s): %s", page.id, page.name, exc)
                continue
            for product in page_products:
                products.append(self._to_dto(product, plans))

        logger.info("Listed %d products", len(products))
        return products

    def _commission_plans(self) -> list[CommissionPlan]:
        try:
            return self._gateway.list_commission_plans()
        except BillingError as exc:
            logger.warning("Commission plans unavailable: %s", exc)
            return []

    def _to_dto(self, product: BillingProduct, plans: list[CommissionPlan] | None) -> ProductDTO:
        mapped = self._mapper.has_billing_product(product.billing_id)
        internal_id = (
            self._mapper.to_internal_product_id(product.billing_id) if mapped else product.billing_id
        )
        commission = None
        if plans is not None:
            plan = CatalogMapper.plan_for_product(plans, product.billing_id)
            commission = commission_to_dto(commission_breakdown(product.pricing, plan))

        pricing = product.pricing
        return ProductDTO(
            id=internal_id,
            billing_id=product.billing_id,
            name=product.name,
            description=product.description,
            order_page_id=product.order_page.id,
            order_page_name=product.order_page.name,
            monthly_price=_amount(pricing.monthly),
            quarterly_price=_amount(pricing.quarterly),
            semiannually_price=_amount(pricing.semiannually),
            annually_price=_amount(pricing.annually),
            mapped=mapped,
            commission=commission,
        )


class ProductCommissionHandler:
    """Commission a storefront product earns under its HostBill plan."""

    def __init__(self, gateway: BillingGateway, mapper: CatalogMapper) -> None:
        self._gateway = gateway
        self._mapper = mapper

    def handle(self, internal_product_id: str) -> CommissionDTO:
        billing_id = self._mapper.to_billing_product_id(internal_product_id)
        plan = CatalogMapper.plan_for_product(self._gateway.list_commission_plans(), billing_id)
        return commission_to_dto(self._mapper.commission_for(internal_product_id, plan))


def commission_to_dto(breakdown: CommissionBreakdown) -> CommissionDTO:
    plan = breakdown.plan
    return CommissionDTO(
        plan_id=plan.plan_id if plan else None,
        plan_name=plan.name if plan else None,
        type=plan.type.value if plan else None,
        rate=str(plan.rate) if plan else None,
        monthly=_amount(breakdown.monthly),
        quarterly=_amount(breakdown.quarterly),
        semiannually=_amount(breakdown.semiannually),
        annually=_amount(breakdown.annually),
        has_commission=breakdown.has_commission,
    )


def _amount(money: Money | None) -> str | None:
    return f"{money.amount:.2f}" if money is not None else None
