"""Catalog definitions and commission plans.

The storefront sells products under its own IDs; HostBill knows them under
different IDs.  A ``CatalogTable`` holds both sides of that mapping and is
treated as an immutable snapshot: it is replaced whole, never patched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import ServerSpecs
from storefront.domain.model.value_objects import BillingCycle, Money


@dataclass(frozen=True)
class Pricing:
    monthly: Money
    quarterly: Money | None = None
    semiannually: Money | None = None
    annually: Money | None = None

    def for_cycle(self, cycle: BillingCycle) -> Money | None:
        return {
            BillingCycle.MONTHLY: self.monthly,
            BillingCycle.QUARTERLY: self.quarterly,
            BillingCycle.SEMIANNUALLY: self.semiannually,
            BillingCycle.ANNUALLY: self.annually,
        }[cycle]


@dataclass(frozen=True)
class AddonDefinition:
    internal_id: str
    billing_id: str
    name: str
    price: Money
    cycle: BillingCycle = BillingCycle.MONTHLY


@dataclass(frozen=True)
class ProductDefinition:
    internal_id: str
    billing_id: str
    name: str
    pricing: Pricing
    specs: ServerSpecs = field(default_factory=ServerSpecs)
    available_addon_ids: tuple[str, ...] = ()
    config_option_choices: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderPage:
    id: str
    name: str


@dataclass(frozen=True)
class BillingProduct:
    """A product as listed by HostBill (billing IDs, per-cycle prices)."""

    billing_id: str
    name: str
    order_page: OrderPage
    pricing: Pricing
    description: str = ""


class CatalogTable:
    """Immutable snapshot of every product and addon the storefront offers.

    Construction validates that the internal <-> billing mapping is a
    bijection for products and for addons, so lookups in either direction
    are total over the offered catalog.
    """

    def __init__(
        self,
        products: list[ProductDefinition],
        addons: list[AddonDefinition],
    ) -> None:
        self._products = _index(products, "product", lambda p: p.internal_id)
        self._products_by_billing = _index(products, "billing product", lambda p: p.billing_id)
        self._addons = _index(addons, "addon", lambda a: a.internal_id)
        self._addons_by_billing = _index(addons, "billing addon", lambda a: a.billing_id)

        for product in products:
            for addon_id in product.available_addon_ids:
                if addon_id not in self._addons:
                    raise ValidationError(
                        f"Product '{product.internal_id}' whitelists unknown addon '{addon_id}'"
                    )

    @property
    def products(self) -> Mapping[str, ProductDefinition]:
        return self._products

    @property
    def products_by_billing_id(self) -> Mapping[str, ProductDefinition]:
        return self._products_by_billing

    @property
    def addons(self) -> Mapping[str, AddonDefinition]:
        return self._addons

    @property
    def addons_by_billing_id(self) -> Mapping[str, AddonDefinition]:
        return self._addons_by_billing


def _index(entries: list, kind: str, key) -> Mapping:
    result: dict = {}
    for entry in entries:
        k = str(key(entry))
        if k in result:
            raise ValidationError(f"Duplicate {kind} ID '{k}' in catalog")
        result[k] = entry
    return MappingProxyType(result)


# ---------------------------------------------------------------------------
# Commissions
# ---------------------------------------------------------------------------


class CommissionType(Enum):
    PERCENT = "Percent"
    FIXED = "Fixed"


@dataclass(frozen=True)
class CommissionPlan:
    plan_id: str
    name: str
    type: CommissionType
    rate: Decimal
    applicable_product_ids: tuple[str, ...] = ()
    recurring: bool = False

    def applies_to(self, billing_product_id: str) -> bool:
        return str(billing_product_id) in self.applicable_product_ids


@dataclass(frozen=True)
class CommissionBreakdown:
    monthly: Money
    quarterly: Money
    semiannually: Money
    annually: Money
    has_commission: bool
    plan: CommissionPlan | None = None

    @staticmethod
    def none() -> CommissionBreakdown:
        zero = Money.zero()
        return CommissionBreakdown(zero, zero, zero, zero, has_commission=False)


def commission_amount(price: Money | None, plan: CommissionPlan | None) -> Money:
    """Commission earned on ``price`` under ``plan``, rounded to cents.

    Percent plans pay ``price * rate / 100``; fixed plans pay ``rate``
    regardless of price.  No plan or no price pays nothing.
    """
    if plan is None or price is None or price.amount == 0:
        return Money.zero()
    if plan.type is CommissionType.PERCENT:
        return Money(price.amount * plan.rate / Decimal(100), price.currency).rounded()
    return Money(plan.rate, price.currency).rounded()


def commission_breakdown(pricing: Pricing, plan: CommissionPlan | None) -> CommissionBreakdown:
    """Commission for every billing cycle of ``pricing``."""
    if plan is None:
        return CommissionBreakdown.none()
    return CommissionBreakdown(
        monthly=commission_amount(pricing.for_cycle(BillingCycle.MONTHLY), plan),
        quarterly=commission_amount(pricing.for_cycle(BillingCycle.QUARTERLY), plan),
        semiannually=commission_amount(pricing.for_cycle(BillingCycle.SEMIANNUALLY), plan),
        annually=commission_amount(pricing.for_cycle(BillingCycle.ANNUALLY), plan),
        has_commission=True,
        plan=plan,
    )
