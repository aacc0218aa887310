"""Domain service: Catalog Mapper.

Translates between storefront product/addon IDs and HostBill IDs, and
prices affiliate commissions per billing cycle.

Unmapped IDs always raise ``MappingError``.  There is deliberately no
"default product" substitution: ordering a different server than the
one in the cart is worse than failing the line.
"""

from __future__ import annotations

import logging
import threading
from typing import Mapping

from storefront.domain.exceptions import MappingError, ValidationError
from storefront.domain.model.catalog import (
    AddonDefinition,
    CatalogTable,
    CommissionBreakdown,
    CommissionPlan,
    ProductDefinition,
    commission_breakdown,
)
from storefront.domain.model.order import CONFIG_OPTION_PREFIX

logger = logging.getLogger(__name__)


class CatalogMapper:

    def __init__(self, table: CatalogTable) -> None:
        self._table = table
        self._refresh_lock = threading.Lock()

    # --- Table management -----------------------------------------------------

    @property
    def table(self) -> CatalogTable:
        return self._table

    def refresh(self, table: CatalogTable) -> None:
        """Swap in a new catalog.

        The table is replaced by a single reference assignment, so a
        concurrent reader sees either the old table or the new one, never
        a mix.  The lock only serializes competing refreshes.
        """
        with self._refresh_lock:
            self._table = table
        logger.info(
            "Catalog refreshed: %d products, %d addons",
            len(table.products), len(table.addons),
        )

    # --- Products -------------------------------------------------------------

    def product(self, internal_id: str) -> ProductDefinition:
        product = self._table.products.get(str(internal_id))
        if product is None:
            logger.warning("No billing mapping for storefront product %s", internal_id)
            raise MappingError(f"No billing product mapped for storefront product '{internal_id}'")
        return product

    def to_billing_product_id(self, internal_id: str) -> str:
        return self.product(internal_id).billing_id

    def to_internal_product_id(self, billing_id: str) -> str:
        product = self._table.products_by_billing_id.get(str(billing_id))
        if product is None:
            raise MappingError(f"No storefront product mapped for billing product '{billing_id}'")
        return product.internal_id

    def has_billing_product(self, billing_id: str) -> bool:
        return str(billing_id) in self._table.products_by_billing_id

    # --- Addons ---------------------------------------------------------------

    def to_billing_addon_id(self, internal_addon_id: str) -> str:
        addon = self._table.addons.get(str(internal_addon_id))
        if addon is None:
            raise MappingError(f"No billing addon mapped for storefront addon '{internal_addon_id}'")
        return addon.billing_id

    def addons_for_order(self, internal_product_id: str, internal_addon_ids) -> tuple[str, ...]:
        """Billing IDs of the selected addons; each must be whitelisted for the product."""
        product = self.product(internal_product_id)
        billing_ids = []
        for addon_id in internal_addon_ids:
            billing_id = self.to_billing_addon_id(addon_id)
            if str(addon_id) not in product.available_addon_ids:
                raise MappingError(f"Addon '{addon_id}' is not available for product '{product.name}'")
            billing_ids.append(billing_id)
        return tuple(billing_ids)

    def check_config_options(self, internal_product_id: str, options: Mapping[str, str]) -> None:
        """Reject values outside the product's known choices.

        Keys without a choice list (e.g. the OS template) pass through.
        """
        choices = self.product(internal_product_id).config_option_choices
        for key, value in options.items():
            allowed = choices.get(key.removeprefix(CONFIG_OPTION_PREFIX))
            if allowed is not None and str(value) not in allowed:
                raise ValidationError(
                    f"Invalid value {value!r} for option '{key}' (allowed: {', '.join(allowed)})"
                )

    def available_addons(self, internal_product_id: str) -> list[AddonDefinition]:
        """Addons whitelisted for a product; empty for unknown products."""
        table = self._table
        product = table.products.get(str(internal_product_id))
        if product is None:
            return []
        return [table.addons[addon_id] for addon_id in product.available_addon_ids]

    # --- Commissions ----------------------------------------------------------

    @staticmethod
    def plan_for_product(
        plans: list[CommissionPlan], billing_product_id: str
    ) -> CommissionPlan | None:
        """Pick the commission plan covering a billing product.

        When several plans list the same product the last one wins, which
        is how HostBill itself resolves overlapping plans.
        """
        found: CommissionPlan | None = None
        for plan in plans:
            if plan.applies_to(billing_product_id):
                found = plan
        return found

    def commission_for(
        self, internal_product_id: str, plan: CommissionPlan | None
    ) -> CommissionBreakdown:
        """Commission per billing cycle for one storefront product."""
        if plan is None:
            return CommissionBreakdown.none()
        return commission_breakdown(self.product(internal_product_id).pricing, plan)

    # --- Introspection --------------------------------------------------------

    def mapping_snapshot(self) -> dict[str, dict[str, str]]:
        table = self._table
        return {
            "storefront_to_billing": {
                pid: p.billing_id for pid, p in table.products.items()
            },
            "billing_to_storefront": {
                bid: p.internal_id for bid, p in table.products_by_billing_id.items()
            },
            "addons": {aid: a.billing_id for aid, a in table.addons.items()},
        }
