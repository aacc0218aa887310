"""JSON-file-backed implementation of CatalogRepository."""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.exceptions import ConfigurationError
from storefront.domain.model.cart import ServerSpecs
from storefront.domain.model.catalog import (
    AddonDefinition,
    CatalogTable,
    Pricing,
    ProductDefinition,
)
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, BillingCycle, Money
from storefront.domain.repository.catalog_repository import CatalogRepository


class JsonCatalogRepository(CatalogRepository):

    def __init__(self, file_path: Path, currency: str = DEFAULT_CURRENCY) -> None:
        self._file_path = file_path
        self._currency = currency

    # --- CatalogRepository interface ------------------------------------------

    def load(self) -> CatalogTable:
        raw = self._load_raw()
        try:
            products = [self._to_product(p) for p in raw.get("products", [])]
            addons = [self._to_addon(a) for a in raw.get("addons", [])]
        except (KeyError, TypeError) as exc:
            raise ConfigurationError(f"Malformed catalog {self._file_path}: {exc}") from exc
        return CatalogTable(products=products, addons=addons)

    # --- Serialization --------------------------------------------------------

    def _money(self, raw) -> Money | None:
        if raw is None:
            return None
        return Money.of(raw, self._currency)

    def _to_product(self, raw: dict) -> ProductDefinition:
        pricing = raw["pricing"]
        return ProductDefinition(
            internal_id=str(raw["id"]),
            billing_id=str(raw["hostbill_id"]),
            name=raw["name"],
            pricing=Pricing(
                monthly=self._money(pricing["monthly"]),
                quarterly=self._money(pricing.get("quarterly")),
                semiannually=self._money(pricing.get("semiannually")),
                annually=self._money(pricing.get("annually")),
            ),
            specs=ServerSpecs(**raw.get("specs", {})),
            available_addon_ids=tuple(str(a) for a in raw.get("addons", [])),
            config_option_choices={
                key: tuple(str(v) for v in values)
                for key, values in raw.get("config_options", {}).items()
            },
        )

    def _to_addon(self, raw: dict) -> AddonDefinition:
        return AddonDefinition(
            internal_id=str(raw["id"]),
            billing_id=str(raw["hostbill_id"]),
            name=raw["name"],
            price=self._money(raw["price"]),
            cycle=BillingCycle.parse(raw.get("cycle")),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        if not self._file_path.exists():
            raise ConfigurationError(f"Catalog file not found: {self._file_path}")
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except ValueError as exc:
            raise ConfigurationError(f"Catalog file is not valid JSON: {self._file_path}") from exc
