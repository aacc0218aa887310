"""Application service: Cart Session.

Wraps the ``Cart`` aggregate with durable client-side persistence.  The
full cart is written to storage after every transition, so a reload
always restores exactly what the visitor last saw.
"""

from __future__ import annotations

import json
import logging

from storefront.application.affiliate_attribution import AffiliateAttributionService
from storefront.domain.exceptions import DomainException
from storefront.domain.model.affiliate import AffiliateParams
from storefront.domain.model.cart import Cart, CartItem, ServerSpecs
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.client_storage import ClientStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart"


class CartSession:

    def __init__(
        self,
        storage: ClientStorage,
        attribution: AffiliateAttributionService,
    ) -> None:
        self._storage = storage
        self._attribution = attribution
        self._cart = Cart()

    @property
    def cart(self) -> Cart:
        return self._cart

    def load(self, url: str | None = None) -> Cart:
        """Restore the persisted cart, then apply affiliate attribution.

        Affiliate parameters on the current URL win over whatever was
        restored and are written to the attribution store.  Without URL
        parameters a live stored attribution is applied instead.
        """
        self._cart = self._restore()

        params = self._attribution.extract_params(url) if url else None
        if params is not None and params.is_present:
            self._attribution.store(params)
            self._cart.set_affiliate(params.id, params.code)
            self._save()
        else:
            stored = self._attribution.read()
            if stored is not None:
                self._cart.set_affiliate(stored.affiliate_id, stored.affiliate_code)
                self._save()
            elif self._cart.affiliate_id or self._cart.affiliate_code:
                # The cart's copy must not outlive the attribution window.
                self._cart.set_affiliate(None, None)
                self._save()
        return self._cart

    # --- Transitions ----------------------------------------------------------

    def add_item(self, item: CartItem) -> Cart:
        self._cart.add_item(item)
        self._save()
        return self._cart

    def remove_item(self, item_id: str) -> Cart:
        self._cart.remove_item(item_id)
        self._save()
        return self._cart

    def update_quantity(self, item_id: str, quantity: int) -> Cart:
        self._cart.update_quantity(item_id, quantity)
        self._save()
        return self._cart

    def clear(self) -> Cart:
        self._cart.clear()
        self._save()
        return self._cart

    def set_affiliate(self, affiliate_id: str | None, affiliate_code: str | None) -> Cart:
        """Attribute the cart explicitly; starts a fresh window like a landing URL."""
        params = AffiliateParams(id=affiliate_id, code=affiliate_code)
        if params.is_present:
            self._attribution.store(params)
        else:
            self._attribution.clear()
        self._cart.set_affiliate(affiliate_id, affiliate_code)
        self._save()
        return self._cart

    # --- Persistence ----------------------------------------------------------

    def _save(self) -> None:
        self._storage.set(STORAGE_KEY, json.dumps(self._to_raw(self._cart)))

    def _restore(self) -> Cart:
        raw = self._storage.get(STORAGE_KEY)
        if raw is None:
            return Cart()
        try:
            return self._to_domain(json.loads(raw))
        except (ValueError, KeyError, TypeError, DomainException) as exc:
            logger.warning("Discarding unreadable cart state: %s", exc)
            self._storage.remove(STORAGE_KEY)
            return Cart()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(cart: Cart) -> dict:
        return {
            "items": [
                {
                    "id": item.id,
                    "name": item.name,
                    "price": item.unit_price,
                    "quantity": item.quantity.value,
                    "hostbill_product_id": item.billing_product_id,
                    "specs": {
                        "cpu": item.specs.cpu,
                        "ram": item.specs.ram,
                        "storage": item.specs.storage,
                    },
                }
                for item in cart.items
            ],
            "affiliate_id": cart.affiliate_id,
            "affiliate_code": cart.affiliate_code,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Cart:
        items = [
            CartItem(
                id=str(i["id"]),
                name=i.get("name", ""),
                unit_price=i.get("price", ""),
                specs=ServerSpecs(**i.get("specs", {})),
                billing_product_id=i.get("hostbill_product_id"),
                quantity=Quantity(i.get("quantity", 1)),
            )
            for i in raw.get("items", [])
        ]
        return Cart(
            items=items,
            affiliate_id=raw.get("affiliate_id"),
            affiliate_code=raw.get("affiliate_code"),
        )
