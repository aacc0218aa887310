"""Application service: Affiliate Attribution Store.

Captures affiliate parameters from landing URLs, keeps them in client
storage for the 30-day attribution window and answers "who referred this
visitor" at checkout.  Expiry is checked lazily on every read.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable

from storefront.domain.exceptions import BillingError
from storefront.domain.model.affiliate import (
    Affiliate,
    AffiliateAttribution,
    AffiliateParams,
    extract_params,
)
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.domain.repository.client_storage import ClientStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "affiliate_data"
COOKIE_NAME = "hb_affiliate"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidateAffiliateHandler:
    """Confirms an affiliate with HostBill before it may earn commission."""

    def __init__(self, gateway: BillingGateway) -> None:
        self._gateway = gateway

    def lookup_active(self, affiliate_id: str | None) -> Affiliate | None:
        """Return the affiliate if it exists and is Active.

        Any billing failure counts as "not valid": an unverifiable
        affiliate must never earn commission.
        """
        if not affiliate_id:
            return None
        try:
            affiliate = self._gateway.get_affiliate(str(affiliate_id))
        except BillingError as exc:
            logger.warning("Affiliate validation failed for %s: %s", affiliate_id, exc)
            return None
        if affiliate is None or not affiliate.is_active:
            logger.info("Affiliate %s is unknown or not active", affiliate_id)
            return None
        return affiliate

    def handle(self, affiliate_id: str | None) -> bool:
        return self.lookup_active(affiliate_id) is not None


class AffiliateAttributionService:

    def __init__(
        self,
        storage: ClientStorage,
        validator: ValidateAffiliateHandler | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._storage = storage
        self._validator = validator
        self._clock = clock

    @staticmethod
    def extract_params(url: str) -> AffiliateParams:
        return extract_params(url)

    def store(self, params: AffiliateParams) -> AffiliateAttribution:
        """Persist ``params`` with a fresh 30-day window, replacing any record."""
        attribution = AffiliateAttribution.capture(params, self._clock())
        self._storage.set(STORAGE_KEY, json.dumps(self._to_raw(attribution)))
        logger.info(
            "Affiliate attribution stored: id=%s code=%s expires=%s",
            params.id, params.code, attribution.expires_at.isoformat(),
        )
        return attribution

    def capture(self, url: str) -> AffiliateAttribution | None:
        """Store the URL's affiliate parameters if it carries any.

        A URL without affiliate parameters leaves the existing record
        untouched and returns it (or None).
        """
        params = extract_params(url)
        if params.is_present:
            return self.store(params)
        return self.read()

    def read(self) -> AffiliateAttribution | None:
        """Return the live attribution, deleting it if it has expired."""
        raw = self._storage.get(STORAGE_KEY)
        if raw is None:
            return None
        try:
            attribution = self._to_domain(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable affiliate record: %s", exc)
            self._storage.remove(STORAGE_KEY)
            return None

        if attribution.is_expired(self._clock()):
            logger.info("Affiliate attribution %s expired, removing", attribution.affiliate_id)
            self._storage.remove(STORAGE_KEY)
            return None
        return attribution

    def clear(self) -> None:
        self._storage.remove(STORAGE_KEY)

    def validate(self, affiliate_id: str | None) -> bool:
        """Fail-closed check; without a billing connection nothing validates."""
        if self._validator is None:
            return False
        return self._validator.handle(affiliate_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(attribution: AffiliateAttribution) -> dict:
        p = attribution.params
        return {
            "id": p.id,
            "code": p.code,
            "campaign": p.campaign,
            "source": p.source,
            "medium": p.medium,
            "captured_at": attribution.captured_at.isoformat(),
            "expires_at": attribution.expires_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> AffiliateAttribution:
        return AffiliateAttribution(
            params=AffiliateParams(
                id=raw.get("id"),
                code=raw.get("code"),
                campaign=raw.get("campaign"),
                source=raw.get("source"),
                medium=raw.get("medium"),
            ),
            captured_at=datetime.fromisoformat(raw["captured_at"]),
            expires_at=datetime.fromisoformat(raw["expires_at"]),
        )
