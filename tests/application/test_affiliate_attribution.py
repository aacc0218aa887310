"""Integration tests for the affiliate attribution store and validation.

Uses in-memory fakes for client storage and HostBill — no file I/O.
"""

import json
from datetime import datetime, timedelta, timezone

from storefront.application.affiliate_attribution import (
    STORAGE_KEY,
    AffiliateAttributionService,
    ValidateAffiliateHandler,
)
from storefront.domain.model.affiliate import Affiliate
from tests.fakes import FakeBillingGateway, InMemoryClientStorage

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
LANDING = "https://shop.example/?aff=7&aff_code=SPRING&utm_source=newsletter"


class _Clock:

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _setup():
    storage = InMemoryClientStorage()
    gateway = FakeBillingGateway()
    clock = _Clock(NOW)
    service = AffiliateAttributionService(storage, ValidateAffiliateHandler(gateway), clock)
    return service, storage, gateway, clock


# ── Capture and read ─────────────────────────────────────────────────────────


class TestCapture:

    def test_capture_stores_params(self):
        service, storage, _, _ = _setup()
        attribution = service.capture(LANDING)

        assert attribution.affiliate_id == "7"
        assert attribution.affiliate_code == "SPRING"
        raw = json.loads(storage.get(STORAGE_KEY))
        assert raw["id"] == "7"
        assert raw["source"] == "newsletter"
        assert raw["expires_at"] == (NOW + timedelta(days=30)).isoformat()

    def test_url_without_params_keeps_existing_record(self):
        service, _, _, _ = _setup()
        service.capture(LANDING)
        attribution = service.capture("https://shop.example/pricing")
        assert attribution.affiliate_id == "7"

    def test_url_without_params_and_no_record(self):
        service, storage, _, _ = _setup()
        assert service.capture("https://shop.example/") is None
        assert storage.keys() == set()

    def test_new_capture_replaces_and_restarts_window(self):
        service, _, _, clock = _setup()
        service.capture(LANDING)
        clock.now = NOW + timedelta(days=20)
        service.capture("https://shop.example/?ref=9")

        clock.now = NOW + timedelta(days=45)
        attribution = service.read()
        assert attribution.affiliate_id == "9"
        assert attribution.affiliate_code is None


class TestExpiry:

    def test_present_within_window(self):
        service, _, _, clock = _setup()
        service.capture(LANDING)
        clock.now = NOW + timedelta(days=29)
        assert service.read().affiliate_id == "7"

    def test_expired_record_is_deleted_on_read(self):
        service, storage, _, clock = _setup()
        service.capture(LANDING)
        clock.now = NOW + timedelta(days=30, seconds=1)

        assert service.read() is None
        assert storage.get(STORAGE_KEY) is None

    def test_unreadable_record_is_deleted(self):
        service, storage, _, _ = _setup()
        storage.set(STORAGE_KEY, "{not json")
        assert service.read() is None
        assert storage.get(STORAGE_KEY) is None

    def test_clear(self):
        service, storage, _, _ = _setup()
        service.capture(LANDING)
        service.clear()
        assert service.read() is None


# ── Validation ───────────────────────────────────────────────────────────────


class TestValidateAffiliate:

    def test_active_affiliate_is_valid(self):
        service, _, gateway, _ = _setup()
        gateway.affiliates["7"] = Affiliate("7", "Partner", "Active")
        assert service.validate("7")

    def test_inactive_affiliate_is_invalid(self):
        service, _, gateway, _ = _setup()
        gateway.affiliates["7"] = Affiliate("7", "Partner", "Pending")
        assert not service.validate("7")

    def test_unknown_affiliate_is_invalid(self):
        service, _, _, _ = _setup()
        assert not service.validate("404")

    def test_billing_failure_is_invalid(self):
        service, _, gateway, _ = _setup()
        gateway.affiliates["7"] = Affiliate("7", "Partner", "Active")
        gateway.fail_affiliates = True
        assert not service.validate("7")

    def test_without_billing_nothing_validates(self):
        service = AffiliateAttributionService(InMemoryClientStorage())
        assert not service.validate("7")

    def test_lookup_returns_affiliate(self):
        gateway = FakeBillingGateway()
        gateway.affiliates["7"] = Affiliate("7", "Partner", "Active", "p@example.com")
        affiliate = ValidateAffiliateHandler(gateway).lookup_active("7")
        assert affiliate.name == "Partner"

    def test_empty_id_is_invalid(self):
        assert ValidateAffiliateHandler(FakeBillingGateway()).lookup_active("") is None
