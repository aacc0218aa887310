"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from storefront.application.affiliate_attribution import (
    AffiliateAttributionService,
    ValidateAffiliateHandler,
)
from storefront.application.cart_session import CartSession
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.domain.service.catalog_mapper import CatalogMapper
from storefront.infrastructure.config import Settings
from storefront.infrastructure.hostbill.client import HostBillClient
from storefront.infrastructure.hostbill.gateway import HostBillGateway
from storefront.infrastructure.persistence.json_catalog_repository import (
    JsonCatalogRepository,
)
from storefront.infrastructure.persistence.json_client_storage import (
    JsonClientStorage,
)
from storefront.infrastructure.web.metrics import RequestMetrics
from storefront.infrastructure.web.rate_limit import RateLimiter


def settings() -> Settings:
    return Settings.from_env()


def catalog_mapper(config: Settings) -> CatalogMapper:
    repo = JsonCatalogRepository(config.catalog_path, config.default_currency)
    return CatalogMapper(repo.load())


def billing_gateway(config: Settings) -> HostBillGateway:
    return HostBillGateway(HostBillClient(config.hostbill), config.default_currency)


def client_storage(config: Settings) -> JsonClientStorage:
    return JsonClientStorage(config.state_path)


def attribution_service(config: Settings, gateway: BillingGateway | None = None) -> AffiliateAttributionService:
    validator = ValidateAffiliateHandler(gateway) if gateway is not None else None
    return AffiliateAttributionService(client_storage(config), validator)


def cart_session(config: Settings) -> CartSession:
    return CartSession(client_storage(config), attribution_service(config))


@dataclass
class Container:
    """Everything the HTTP app needs, built once per process."""

    settings: Settings
    mapper: CatalogMapper
    gateway: BillingGateway
    metrics: RequestMetrics = field(default_factory=RequestMetrics)
    rate_limiter: RateLimiter | None = None

    def __post_init__(self) -> None:
        if self.rate_limiter is None:
            self.rate_limiter = RateLimiter(
                self.settings.rate_limit_max_requests,
                self.settings.rate_limit_window_ms / 1000,
            )


def build_container(config: Settings | None = None) -> Container:
    config = config or settings()
    return Container(
        settings=config,
        mapper=catalog_mapper(config),
        gateway=billing_gateway(config),
    )
