"""In-memory fakes for testing.

These implement the same abstract interfaces as the HostBill gateway and
the JSON repositories but keep everything in dicts. No network, no file
I/O, no side effects.
"""

from __future__ import annotations

from decimal import Decimal

from storefront.domain.exceptions import ConnectivityError, RemoteCallError
from storefront.domain.model.affiliate import Affiliate
from storefront.domain.model.cart import ServerSpecs
from storefront.domain.model.catalog import (
    AddonDefinition,
    BillingProduct,
    CatalogTable,
    CommissionPlan,
    CommissionType,
    OrderPage,
    Pricing,
    ProductDefinition,
)
from storefront.domain.model.order import Client, CreatedOrder, Customer, OrderRequest
from storefront.domain.model.payment import PaymentRecord
from storefront.domain.model.value_objects import BillingCycle, Money
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.domain.repository.catalog_repository import CatalogRepository
from storefront.domain.repository.client_storage import ClientStorage


def make_catalog() -> CatalogTable:
    """Storefront products 1, 3 and 4 are mapped; 2 deliberately is not."""
    addons = [
        AddonDefinition("ssl_cert", "6", "SSL Certificate", Money.of("99"), BillingCycle.ANNUALLY),
        AddonDefinition("backup", "7", "Automatic Backups", Money.of("50")),
        AddonDefinition("monitoring", "8", "24/7 Monitoring", Money.of("75")),
    ]
    products = [
        ProductDefinition(
            internal_id="1",
            billing_id="10",
            name="VPS Basic",
            pricing=Pricing(Money.of("299"), Money.of("850"), None, Money.of("3200")),
            specs=ServerSpecs("1 vCPU", "1 GB RAM", "20 GB SSD"),
            available_addon_ids=("ssl_cert", "backup", "monitoring"),
            config_option_choices={"ram": ("1", "2"), "storage": ("1", "2")},
        ),
        ProductDefinition(
            internal_id="3",
            billing_id="12",
            name="VPS Enterprise",
            pricing=Pricing(Money.of("1299"), Money.of("3700"), None, Money.of("14000")),
            specs=ServerSpecs("4 vCPU", "8 GB RAM", "160 GB SSD"),
            available_addon_ids=("backup",),
        ),
        ProductDefinition(
            internal_id="4",
            billing_id="5",
            name="VPS Premium",
            pricing=Pricing(Money.of("2499")),
        ),
    ]
    return CatalogTable(products=products, addons=addons)


class FakeCatalogRepository(CatalogRepository):

    def __init__(self, table: CatalogTable | None = None) -> None:
        self._table = table or make_catalog()

    def load(self) -> CatalogTable:
        return self._table


class InMemoryClientStorage(ClientStorage):

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def remove(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> set[str]:
        return set(self._store)


class FakeBillingGateway(BillingGateway):
    """Scriptable HostBill stand-in that records every call it receives."""

    def __init__(self) -> None:
        self.clients: dict[str, Client] = {}
        self.created_clients: list[tuple[Customer, str, str]] = []
        self.order_requests: list[OrderRequest] = []
        self.created_order_ids: set[str] = set()
        self.order_numbers: dict[str, str] = {}
        self.referrers: list[tuple[str, str]] = []
        self.affiliates: dict[str, Affiliate] = {}
        self.commission_plans: list[CommissionPlan] = []
        self.order_pages: list[OrderPage] = []
        self.products: dict[str, list[BillingProduct]] = {}
        self.payment_modules: dict[str, str] = {}
        self.payments: list[PaymentRecord] = []
        self.card_charges: list[tuple[str, str | None, str | None]] = []

        # Failure switches
        self.failing_products: set[str] = set()
        self.failing_order_pages: set[str] = set()
        self.fail_order_pages = False
        self.fail_client_lookup = False
        self.fail_order_numbers = False
        self.fail_referrer = False
        self.fail_affiliates = False
        self.fail_commission_plans = False
        self.fail_payment_modules = False

        self._next_client_id = 1
        self._next_order_id = 100

    # --- Clients --------------------------------------------------------------

    def find_client_by_email(self, email: str) -> Client | None:
        if self.fail_client_lookup:
            raise ConnectivityError("HostBill unreachable", api_method="getClients")
        return self.clients.get(email.lower())

    def add_client(self, customer: Customer, password: str, currency: str) -> Client:
        client = Client(
            client_id=str(self._next_client_id),
            email=customer.email,
            first_name=customer.first_name,
            last_name=customer.last_name,
        )
        self._next_client_id += 1
        self.clients[customer.email.lower()] = client
        self.created_clients.append((customer, password, currency))
        return client

    # --- Orders ---------------------------------------------------------------

    def add_order(self, request: OrderRequest) -> CreatedOrder:
        if request.billing_product_id in self.failing_products:
            raise RemoteCallError("Product is out of stock", api_method="addOrder")
        self.order_requests.append(request)
        order_id = str(self._next_order_id)
        self.created_order_ids.add(order_id)
        self._next_order_id += 1
        return CreatedOrder(order_id=order_id, invoice_id=f"9{order_id}")

    def get_order_number(self, order_id: str) -> str | None:
        if self.fail_order_numbers:
            raise RemoteCallError("getOrderDetails failed", api_method="getOrderDetails")
        return self.order_numbers.get(order_id, f"ORD-{order_id}")

    def get_order_details(self, order_id: str) -> dict:
        if order_id not in self.created_order_ids:
            return {}
        return {
            "id": order_id,
            "number": self.order_numbers.get(order_id, f"ORD-{order_id}"),
            "status": "Pending",
            "client_id": "1",
            "invoice_id": f"9{order_id}",
            "total": "299.00",
        }

    def set_order_referrer(self, order_id: str, affiliate_id: str) -> None:
        if self.fail_referrer:
            raise RemoteCallError("Referrer rejected", api_method="setOrderReferrer")
        self.referrers.append((order_id, affiliate_id))

    # --- Affiliates -----------------------------------------------------------

    def get_affiliate(self, affiliate_id: str) -> Affiliate | None:
        if self.fail_affiliates:
            raise ConnectivityError("HostBill unreachable", api_method="getAffiliates")
        return self.affiliates.get(affiliate_id)

    def list_affiliates(self) -> list[Affiliate]:
        if self.fail_affiliates:
            raise ConnectivityError("HostBill unreachable", api_method="getAffiliates")
        return list(self.affiliates.values())

    def list_commission_plans(self) -> list[CommissionPlan]:
        if self.fail_commission_plans:
            raise RemoteCallError("Plans unavailable", api_method="getAffiliateCommisionPlans")
        return list(self.commission_plans)

    # --- Products -------------------------------------------------------------

    def list_order_pages(self) -> list[OrderPage]:
        if self.fail_order_pages:
            raise ConnectivityError("HostBill unreachable", api_method="getOrderPages")
        return list(self.order_pages)

    def list_products(self, order_page_id: str) -> list[BillingProduct]:
        if order_page_id in self.failing_order_pages:
            raise RemoteCallError("Order page broken", api_method="getProducts")
        return list(self.products.get(order_page_id, []))

    # --- Payments -------------------------------------------------------------

    def list_payment_modules(self) -> dict[str, str]:
        if self.fail_payment_modules:
            raise ConnectivityError("HostBill unreachable", api_method="getPaymentModules")
        return dict(self.payment_modules)

    def add_invoice_payment(self, payment: PaymentRecord) -> dict:
        self.payments.append(payment)
        return {"success": True, "invoice_id": payment.invoice_id}

    def charge_credit_card(self, invoice_id: str, card_id: str | None = None,
                           amount: str | None = None) -> dict:
        self.card_charges.append((invoice_id, card_id, amount))
        return {"success": True, "invoice_id": invoice_id}


def percent_plan(rate: str = "10", products: tuple[str, ...] = ("10",)) -> CommissionPlan:
    return CommissionPlan(
        plan_id="1",
        name="Standard",
        type=CommissionType.PERCENT,
        rate=Decimal(rate),
        applicable_product_ids=products,
    )
