"""Abstract port to the billing system (HostBill).

Every method speaks in canonical domain types.  Implementations are
responsible for translating raw API shapes (``order_id`` vs ``id`` vs
``data.order_id``) so callers never branch on response variance.

Implementations raise ``BillingError`` subclasses on failure and never
retry on their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.affiliate import Affiliate
from storefront.domain.model.catalog import BillingProduct, CommissionPlan, OrderPage
from storefront.domain.model.order import Client, CreatedOrder, Customer, OrderRequest
from storefront.domain.model.payment import PaymentRecord


class BillingGateway(ABC):

    # --- Clients --------------------------------------------------------------

    @abstractmethod
    def find_client_by_email(self, email: str) -> Client | None:
        """Return the client whose email matches case-insensitively, or None."""

    @abstractmethod
    def add_client(self, customer: Customer, password: str, currency: str) -> Client:
        """Create a client account."""

    # --- Orders ---------------------------------------------------------------

    @abstractmethod
    def add_order(self, request: OrderRequest) -> CreatedOrder:
        """Create, confirm and invoice one order."""

    @abstractmethod
    def get_order_number(self, order_id: str) -> str | None:
        """Return the human-readable order number, or None if HostBill has none."""

    @abstractmethod
    def get_order_details(self, order_id: str) -> dict:
        """Return the raw order details record."""

    @abstractmethod
    def set_order_referrer(self, order_id: str, affiliate_id: str) -> None:
        """Attribute an existing order to an affiliate."""

    # --- Affiliates -----------------------------------------------------------

    @abstractmethod
    def get_affiliate(self, affiliate_id: str) -> Affiliate | None:
        """Return the affiliate account, or None if it does not exist."""

    @abstractmethod
    def list_affiliates(self) -> list[Affiliate]:
        """Return every affiliate account."""

    @abstractmethod
    def list_commission_plans(self) -> list[CommissionPlan]:
        """Return every affiliate commission plan."""

    # --- Products -------------------------------------------------------------

    @abstractmethod
    def list_order_pages(self) -> list[OrderPage]:
        """Return the order pages (product categories)."""

    @abstractmethod
    def list_products(self, order_page_id: str) -> list[BillingProduct]:
        """Return the products published on one order page."""

    # --- Payments -------------------------------------------------------------

    @abstractmethod
    def list_payment_modules(self) -> dict[str, str]:
        """Return active payment modules as ``{module_id: module_name}``."""

    @abstractmethod
    def add_invoice_payment(self, payment: PaymentRecord) -> dict:
        """Book a payment against an invoice."""

    @abstractmethod
    def charge_credit_card(self, invoice_id: str, card_id: str | None = None,
                           amount: str | None = None) -> dict:
        """Charge a stored credit card for an invoice."""
