"""HostBill-backed implementation of BillingGateway.

HostBill answers the same question in several shapes depending on the
call and the installed version (``order_id`` or ``id`` or
``data.order_id``; lists keyed by record id or plain arrays).  This
adapter absorbs all of that and hands canonical domain types upward.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from storefront.domain.exceptions import InvalidResponseError
from storefront.domain.model.affiliate import Affiliate
from storefront.domain.model.catalog import (
    BillingProduct,
    CommissionPlan,
    CommissionType,
    OrderPage,
    Pricing,
)
from storefront.domain.model.order import Client, CreatedOrder, Customer, OrderRequest
from storefront.domain.model.payment import PaymentRecord
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.billing_gateway import BillingGateway
from storefront.infrastructure.hostbill.client import HostBillClient

logger = logging.getLogger(__name__)


class HostBillGateway(BillingGateway):

    def __init__(self, client: HostBillClient, currency: str) -> None:
        self._client = client
        self._currency = currency

    # --- Clients --------------------------------------------------------------

    def find_client_by_email(self, email: str) -> Client | None:
        wanted = email.strip().lower()
        for raw in _records(self._client.call("getClients"), "clients"):
            if str(raw.get("email", "")).strip().lower() == wanted:
                return Client(
                    client_id=str(raw.get("id") or raw.get("client_id")),
                    email=raw.get("email", ""),
                    first_name=raw.get("firstname", ""),
                    last_name=raw.get("lastname", ""),
                )
        return None

    def add_client(self, customer: Customer, password: str, currency: str) -> Client:
        body = self._client.call("addClient", {
            "firstname": customer.first_name,
            "lastname": customer.last_name,
            "email": customer.email,
            "phonenumber": customer.phone,
            "address1": customer.address,
            "city": customer.city,
            "postcode": customer.postal_code,
            "country": customer.country,
            "state": customer.state,
            "companyname": customer.company,
            "password": password,
            "password2": password,
            "currency": currency,
        })
        client_id = _first(body, "client_id", "id", "clientId")
        if client_id is None:
            raise InvalidResponseError("addClient returned no client id", api_method="addClient")
        return Client(
            client_id=str(client_id),
            email=customer.email,
            first_name=customer.first_name,
            last_name=customer.last_name,
        )

    # --- Orders ---------------------------------------------------------------

    def add_order(self, request: OrderRequest) -> CreatedOrder:
        params: dict = {
            "client_id": request.client_id,
            "product": request.billing_product_id,
            "cycle": request.cycle.value,
            "confirm": 1,
            "invoice_generate": 1,
            "invoice_info": 1,
        }
        params.update(request.prefixed_config_options())
        for addon_id in request.billing_addon_ids:
            params[f"addons[{addon_id}][qty]"] = 1

        body = self._client.call("addOrder", params)
        order_id = _first(body, "order_id", "id")
        if order_id is None:
            order_id = _first(body.get("data"), "order_id", "id")
        if order_id is None:
            raise InvalidResponseError("addOrder returned no order id", api_method="addOrder")
        invoice_id = _first(body, "invoice_id", "invoice")
        return CreatedOrder(
            order_id=str(order_id),
            invoice_id=str(invoice_id) if invoice_id is not None else None,
            status=str(body.get("status") or "pending"),
        )

    def get_order_details(self, order_id: str) -> dict:
        body = self._client.call("getOrderDetails", {"id": order_id})
        details = body.get("details")
        if isinstance(details, dict) and details:
            return details
        return self._find_order(order_id)

    def _find_order(self, order_id: str) -> dict:
        """Older HostBill versions only expose orders through ``getOrders``."""
        body = self._client.call("getOrders", {"order_id": order_id})
        for raw in _records(body, "orders"):
            if str(order_id) in (str(raw.get("id")), str(raw.get("order_id"))):
                return raw
        return {}

    def get_order_number(self, order_id: str) -> str | None:
        number = self.get_order_details(order_id).get("number")
        return str(number) if number else None

    def set_order_referrer(self, order_id: str, affiliate_id: str) -> None:
        self._client.call("setOrderReferrer", {"id": order_id, "referral": affiliate_id})

    # --- Affiliates -----------------------------------------------------------

    def list_affiliates(self) -> list[Affiliate]:
        return [
            self._affiliate(raw)
            for raw in _records(self._client.call("getAffiliates"), "affiliates")
        ]

    def get_affiliate(self, affiliate_id: str) -> Affiliate | None:
        raw = self._client.call("getAffiliate", {"affiliate_id": affiliate_id}).get("affiliate")
        if not isinstance(raw, dict):
            return None
        return self._affiliate({"id": affiliate_id, **raw})

    @staticmethod
    def _affiliate(raw: dict) -> Affiliate:
        name = raw.get("name") or " ".join(
            part for part in (raw.get("firstname"), raw.get("lastname")) if part
        )
        return Affiliate(
            id=str(raw.get("id")),
            name=name,
            status=str(raw.get("status", "")),
            email=raw.get("email"),
        )

    def list_commission_plans(self) -> list[CommissionPlan]:
        body = self._client.call("getAffiliateCommisionPlans")
        plans = []
        for raw in _records(body, "commisions"):
            try:
                plans.append(self._commission_plan(raw))
            except (InvalidOperation, ValueError) as exc:
                logger.warning("Skipping malformed commission plan %s: %s", raw.get("id"), exc)
        return plans

    @staticmethod
    def _commission_plan(raw: dict) -> CommissionPlan:
        # Negative ids in applicable_products are exclusions.
        applicable = tuple(
            pid.strip()
            for pid in str(raw.get("applicable_products") or "").split(",")
            if pid.strip() and not pid.strip().startswith("-")
        )
        return CommissionPlan(
            plan_id=str(raw.get("id")),
            name=str(raw.get("name", "")),
            type=CommissionType.FIXED if raw.get("type") == "Fixed" else CommissionType.PERCENT,
            rate=Decimal(str(raw.get("rate") or "0")),
            applicable_product_ids=applicable,
            recurring=str(raw.get("recurring")) == "1",
        )

    # --- Products -------------------------------------------------------------

    def list_order_pages(self) -> list[OrderPage]:
        return [
            OrderPage(id=str(raw.get("id")), name=str(raw.get("name", "")))
            for raw in _records(self._client.call("getOrderPages"), "categories")
        ]

    def list_products(self, order_page_id: str) -> list[BillingProduct]:
        body = self._client.call("getProducts", {"id": order_page_id})
        page = OrderPage(id=str(order_page_id), name=str(body.get("name", "")))
        return [
            BillingProduct(
                billing_id=str(raw.get("id")),
                name=str(raw.get("name", "")),
                order_page=page,
                pricing=Pricing(
                    monthly=self._price(raw.get("m")) or Money.zero(self._currency),
                    quarterly=self._price(raw.get("q")),
                    semiannually=self._price(raw.get("s")),
                    annually=self._price(raw.get("a")),
                ),
                description=str(raw.get("description") or ""),
            )
            for raw in _records(body, "products")
        ]

    def _price(self, raw) -> Money | None:
        """HostBill marks a disabled cycle with an empty or negative price."""
        if raw in (None, ""):
            return None
        try:
            amount = Decimal(str(raw))
        except InvalidOperation:
            return None
        if amount < 0:
            return None
        return Money(amount, self._currency)

    # --- Payments -------------------------------------------------------------

    def list_payment_modules(self) -> dict[str, str]:
        modules = self._client.call("getPaymentModules").get("modules") or {}
        if isinstance(modules, list):
            return {str(m.get("id")): str(m.get("name", "")) for m in modules if isinstance(m, dict)}
        if not isinstance(modules, dict):
            return {}
        return {str(k): str(v) for k, v in modules.items()}

    def add_invoice_payment(self, payment: PaymentRecord) -> dict:
        return self._client.call("addInvoicePayment", {
            "id": payment.invoice_id,
            "amount": payment.amount,
            "paymentmodule": payment.gateway_module_id,
            "fee": payment.fee,
            "date": payment.date,
            "transnumber": payment.transaction_id,
            "send_email": payment.send_email,
        })

    def charge_credit_card(self, invoice_id: str, card_id: str | None = None,
                           amount: str | None = None) -> dict:
        return self._client.call("chargeCreditCard", {
            "id": invoice_id,
            "card_id": card_id,
            "custom[amount]": amount,
        })


# --- Response helpers -----------------------------------------------------


def _first(body, *keys: str):
    if not isinstance(body, dict):
        return None
    for key in keys:
        value = body.get(key)
        if value not in (None, ""):
            return value
    return None


def _records(body: dict, key: str) -> list[dict]:
    """A HostBill list, whether sent as an array or keyed by record id."""
    raw = body.get(key) or []
    if isinstance(raw, dict):
        records = []
        for record_id, record in raw.items():
            if isinstance(record, dict):
                records.append({"id": record_id, **record})
        return records
    if not isinstance(raw, list):
        return []
    return [r for r in raw if isinstance(r, dict)]
