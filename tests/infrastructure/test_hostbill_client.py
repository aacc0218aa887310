"""Tests for the HostBill API client and gateway.

HTTP is served by ``httpx.MockTransport`` — no network I/O.
"""

from urllib.parse import parse_qs

import httpx
import pytest

from storefront.application.dto import CustomerSpec, OrderItemSpec
from storefront.application.place_order import PlaceOrderHandler
from storefront.domain.exceptions import (
    ConfigurationError,
    ConnectivityError,
    GatewayTimeoutError,
    InvalidResponseError,
    RemoteCallError,
)
from storefront.domain.model.order import Customer, OrderRequest
from storefront.domain.model.payment import PaymentRecord
from storefront.domain.model.value_objects import BillingCycle, Money
from storefront.domain.service.catalog_mapper import CatalogMapper
from storefront.infrastructure.config import HostBillConfig
from storefront.infrastructure.hostbill.client import HostBillClient
from storefront.infrastructure.hostbill.gateway import HostBillGateway
from tests.fakes import make_catalog

CONFIG = HostBillConfig(
    api_url="https://billing.example/admin/api.php",
    api_id="api-id",
    api_key="super-secret-key",
    client_url="https://billing.example",
)


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def _client(handler) -> HostBillClient:
    return HostBillClient(CONFIG, transport=httpx.MockTransport(handler))


def _gateway(responses: dict[str, dict]):
    """Gateway whose HostBill answers each ``call`` with a canned body."""
    sent: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        form = _form(request)
        sent.append(form)
        return httpx.Response(200, json=responses.get(form["call"], {"success": True}))

    return HostBillGateway(_client(handler), "CZK"), sent


# ── Client ───────────────────────────────────────────────────────────────────


class TestHostBillClient:

    def test_credentials_and_params_sent_as_form(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["form"] = _form(request)
            return httpx.Response(200, json={"success": True, "clients": []})

        body = _client(handler).call("getClients", {"page": 2, "skip": None, "confirm": True})

        assert body == {"success": True, "clients": []}
        assert seen["method"] == "POST"
        assert seen["url"] == CONFIG.api_url
        assert seen["form"] == {
            "page": "2",
            "confirm": "1",
            "api_id": "api-id",
            "api_key": "super-secret-key",
            "call": "getClients",
        }

    def test_params_cannot_override_credentials(self):
        seen = {}

        def handler(request):
            seen.update(_form(request))
            return httpx.Response(200, json={"success": True})

        _client(handler).call("getClients", {"api_key": "forged", "call": "deleteClient"})

        assert seen["api_key"] == "super-secret-key"
        assert seen["call"] == "getClients"

    def test_success_false_raises_remote_error(self):
        client = _client(lambda r: httpx.Response(200, json={"success": False, "error": ["Invalid product", "Try again"]}))
        with pytest.raises(RemoteCallError, match="Invalid product; Try again") as exc_info:
            client.call("addOrder")
        assert exc_info.value.api_method == "addOrder"

    def test_non_json_body(self):
        client = _client(lambda r: httpx.Response(502, text="<html>Bad gateway</html>"))
        with pytest.raises(InvalidResponseError, match="HTTP 502"):
            client.call("getClients")

    def test_non_object_body(self):
        client = _client(lambda r: httpx.Response(200, json=["unexpected"]))
        with pytest.raises(InvalidResponseError, match="list"):
            client.call("getClients")

    def test_http_error_status(self):
        client = _client(lambda r: httpx.Response(500, json={"message": "boom"}))
        with pytest.raises(RemoteCallError, match="HTTP 500"):
            client.call("getClients")

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GatewayTimeoutError, match="getClients"):
            _client(handler).call("getClients")

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ConnectivityError) as exc_info:
            _client(handler).call("getClients")
        assert not isinstance(exc_info.value, GatewayTimeoutError)

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError, match="HOSTBILL_API_KEY"):
            HostBillClient(HostBillConfig(api_url="https://billing.example", api_id="x"))


# ── Gateway ──────────────────────────────────────────────────────────────────


class TestClients:

    def test_find_client_case_insensitive(self):
        gateway, _ = _gateway({"getClients": {"success": True, "clients": [
            {"id": "3", "email": "other@example.com"},
            {"id": "4", "email": "Jane@Example.com", "firstname": "Jane", "lastname": "Doe"},
        ]}})
        client = gateway.find_client_by_email("jane@example.COM")
        assert client.client_id == "4"
        assert client.first_name == "Jane"

    def test_find_client_in_keyed_list(self):
        gateway, _ = _gateway({"getClients": {"success": True, "clients": {
            "8": {"email": "jane@example.com"},
        }}})
        assert gateway.find_client_by_email("jane@example.com").client_id == "8"

    def test_no_client(self):
        gateway, _ = _gateway({"getClients": {"success": True, "clients": []}})
        assert gateway.find_client_by_email("jane@example.com") is None

    def test_add_client(self):
        gateway, sent = _gateway({"addClient": {"success": True, "client_id": 21}})
        customer = Customer("jane@example.com", "Jane", "Doe", postal_code="11000", country="CZ")

        client = gateway.add_client(customer, "pw123", "CZK")

        assert client.client_id == "21"
        form = sent[0]
        assert form["firstname"] == "Jane"
        assert form["postcode"] == "11000"
        assert form["password"] == form["password2"] == "pw123"
        assert form["currency"] == "CZK"

    def test_add_client_without_id(self):
        gateway, _ = _gateway({"addClient": {"success": True}})
        with pytest.raises(InvalidResponseError):
            gateway.add_client(Customer("jane@example.com", "Jane", "Doe"), "pw", "CZK")


class TestOrders:

    def _request(self) -> OrderRequest:
        return OrderRequest(
            client_id="21",
            billing_product_id="10",
            cycle=BillingCycle.QUARTERLY,
            config_options={"os": "debian"},
            billing_addon_ids=("6", "7"),
        )

    def test_add_order_params(self):
        gateway, sent = _gateway({"addOrder": {"success": True, "order_id": "501", "invoice_id": "9501"}})

        created = gateway.add_order(self._request())

        assert created.order_id == "501"
        assert created.invoice_id == "9501"
        form = sent[0]
        assert form["product"] == "10"
        assert form["cycle"] == "q"
        assert form["confirm"] == form["invoice_generate"] == form["invoice_info"] == "1"
        assert form["config_option_os"] == "debian"
        assert form["addons[6][qty]"] == "1"
        assert form["addons[7][qty]"] == "1"

    @pytest.mark.parametrize("body", [
        {"success": True, "order_id": 501},
        {"success": True, "id": "501"},
        {"success": True, "data": {"order_id": "501"}},
    ])
    def test_order_id_shapes(self, body):
        gateway, _ = _gateway({"addOrder": body})
        assert gateway.add_order(self._request()).order_id == "501"

    def test_order_without_id(self):
        gateway, _ = _gateway({"addOrder": {"success": True, "data": {}}})
        with pytest.raises(InvalidResponseError, match="no order id"):
            gateway.add_order(self._request())

    @pytest.mark.parametrize("data", [["501"], "501", 501])
    def test_order_with_non_object_data(self, data):
        gateway, _ = _gateway({"addOrder": {"success": True, "data": data}})
        with pytest.raises(InvalidResponseError, match="no order id"):
            gateway.add_order(self._request())

    def test_odd_reply_fails_only_its_line(self):
        replies = iter([
            {"success": True, "data": [{"order_id": "501"}]},
            {"success": True, "order_id": "502"},
        ])
        calls = []

        def handler(request):
            call = _form(request)["call"]
            calls.append(call)
            if call == "getClients":
                return httpx.Response(200, json={"success": True, "clients": [
                    {"id": "4", "email": "jane@example.com"},
                ]})
            if call == "addOrder":
                return httpx.Response(200, json=next(replies))
            return httpx.Response(200, json={"success": True})

        checkout = PlaceOrderHandler(HostBillGateway(_client(handler), "CZK"), CatalogMapper(make_catalog()))
        result = checkout.handle(
            CustomerSpec(email="jane@example.com", first_name="Jane", last_name="Doe"),
            [OrderItemSpec(product_id="1"), OrderItemSpec(product_id="3")],
        )

        assert calls.count("addOrder") == 2
        assert result.success
        assert [o.order_id for o in result.orders] == ["502"]
        assert "no order id" in result.errors[0]

    def test_order_number(self):
        gateway, _ = _gateway({"getOrderDetails": {"success": True, "details": {"id": "501", "number": "2026-0042"}}})
        assert gateway.get_order_number("501") == "2026-0042"

    def test_order_number_missing(self):
        gateway, _ = _gateway({"getOrderDetails": {"success": True}})
        assert gateway.get_order_number("501") is None

    def test_details_fall_back_to_order_list(self):
        gateway, sent = _gateway({
            "getOrderDetails": {"success": True, "details": {}},
            "getOrders": {"success": True, "orders": [
                {"id": "500", "number": "2026-0041"},
                {"id": "501", "number": "2026-0042"},
            ]},
        })
        assert gateway.get_order_details("501")["number"] == "2026-0042"
        assert [form["call"] for form in sent] == ["getOrderDetails", "getOrders"]

    def test_set_referrer(self):
        gateway, sent = _gateway({})
        gateway.set_order_referrer("501", "7")
        assert sent[0]["call"] == "setOrderReferrer"
        assert sent[0]["id"] == "501"
        assert sent[0]["referral"] == "7"


class TestAffiliatesAndPlans:

    def test_get_affiliate(self):
        gateway, sent = _gateway({"getAffiliate": {"success": True, "affiliate": {
            "firstname": "Pat", "lastname": "Partner", "status": "Active",
        }}})
        affiliate = gateway.get_affiliate("7")
        assert sent[0]["affiliate_id"] == "7"
        assert affiliate.id == "7"
        assert affiliate.name == "Pat Partner"
        assert affiliate.is_active

    def test_unknown_affiliate(self):
        gateway, _ = _gateway({"getAffiliate": {"success": True}})
        assert gateway.get_affiliate("8") is None

    def test_list_affiliates_keyed_by_id(self):
        gateway, _ = _gateway({"getAffiliates": {"success": True, "affiliates": {
            "7": {"name": "Partner One", "status": "Active"},
            "8": {"name": "Partner Two", "status": "Suspended"},
        }}})
        affiliates = gateway.list_affiliates()
        assert [(a.id, a.is_active) for a in affiliates] == [("7", True), ("8", False)]

    def test_commission_plans(self):
        gateway, _ = _gateway({"getAffiliateCommisionPlans": {"success": True, "commisions": [
            {"id": "1", "name": "Standard", "type": "Percent", "rate": "10",
             "applicable_products": "10, 11,-12", "recurring": "1"},
            {"id": "2", "name": "Flat", "type": "Fixed", "rate": "50", "applicable_products": "5"},
            {"id": "3", "name": "Broken", "type": "Fixed", "rate": "n/a"},
        ]}})

        plans = gateway.list_commission_plans()

        assert [p.plan_id for p in plans] == ["1", "2"]
        assert plans[0].applicable_product_ids == ("10", "11")
        assert plans[0].recurring
        assert plans[1].type.value == "Fixed"
        assert not plans[1].recurring


class TestProductsAndPayments:

    def test_products_with_disabled_cycles(self):
        gateway, sent = _gateway({"getProducts": {"success": True, "name": "VPS", "products": {
            "10": {"name": "VPS Basic", "m": "299.00", "q": "850.00", "s": "-1", "a": ""},
        }}})

        products = gateway.list_products("1")

        assert sent[0]["id"] == "1"
        product = products[0]
        assert product.billing_id == "10"
        assert product.order_page.name == "VPS"
        assert product.pricing.monthly == Money.of("299")
        assert product.pricing.semiannually is None
        assert product.pricing.annually is None

    def test_order_pages(self):
        gateway, _ = _gateway({"getOrderPages": {"success": True, "categories": [{"id": 1, "name": "VPS"}]}})
        assert [(p.id, p.name) for p in gateway.list_order_pages()] == [("1", "VPS")]

    @pytest.mark.parametrize("modules", [
        {"10": "PayU", "112": "PayPal"},
        [{"id": "10", "name": "PayU"}, {"id": 112, "name": "PayPal"}],
    ])
    def test_payment_module_shapes(self, modules):
        gateway, _ = _gateway({"getPaymentModules": {"success": True, "modules": modules}})
        assert gateway.list_payment_modules() == {"10": "PayU", "112": "PayPal"}

    def test_add_invoice_payment(self):
        gateway, sent = _gateway({})
        gateway.add_invoice_payment(PaymentRecord("9501", "299.00", "10", "TX-1", "2026-03-02"))
        form = sent[0]
        assert form["call"] == "addInvoicePayment"
        assert form["paymentmodule"] == "10"
        assert form["transnumber"] == "TX-1"
        assert form["send_email"] == "0"

    def test_charge_card_drops_missing_fields(self):
        gateway, sent = _gateway({})
        gateway.charge_credit_card("9501")
        assert "card_id" not in sent[0]
        assert "custom[amount]" not in sent[0]
