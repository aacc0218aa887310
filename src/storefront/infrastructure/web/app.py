"""Storefront HTTP API.

Thin FastAPI layer over the application handlers.  Every response body
is ``{"success": bool, ...}``; failures carry an ``error`` message and
an HTTP status derived from the exception type.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.application.affiliate_attribution import (
    COOKIE_NAME,
    ValidateAffiliateHandler,
    utcnow,
)
from storefront.application.dto import CustomerSpec, OrderItemSpec
from storefront.application.initialize_payment import InitializePaymentHandler
from storefront.application.list_products import ListProductsHandler
from storefront.application.payment_methods import ListPaymentMethodsHandler
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.record_payment import ChargeCardHandler, RecordPaymentHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.domain.exceptions import (
    BillingError,
    DomainException,
    EntityNotFoundError,
    ValidationError,
)
from storefront.domain.model.affiliate import ATTRIBUTION_WINDOW, AffiliateAttribution, extract_params
from storefront.infrastructure.bootstrap import Container
from storefront.infrastructure.web.schemas import (
    AdvancedOrderBody,
    ChargeCardBody,
    CreateOrderBody,
    OrderItemBody,
    PaymentCallbackBody,
    PaymentInitBody,
)

logger = logging.getLogger(__name__)

VERSION = "2.0.0"

# Gateway callback statuses that mean the money arrived.
PAID_STATUSES = ("completed", "paid", "success")

# Checkout that created no order at all; the steps stay in the body.
FAILED_CHECKOUT_STATUS = 500


def status_for(exc: Exception) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, EntityNotFoundError):
        return 404
    if isinstance(exc, BillingError):
        return 502
    return 500


def _item_spec(item: OrderItemBody) -> OrderItemSpec:
    return OrderItemSpec(
        product_id=item.product_id,
        name=item.name,
        price=item.price,
        cycle=item.cycle,
        config_options=dict(item.config_options),
        addon_ids=[a.id for a in item.addons if a.enabled],
    )


def create_app(container: Container) -> FastAPI:
    app = FastAPI(
        title="VPS Storefront API",
        description="Order, affiliate and payment bridge between the storefront and HostBill",
        version=VERSION,
    )
    settings = container.settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_requests(request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)
        key = request.client.host if request.client else "unknown"
        if not container.rate_limiter.allow(key):
            logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Too many requests, please try again later."},
                headers={"Retry-After": str(container.rate_limiter.retry_after(key))},
            )
        return await call_next(request)

    # Registered last so it wraps the limiter and sees 429s too.
    @app.middleware("http")
    async def record_request_metrics(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            container.metrics.record(
                path=request.url.path,
                method=request.method,
                status=status_code,
                duration_ms=(time.perf_counter() - start) * 1000,
            )

    # --- Error mapping --------------------------------------------------------

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = [
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(problems)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    # --- Service --------------------------------------------------------------

    @app.get("/health")
    def health():
        try:
            container.gateway.list_order_pages()
            hostbill_status = "connected"
        except BillingError as exc:
            logger.warning("HostBill health check failed: %s", exc)
            hostbill_status = "disconnected"
        table = container.mapper.table
        return {
            "success": True,
            "status": "healthy",
            "version": VERSION,
            "environment": settings.environment,
            "hostbill_api": {"status": hostbill_status},
            "product_mapping": {
                "total_mappings": len(table.products),
                "addons": len(table.addons),
            },
        }

    @app.get("/api/stats")
    def stats():
        return {"success": True, "stats": container.metrics.snapshot()}

    @app.get("/api/product-mapping")
    def product_mapping():
        snapshot = container.mapper.mapping_snapshot()
        return {
            "success": True,
            "mapping": snapshot,
            "total_mappings": len(snapshot["storefront_to_billing"]),
        }

    # --- Affiliates -----------------------------------------------------------

    @app.get("/api/validate-affiliate")
    def validate_affiliate(affiliate_id: str = Query(..., alias="id")):
        affiliate = ValidateAffiliateHandler(container.gateway).lookup_active(affiliate_id)
        if affiliate is None:
            return {"success": True, "valid": False, "affiliate_id": affiliate_id}
        return {
            "success": True,
            "valid": True,
            "affiliate": {"id": affiliate.id, "name": affiliate.name, "status": affiliate.status},
        }

    @app.get("/api/affiliate/capture")
    def capture_affiliate(request: Request, response: Response):
        params = extract_params(str(request.url))
        if not params.is_present:
            return {"success": True, "captured": False}
        attribution = AffiliateAttribution.capture(params, utcnow())
        response.set_cookie(
            COOKIE_NAME,
            params.id or params.code,
            max_age=int(ATTRIBUTION_WINDOW.total_seconds()),
            samesite="lax",
            path="/",
        )
        logger.info("Affiliate %s captured from landing URL", params.id or params.code)
        return {
            "success": True,
            "captured": True,
            "affiliate": asdict(params),
            "expires_at": attribution.expires_at.isoformat(),
        }

    @app.get("/api/affiliates")
    def list_affiliates():
        affiliates = container.gateway.list_affiliates()
        return {"success": True, "affiliates": [asdict(a) for a in affiliates], "total": len(affiliates)}

    @app.get("/api/affiliate/{affiliate_id}")
    def get_affiliate(affiliate_id: str):
        affiliate = ValidateAffiliateHandler(container.gateway).lookup_active(affiliate_id)
        if affiliate is None:
            raise EntityNotFoundError(f"Affiliate {affiliate_id} not found or inactive")
        return {"success": True, "affiliate": asdict(affiliate)}

    # --- Products -------------------------------------------------------------

    @app.get("/api/hostbill/get-products")
    def get_products(with_commission: bool = Query(False, alias="commission")):
        products = ListProductsHandler(container.gateway, container.mapper).handle(
            with_commission=with_commission
        )
        return {
            "success": True,
            "products": [asdict(p) for p in products],
            "total_products": len(products),
        }

    # --- Orders ---------------------------------------------------------------

    def _order_response(result):
        body = {"success": result.success, **asdict(result)}
        if result.success:
            return body
        body["error"] = "; ".join(result.errors) or "No order was created"
        logger.error("Checkout %s created no orders: %s", result.processing_id, body["error"])
        return JSONResponse(status_code=FAILED_CHECKOUT_STATUS, content=body)

    @app.post("/api/hostbill/create-order")
    def create_order(body: CreateOrderBody):
        handler = PlaceOrderHandler(container.gateway, container.mapper, settings.default_currency)
        result = handler.handle_for_client(
            client_id=body.client_id,
            items=[OrderItemSpec(product_id=body.product_id, cycle=body.cycle)],
            affiliate_id=body.affiliate_id,
        )
        return _order_response(result)

    @app.post("/api/hostbill/create-advanced-order")
    def create_advanced_order(body: AdvancedOrderBody):
        c = body.customer
        customer = CustomerSpec(
            email=c.email,
            first_name=c.first_name,
            last_name=c.last_name,
            phone=c.phone,
            address=c.address,
            city=c.city,
            postal_code=c.postal_code,
            country=c.country,
            state=c.state,
            company=c.company,
        )
        handler = PlaceOrderHandler(container.gateway, container.mapper, settings.default_currency)
        result = handler.handle(
            customer=customer,
            items=[_item_spec(item) for item in body.items],
            affiliate_id=body.affiliate.id if body.affiliate else None,
        )
        return _order_response(result)

    @app.get("/api/hostbill/get-order/{order_id}")
    def get_order(order_id: str):
        details = ShowOrderHandler(container.gateway).handle(order_id)
        return {"success": True, "order": asdict(details)}

    # --- Payments -------------------------------------------------------------

    @app.get("/api/hostbill/payment-modules")
    def payment_modules():
        modules = container.gateway.list_payment_modules()
        return {"success": True, "modules": modules, "total": len(modules)}

    @app.get("/api/payments/methods")
    def payment_methods():
        methods = ListPaymentMethodsHandler(container.gateway).handle()
        return {
            "success": True,
            "methods": [asdict(m) for m in methods],
            "source": methods[0].source if methods else None,
        }

    @app.post("/api/payments/initialize")
    def initialize_payment(body: PaymentInitBody):
        handler = InitializePaymentHandler(
            ListPaymentMethodsHandler(container.gateway),
            client_url=settings.hostbill.client_url,
            bank_account=settings.bank_account,
        )
        payment = handler.handle(
            order_id=body.order_id,
            invoice_id=body.invoice_id,
            method=body.method,
            amount=body.amount,
            currency=body.currency or settings.default_currency,
        )
        return {"success": True, "payment": asdict(payment)}

    @app.post("/api/payments/callback")
    def payment_callback(body: PaymentCallbackBody):
        if body.status.lower() not in PAID_STATUSES:
            logger.info("Payment callback for invoice %s ignored (status %s)", body.invoice_id, body.status)
            return {"success": True, "recorded": False, "status": body.status}
        result = RecordPaymentHandler(container.gateway).handle(
            invoice_id=body.invoice_id,
            amount=body.amount,
            gateway_module_id=body.gateway_id,
            transaction_id=body.transaction_id,
            paid_on=body.date,
            fee=body.fee,
        )
        return {"success": True, "recorded": True, "result": result}

    @app.post("/api/payments/charge-card")
    def charge_card(body: ChargeCardBody):
        result = ChargeCardHandler(container.gateway).handle(
            body.invoice_id, card_id=body.card_id, amount=body.amount
        )
        return {"success": True, "result": result}

    return app

