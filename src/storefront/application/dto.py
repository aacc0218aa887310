"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/web layers and the application layer
without exposing domain internals.  Output DTOs hold only strings,
numbers, booleans, lists and nested DTOs so ``dataclasses.asdict``
yields a JSON-ready dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CustomerSpec:
    """Input: customer details entered at checkout."""

    email: str
    first_name: str
    last_name: str
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    state: str = ""
    company: str = ""


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart line (storefront IDs)."""

    product_id: str
    name: str = ""
    price: str = ""
    cycle: str = "m"
    config_options: dict[str, str] = field(default_factory=dict)
    addon_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OrderStepDTO:
    step: str
    status: str  # "success" | "error"
    product_id: str | None = None
    product_name: str | None = None
    order_id: str | None = None
    error: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class PlacedOrderDTO:
    order_id: str
    order_number: str
    invoice_id: str | None
    client_id: str
    billing_product_id: str
    cycle: str
    config_options: dict[str, str]
    addons: list[str]
    status: str
    affiliate_id: str | None


@dataclass(frozen=True)
class OrderResultDTO:
    """Output: the full outcome of a checkout, including failed lines."""

    success: bool
    processing_id: str
    client_id: str | None
    affiliate_id: str | None
    orders: list[PlacedOrderDTO]
    steps: list[OrderStepDTO]
    errors: list[str]


@dataclass(frozen=True)
class GatewayDTO:
    id: str
    name: str
    method: str
    icon: str
    source: str
    enabled: bool
    unknown: bool
    billing_module_id: str | None
    flow: str


@dataclass(frozen=True)
class CommissionDTO:
    plan_id: str | None
    plan_name: str | None
    type: str | None
    rate: str | None
    monthly: str
    quarterly: str
    semiannually: str
    annually: str
    has_commission: bool


@dataclass(frozen=True)
class ProductDTO:
    id: str
    billing_id: str
    name: str
    description: str
    order_page_id: str
    order_page_name: str
    monthly_price: str
    quarterly_price: str | None
    semiannually_price: str | None
    annually_price: str | None
    mapped: bool
    commission: CommissionDTO | None = None


@dataclass(frozen=True)
class PaymentInitDTO:
    payment_id: str
    order_id: str
    invoice_id: str
    method: str
    gateway_id: str
    amount: str
    currency: str
    status: str
    redirect_required: bool
    payment_url: str | None = None
    instructions: str | None = None


@dataclass(frozen=True)
class OrderDetailsDTO:
    order_id: str
    order_number: str
    status: str
    client_id: str | None
    invoice_id: str | None
    total: str | None
    details: dict = field(default_factory=dict)
