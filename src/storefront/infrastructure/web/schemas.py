"""Request models for the storefront HTTP API.

Field names follow the storefront's JSON (camelCase); snake_case is
accepted too.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class CustomerBody(_Body):
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = Field("", alias="postalCode")
    country: str = ""
    state: str = ""
    company: str = ""


class AddonBody(_Body):
    id: str
    enabled: bool = True


class OrderItemBody(_Body):
    product_id: str = Field(alias="productId")
    name: str = ""
    price: str = ""
    cycle: str = "m"
    config_options: dict[str, str] = Field(default_factory=dict, alias="configOptions")
    addons: list[AddonBody] = Field(default_factory=list)


class AffiliateBody(_Body):
    id: Optional[str] = None
    code: Optional[str] = None


class AdvancedOrderBody(_Body):
    customer: CustomerBody
    items: list[OrderItemBody] = Field(min_length=1)
    affiliate: Optional[AffiliateBody] = None
    payment_method: Optional[str] = Field(None, alias="paymentMethod")


class CreateOrderBody(_Body):
    client_id: str
    product_id: str
    cycle: str = "m"
    affiliate_id: Optional[str] = None


class PaymentInitBody(_Body):
    order_id: str = Field(alias="orderId")
    invoice_id: str = Field(alias="invoiceId")
    method: str
    amount: str = "0"
    currency: Optional[str] = None


class PaymentCallbackBody(_Body):
    invoice_id: str = Field(alias="invoiceId")
    gateway_id: str = Field(alias="gatewayId")
    transaction_id: str = Field("", alias="transactionId")
    amount: str = "0"
    status: str = "completed"
    fee: str = "0"
    date: Optional[str] = None


class ChargeCardBody(_Body):
    invoice_id: str = Field(alias="invoiceId")
    card_id: Optional[str] = Field(None, alias="cardId")
    amount: Optional[str] = None
