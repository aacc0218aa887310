"""Order placement model.

A checkout turns into one billing-side order per cart line.  The lines
succeed or fail independently, so the outcome of a checkout is a list of
steps rather than a single status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from storefront.domain.model.value_objects import BillingCycle

CONFIG_OPTION_PREFIX = "config_option_"


@dataclass(frozen=True)
class Customer:
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
class Client:
    """A client account in the billing system."""

    client_id: str
    email: str
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True)
class OrderRequest:
    """An ``addOrder`` call, already translated to billing IDs."""

    client_id: str
    billing_product_id: str
    cycle: BillingCycle
    config_options: Mapping[str, str] = field(default_factory=dict)
    billing_addon_ids: tuple[str, ...] = ()

    def prefixed_config_options(self) -> dict[str, str]:
        """Config options keyed the way HostBill expects (``config_option_<key>``)."""
        return {
            key if key.startswith(CONFIG_OPTION_PREFIX) else f"{CONFIG_OPTION_PREFIX}{key}": value
            for key, value in self.config_options.items()
        }


@dataclass(frozen=True)
class CreatedOrder:
    """Canonical result of ``addOrder`` regardless of the raw response shape."""

    order_id: str
    invoice_id: str | None = None
    status: str = "pending"


@dataclass(frozen=True)
class PlacedOrder:
    order_id: str
    order_number: str
    invoice_id: str | None
    client_id: str
    billing_product_id: str
    cycle: BillingCycle
    config_options: Mapping[str, str] = field(default_factory=dict)
    addons: tuple[str, ...] = ()
    status: str = "pending"
    affiliate_id: str | None = None


class StepStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class OrderStep:
    step: str
    status: StepStatus
    product_id: str | None = None
    product_name: str | None = None
    order_id: str | None = None
    error: str | None = None
    message: str | None = None


@dataclass
class OrderResult:
    processing_id: str
    client: Client | None = None
    affiliate_id: str | None = None
    orders: list[PlacedOrder] = field(default_factory=list)
    steps: list[OrderStep] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return any(
            s.step == "create_order" and s.status is StepStatus.SUCCESS
            for s in self.steps
        )

    @property
    def errors(self) -> list[str]:
        return [s.error for s in self.steps if s.status is StepStatus.ERROR and s.error]
