"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI and
web layers can catch them uniformly and map them to user-facing messages.
Billing failures form their own branch: RemoteCallError when HostBill
answered but refused or garbled the call, ConnectivityError when it could
not be reached at all.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class MappingError(DomainException):
    """A storefront product/addon ID has no billing counterpart (or vice versa)."""


class ConfigurationError(DomainException):
    """Required configuration is missing or contradictory."""


class BillingError(DomainException):
    """Base class for failures talking to the billing system."""

    def __init__(self, message: str, api_method: str | None = None) -> None:
        super().__init__(message)
        self.api_method = api_method


class RemoteCallError(BillingError):
    """The billing API answered with ``success: false``."""


class InvalidResponseError(RemoteCallError):
    """The billing API answered with a body that is not valid JSON."""


class ConnectivityError(BillingError):
    """The billing API could not be reached."""


class GatewayTimeoutError(ConnectivityError):
    """The billing API did not answer within the configured timeout."""
