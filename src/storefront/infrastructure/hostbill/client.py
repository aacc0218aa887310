"""HostBill Admin API client.

Every HostBill call in the project goes through ``HostBillClient.call``:
credentials are added here, the form body is encoded here and raw
transport failures are turned into ``BillingError`` subclasses here.
There are no retries.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from storefront.domain.exceptions import (
    ConnectivityError,
    GatewayTimeoutError,
    InvalidResponseError,
    RemoteCallError,
)
from storefront.infrastructure.config import HostBillConfig, mask_secret

logger = logging.getLogger(__name__)


class HostBillClient:

    def __init__(
        self,
        config: HostBillConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        config.require_credentials()
        self._config = config
        self._http = httpx.Client(
            timeout=config.timeout,
            verify=config.verify_tls,
            transport=transport,
        )
        logger.info("HostBill client initialized: %s", config.to_dict())

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> HostBillClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def call(self, api_method: str, params: Mapping[str, Any] | None = None) -> dict:
        """POST one API call and return the decoded JSON body.

        ``None`` values in ``params`` are dropped before encoding.
        """
        form = {
            key: _form_value(value)
            for key, value in (params or {}).items()
            if value is not None
        }
        form.update(
            api_id=self._config.api_id,
            api_key=self._config.api_key,
            call=api_method,
        )
        logger.debug(
            "HostBill call %s (api_id=%s, api_key=%s, params=%s)",
            api_method, self._config.api_id, mask_secret(self._config.api_key),
            sorted(k for k in form if k not in ("api_id", "api_key")),
        )

        try:
            response = self._http.post(self._config.api_url, data=form)
        except httpx.TimeoutException as exc:
            logger.error("HostBill call %s timed out after %ss", api_method, self._config.timeout)
            raise GatewayTimeoutError(
                f"HostBill did not answer {api_method} within {self._config.timeout}s",
                api_method=api_method,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("HostBill call %s failed: %s", api_method, exc)
            raise ConnectivityError(
                f"Could not reach HostBill for {api_method}: {exc}",
                api_method=api_method,
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            logger.error(
                "HostBill call %s returned non-JSON (HTTP %d)",
                api_method, response.status_code,
            )
            raise InvalidResponseError(
                f"HostBill returned an invalid response to {api_method} (HTTP {response.status_code})",
                api_method=api_method,
            ) from exc

        if not isinstance(body, dict):
            raise InvalidResponseError(
                f"HostBill returned an unexpected {type(body).__name__} to {api_method}",
                api_method=api_method,
            )
        if body.get("success") is False:
            message = _error_message(body.get("error")) or "HostBill API call failed"
            logger.error("HostBill call %s rejected: %s", api_method, message)
            raise RemoteCallError(message, api_method=api_method)
        if response.status_code >= 400:
            logger.error("HostBill call %s answered HTTP %d", api_method, response.status_code)
            raise RemoteCallError(
                f"HostBill answered {api_method} with HTTP {response.status_code}",
                api_method=api_method,
            )

        logger.debug("HostBill call %s succeeded", api_method)
        return body


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _error_message(error: Any) -> str:
    if isinstance(error, (list, tuple)):
        return "; ".join(str(e) for e in error)
    return str(error) if error else ""
