"""
Configuration for the storefront services.

Everything is read from environment variables; a local ``.env`` file is
hydrated into the environment first when present.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from storefront.domain.exceptions import ConfigurationError
from storefront.domain.model.value_objects import DEFAULT_CURRENCY

# Hydrate env vars from a local .env in the current working directory when present.
load_dotenv()

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_TRUE = ("true", "1", "yes")


def _flag(value: str | None, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class HostBillConfig:
    """Connection settings for the HostBill admin API."""

    api_url: str = ""
    api_id: str = ""
    api_key: str = ""
    client_url: str = ""
    timeout: float = 30.0
    verify_tls: bool = True

    def require_credentials(self) -> None:
        missing = [
            name for name, value in (
                ("HOSTBILL_API_URL", self.api_url),
                ("HOSTBILL_API_ID", self.api_id),
                ("HOSTBILL_API_KEY", self.api_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"HostBill configuration is incomplete. Set {', '.join(missing)}."
            )

    def to_dict(self) -> dict:
        """Config as a dict for logging; the API key is masked."""
        return {
            "api_url": self.api_url,
            "api_id": self.api_id,
            "api_key": mask_secret(self.api_key),
            "client_url": self.client_url,
            "timeout": self.timeout,
            "verify_tls": self.verify_tls,
        }


@dataclass(frozen=True)
class Settings:
    environment: str = "production"
    hostbill: HostBillConfig = field(default_factory=HostBillConfig)
    default_currency: str = DEFAULT_CURRENCY
    allowed_origins: tuple[str, ...] = ()
    rate_limit_window_ms: int = 900_000
    rate_limit_max_requests: int = 100
    catalog_path: Path = _PROJECT_ROOT / "data" / "catalog.json"
    state_path: Path = _PROJECT_ROOT / "data" / "client_state.json"
    bank_account: str = ""
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3005

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if env is None else env
        environment = env.get("ENVIRONMENT", "production")

        insecure_tls = _flag(env.get("HOSTBILL_INSECURE_TLS"))
        if insecure_tls and environment != "development":
            raise ConfigurationError(
                "HOSTBILL_INSECURE_TLS is only allowed when ENVIRONMENT=development"
            )
        if insecure_tls:
            logger.warning("TLS certificate verification for HostBill is DISABLED (development)")

        api_url = env.get("HOSTBILL_API_URL", "")
        client_url = env.get("HOSTBILL_CLIENT_URL") or api_url.replace("/admin/api.php", "").replace("/admin", "")
        try:
            timeout = float(env.get("HOSTBILL_TIMEOUT") or 30)
        except ValueError as exc:
            raise ConfigurationError("HOSTBILL_TIMEOUT must be a number of seconds") from exc

        origins = env.get("ALLOWED_ORIGINS", "")
        if origins:
            allowed_origins = tuple(o.strip() for o in origins.split(",") if o.strip())
        elif environment == "development":
            allowed_origins = ("http://localhost:3000", "http://localhost:3001")
        else:
            allowed_origins = ()

        defaults = Settings()
        return Settings(
            environment=environment,
            hostbill=HostBillConfig(
                api_url=api_url,
                api_id=env.get("HOSTBILL_API_ID", ""),
                api_key=env.get("HOSTBILL_API_KEY", ""),
                client_url=client_url,
                timeout=timeout,
                verify_tls=not insecure_tls,
            ),
            default_currency=env.get("DEFAULT_CURRENCY") or DEFAULT_CURRENCY,
            allowed_origins=allowed_origins,
            rate_limit_window_ms=_int(env, "RATE_LIMIT_WINDOW_MS", defaults.rate_limit_window_ms),
            rate_limit_max_requests=_int(env, "RATE_LIMIT_MAX_REQUESTS", defaults.rate_limit_max_requests),
            catalog_path=Path(env.get("STOREFRONT_CATALOG_PATH") or defaults.catalog_path),
            state_path=Path(env.get("STOREFRONT_STATE_PATH") or defaults.state_path),
            bank_account=env.get("BANK_ACCOUNT_NUMBER", ""),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            host=env.get("HOST", defaults.host),
            port=_int(env, "PORT", defaults.port),
        )


def mask_secret(secret: str, visible: int = 4) -> str:
    """Keep a short prefix for log correlation; never more than half the secret."""
    if not secret:
        return ""
    return f"{secret[:min(visible, len(secret) // 2)]}..."
