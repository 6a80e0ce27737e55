"""Xero ledger configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .errors import MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_XERO_BASE_URL = "https://api.xero.com/api.xro/2.0/"
XERO_TIMEOUT_SECONDS = 30.0

ACCESS_TOKEN_VAR = "XERO_ACCESS_TOKEN"
TENANT_ID_VAR = "XERO_TENANT_ID"


@dataclass(frozen=True, slots=True)
class XeroCredentials:
    access_token: str
    tenant_id: str


@dataclass(frozen=True, slots=True)
class XeroConfig:
    """Holds Xero API configuration values."""

    credentials: XeroCredentials
    resilience: ResilienceConfig


def default_xero_resilience(base_url: str | None = None) -> ResilienceConfig:
    # Xero allows 60 calls per minute per tenant
    return ResilienceConfig(
        name="xero",
        base_url=base_url or DEFAULT_XERO_BASE_URL,
        timeout_seconds=XERO_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(calls=60, period_seconds=60.0),
        default_headers={"Accept": "application/json"},
    )


def get_xero_credentials() -> XeroCredentials:
    values = require_env_vars((ACCESS_TOKEN_VAR, TENANT_ID_VAR))
    return XeroCredentials(
        access_token=values[ACCESS_TOKEN_VAR].strip(),
        tenant_id=values[TENANT_ID_VAR].strip(),
    )


def get_xero_config(
    *,
    credentials: XeroCredentials | None = None,
    resilience: ResilienceConfig | None = None,
) -> XeroConfig:
    """Build the Xero configuration, preferring explicitly supplied credentials."""

    resolved = credentials or get_xero_credentials()
    if not resolved.access_token or not resolved.tenant_id:
        raise MissingConfigurationError("Xero credentials are incomplete")
    return XeroConfig(
        credentials=resolved,
        resilience=resilience or default_xero_resilience(optional_env_var("XERO_BASE_URL")),
    )
