"""Settings for the outbound HTTP clients.

Ledger writes are not idempotent, so transient failures are only retried for
read requests. A create that timed out may still have been applied remotely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

READ_ONLY_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
TRANSIENT_ERRORS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 1.0
    methods: frozenset[str] = READ_ONLY_METHODS
    status_codes: frozenset[int] = TRANSIENT_STATUS_CODES


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``calls`` requests in any window of ``period_seconds``."""

    calls: int
    period_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
