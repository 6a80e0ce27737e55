from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from ledgersync.adapters.http_resilience import ResilientClient
from ledgersync.adapters.xero import XeroClient
from ledgersync.config import ResilienceConfig, XeroConfig, XeroCredentials
from ledgersync.config.ledger import default_xero_resilience

type Handler = Callable[[httpx.Request], httpx.Response]


def make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


@pytest.fixture
def xero_config() -> XeroConfig:
    return XeroConfig(
        credentials=XeroCredentials(access_token="token-123", tenant_id="tenant-9"),
        resilience=default_xero_resilience(),
    )


@pytest.fixture
def sent_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_xero_client(
    xero_config: XeroConfig,
    sent_requests: list[httpx.Request],
) -> Callable[[Handler], XeroClient]:
    def build(handler: Handler) -> XeroClient:
        def recording(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            return handler(request)

        return XeroClient(config=xero_config, client_factory=make_client_factory(recording))

    return build
