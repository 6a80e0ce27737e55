"""HTTP client for the Xero accounting API contact registry."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ledgersync.adapters.http_resilience import ResilientClient

from .schema import ContactsResponse, ErrorResponse, InvoicesResponse, OrganisationsResponse
from .translator import contact_to_payload, parse_contact, parse_invoice, parse_organisation

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ledgersync.config.http_resilience import ResilienceConfig
    from ledgersync.config.ledger import XeroConfig
    from ledgersync.domain.model import ContactPayload, Invoice, OrganisationInfo, RemoteContact
    from ledgersync.domain.ports import ContactFilter

log = getLogger(__name__)

TENANT_HEADER = "Xero-tenant-id"


class LedgerAPIError(RuntimeError):
    """Raised when the Xero API rejects a request or returns an unusable payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class XeroClient:
    """Contact registry backed by the Xero ``Contacts``, ``Organisation`` and
    ``Invoices`` endpoints.

    Every public method is synchronous and opens a short-lived async client.
    """

    def __init__(
        self,
        *,
        config: XeroConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def search_contacts(self, contact_filter: ContactFilter | None = None) -> list[RemoteContact]:
        params: dict[str, str] = {}
        if contact_filter is not None:
            params["where"] = contact_filter.to_expression()
        response = asyncio.run(self._request("GET", "Contacts", params=params))
        return self._contacts(response)

    def create_contacts(self, payloads: Sequence[ContactPayload]) -> list[RemoteContact]:
        return self._write_contacts("PUT", payloads)

    def update_contacts(self, payloads: Sequence[ContactPayload]) -> list[RemoteContact]:
        missing = [payload.name for payload in payloads if not payload.contact_id]
        if missing:
            raise ValueError(f"Cannot update contacts without ContactID: {missing}")
        return self._write_contacts("POST", payloads)

    def get_contact(self, contact_id: str) -> RemoteContact | None:
        try:
            response = asyncio.run(self._request("GET", f"Contacts/{contact_id}"))
        except LedgerAPIError as exc:
            if exc.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        contacts = self._contacts(response)
        return contacts[0] if contacts else None

    def get_organisation(self) -> OrganisationInfo:
        response = asyncio.run(self._request("GET", "Organisation"))
        try:
            organisations = OrganisationsResponse.model_validate(response).organisations
        except ValidationError as exc:
            raise LedgerAPIError(f"Unexpected Organisation payload: {exc}") from exc
        if not organisations:
            raise LedgerAPIError("Connected, but no organisation information was returned")
        return parse_organisation(organisations[0])

    def recent_invoices(self, contact_id: str, *, limit: int = 5) -> list[Invoice]:
        params = {
            "ContactIDs": contact_id,
            "order": "Date DESC",
            "page": "1",
        }
        response = asyncio.run(self._request("GET", "Invoices", params=params))
        try:
            invoices = InvoicesResponse.model_validate(response).invoices
        except ValidationError as exc:
            raise LedgerAPIError(f"Unexpected Invoices payload: {exc}") from exc
        return [parse_invoice(invoice) for invoice in invoices[:limit]]

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        try:
            response = asyncio.run(self._request("GET", f"Invoices/{invoice_id}"))
        except LedgerAPIError as exc:
            if exc.status_code == httpx.codes.NOT_FOUND:
                return None
            raise
        try:
            invoices = InvoicesResponse.model_validate(response).invoices
        except ValidationError as exc:
            raise LedgerAPIError(f"Unexpected Invoices payload: {exc}") from exc
        return parse_invoice(invoices[0]) if invoices else None

    def _write_contacts(
        self, method: str, payloads: Sequence[ContactPayload]
    ) -> list[RemoteContact]:
        body = {"Contacts": [contact_to_payload(payload) for payload in payloads]}
        log.debug("%s Contacts with %d contact(s)", method, len(payloads))
        response = asyncio.run(self._request(method, "Contacts", json=body))
        return self._contacts(response)

    def _contacts(self, payload: dict[str, object]) -> list[RemoteContact]:
        try:
            contacts = ContactsResponse.model_validate(payload).contacts
        except ValidationError as exc:
            raise LedgerAPIError(f"Unexpected Contacts payload: {exc}") from exc
        return [parse_contact(contact) for contact in contacts]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: object = None,
    ) -> dict[str, object]:
        headers = {
            "Authorization": f"Bearer {self._config.credentials.access_token}",
            TENANT_HEADER: self._config.credentials.tenant_id,
        }
        async with self._client_factory(self._resilience) as client:
            response = await client.request(
                method, path, params=params, headers=headers, json=json
            )
        return self._parse(response)

    def _parse(self, response: httpx.Response) -> dict[str, object]:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = f"HTTP {response.status_code}"
            if isinstance(payload, dict):
                message = ErrorResponse.model_validate(payload).describe()
            log.error("Xero API error %s: %s", response.status_code, message)
            raise LedgerAPIError(message, status_code=response.status_code)

        if not isinstance(payload, dict):
            raise LedgerAPIError(
                "Unexpected Xero response payload", status_code=response.status_code
            )
        return payload
