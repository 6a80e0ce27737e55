"""Public interface for the Xero adapter."""

from __future__ import annotations

from .client import LedgerAPIError, XeroClient
from .schema import ContactModel, ContactsResponse, ErrorResponse
from .translator import contact_to_payload, parse_contact

__all__ = [
    "ContactModel",
    "ContactsResponse",
    "ErrorResponse",
    "LedgerAPIError",
    "XeroClient",
    "contact_to_payload",
    "parse_contact",
]
