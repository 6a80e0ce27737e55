"""Enumerations shared across the domain model."""

from __future__ import annotations

from enum import StrEnum


class AddressKind(StrEnum):
    BILLING = "billing"
    SHIPPING = "shipping"


class LogKind(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


class PhoneType(StrEnum):
    DEFAULT = "DEFAULT"
    MOBILE = "MOBILE"
    FAX = "FAX"
    DDI = "DDI"


class AddressType(StrEnum):
    # Xero calls the mailing address used on invoices "POBOX"
    MAILING = "POBOX"
    STREET = "STREET"


class LocateSource(StrEnum):
    """Where the remote contact locator found its match."""

    MAPPING_STORE = "mapping_store"
    CONTACT_NUMBER = "contact_number"
    EMAIL = "email"
