"""Public domain model surface."""

from __future__ import annotations

from .audit import SyncLogEntry
from .commerce import ADMIN_CONTEXT, Address, InvocationContext, Order, OrderStatusChange
from .constituent import AccountMapping, ConstituentContact
from .enums import AddressKind, AddressType, LocateSource, LogKind, PhoneType
from .ledger import (
    NO_ADDRESS,
    AddressBlock,
    ContactPayload,
    Invoice,
    MailingAddress,
    NoAddress,
    OrganisationInfo,
    PhoneEntry,
    RemoteContact,
)

__all__ = [  # noqa: RUF022
    # commerce
    "ADMIN_CONTEXT",
    "Address",
    "AddressKind",
    "InvocationContext",
    "Order",
    "OrderStatusChange",
    # constituent database
    "AccountMapping",
    "ConstituentContact",
    # ledger
    "NO_ADDRESS",
    "AddressBlock",
    "AddressType",
    "ContactPayload",
    "Invoice",
    "MailingAddress",
    "NoAddress",
    "OrganisationInfo",
    "PhoneEntry",
    "PhoneType",
    "RemoteContact",
    "LocateSource",
    # audit
    "LogKind",
    "SyncLogEntry",
]
