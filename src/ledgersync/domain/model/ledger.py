"""Remote ledger contact shapes.

Address and phone blocks are explicit variants instead of sparse maps: an absent
block leaves the remote value untouched on update, while a present block with empty
fields clears it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .enums import AddressType, PhoneType

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal


@dataclass(frozen=True, slots=True)
class PhoneEntry:
    number: str
    phone_type: PhoneType = PhoneType.DEFAULT


@dataclass(frozen=True, slots=True)
class NoAddress:
    """Marker for payloads that must not touch the remote address."""


@dataclass(frozen=True, slots=True, kw_only=True)
class MailingAddress:
    line1: str = ""
    line2: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    region: str = ""
    address_type: AddressType = AddressType.MAILING


type AddressBlock = NoAddress | MailingAddress

NO_ADDRESS = NoAddress()


@dataclass(frozen=True, slots=True, kw_only=True)
class ContactPayload:
    name: str
    email: str
    contact_number: str
    first_name: str = ""
    last_name: str = ""
    phone: PhoneEntry | None = None
    address: AddressBlock = NO_ADDRESS
    contact_id: str | None = None

    def with_contact_id(self, contact_id: str) -> ContactPayload:
        return replace(self, contact_id=contact_id)


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteContact:
    contact_id: str | None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    contact_number: str | None = None
    status: str | None = None
    phones: tuple[PhoneEntry, ...] = field(default_factory=tuple)
    addresses: tuple[MailingAddress, ...] = field(default_factory=tuple)

    @property
    def has_usable_id(self) -> bool:
        return bool(self.contact_id and self.contact_id.strip())


@dataclass(frozen=True, slots=True, kw_only=True)
class OrganisationInfo:
    name: str
    organisation_id: str | None = None
    country_code: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Invoice:
    invoice_id: str
    number: str | None
    contact_id: str | None
    date: date | None
    status: str | None
    total: Decimal | None
    invoice_type: str | None = None
    amount_due: Decimal | None = None
