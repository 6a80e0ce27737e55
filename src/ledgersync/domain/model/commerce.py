"""Storefront order data as consumed by the sync (read only)."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from .enums import AddressKind

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class Address:
    """A billing or shipping address; every field defaults to an empty string."""

    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""

    @property
    def has_primary_line(self) -> bool:
        return bool(self.address_1.strip())

    @classmethod
    def from_fields(cls, fields: Mapping[str, object]) -> Address:
        """Build from a loose field mapping, ignoring unknown keys and nulls."""

        known = {name for name in cls.__dataclass_fields__}
        values = {
            key: str(value)
            for key, value in fields.items()
            if key in known and value is not None
        }
        return cls(**values)


@dataclass(frozen=True, slots=True, kw_only=True)
class Order:
    id: int
    user_id: int | None = None
    billing: Address = field(default_factory=Address)
    shipping: Address = field(default_factory=Address)
    total: Decimal = Decimal(0)
    status: str = ""

    def address(self, kind: AddressKind) -> Address:
        if kind is AddressKind.BILLING:
            return self.billing
        return self.shipping


@dataclass(frozen=True, slots=True, kw_only=True)
class OrderStatusChange:
    """Event raised by the storefront when an order changes status."""

    order_id: int
    old_status: str
    new_status: str
    order: Order


@dataclass(frozen=True, slots=True, kw_only=True)
class InvocationContext:
    """Who triggered the sync.

    The session contact is only trusted outside administrative contexts, where the
    logged-in constituent is the customer placing the order.
    """

    is_admin: bool = True
    session_contact_id: int | None = None

    @property
    def trusted_session_contact_id(self) -> int | None:
        if self.is_admin:
            return None
        return self.session_contact_id


ADMIN_CONTEXT = InvocationContext(is_admin=True)
