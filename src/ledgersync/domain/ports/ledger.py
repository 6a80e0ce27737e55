"""Port for the remote ledger's contact registry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledgersync.domain.model import ContactPayload, Invoice, OrganisationInfo, RemoteContact


class FilterField(StrEnum):
    EMAIL = "EmailAddress"
    CONTACT_NUMBER = "ContactNumber"


@dataclass(frozen=True, slots=True)
class ContactFilter:
    """Equality predicate understood by the registry's search endpoint."""

    field: FilterField
    value: str

    @classmethod
    def email(cls, value: str) -> ContactFilter:
        return cls(FilterField.EMAIL, value)

    @classmethod
    def contact_number(cls, value: str) -> ContactFilter:
        return cls(FilterField.CONTACT_NUMBER, value)

    def to_expression(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{self.field.value}=="{escaped}"'


@runtime_checkable
class ContactRegistry(Protocol):
    """Remote contact registry. Batch endpoints; this core always sends one payload."""

    def search_contacts(self, contact_filter: ContactFilter | None = None) -> list[RemoteContact]:
        ...

    def create_contacts(self, payloads: Sequence[ContactPayload]) -> list[RemoteContact]: ...

    def update_contacts(self, payloads: Sequence[ContactPayload]) -> list[RemoteContact]: ...

    def get_contact(self, contact_id: str) -> RemoteContact | None: ...

    def get_organisation(self) -> OrganisationInfo: ...

    def recent_invoices(self, contact_id: str, *, limit: int = 5) -> list[Invoice]: ...

    def get_invoice(self, invoice_id: str) -> Invoice | None: ...
