"""CiviCRM-side entities: constituent contacts and the external account mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class ConstituentContact:
    id: int
    first_name: str = ""
    last_name: str = ""
    organization_name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.organization_name


@dataclass(eq=False, kw_only=True)
class AccountMapping:
    """Cross reference from a constituent to a remote ledger contact.

    One row per (contact_id, plugin). ``remote_contact_id`` may be ``None`` when the
    column was never written, which is not the same as an empty string left behind by
    a failed write.
    """

    contact_id: int
    plugin: str
    remote_contact_id: str | None = None
    display_name: str | None = None
    last_sync_date: datetime | None = None
    needs_update: bool = False
    data: str | None = None
    connector_id: int = 0
    id: int | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.remote_contact_id and self.remote_contact_id.strip())
