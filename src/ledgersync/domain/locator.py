"""Decide whether a ledger contact already exists for a payload."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.lookup import Found, Lookup, LookupFailed, NotFound
from ledgersync.domain.model import AccountMapping, LocateSource, RemoteContact
from ledgersync.domain.ports import ContactFilter

if TYPE_CHECKING:
    from ledgersync.domain.identity import IdentityBridge
    from ledgersync.domain.ports import ContactRegistry

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class LocatedContact:
    """A remote contact match and how it was found."""

    contact: RemoteContact
    source: LocateSource
    constituent_id: int | None = None
    mapping: AccountMapping | None = None

    @property
    def from_mapping_store(self) -> bool:
        return self.source is LocateSource.MAPPING_STORE


class RemoteContactLocator:
    """Search the mapping store, then the registry by contact number, then by email.

    The first hit wins. A failing stage is logged and counts as a miss for that
    stage only.
    """

    def __init__(self, *, bridge: IdentityBridge, registry: ContactRegistry) -> None:
        self._bridge = bridge
        self._registry = registry

    def locate(
        self,
        email: str,
        contact_number: str | None = None,
        *,
        constituent_id: int | None = None,
    ) -> LocatedContact | None:
        stored = self._from_mapping_store(email, constituent_id)
        if stored is not None:
            return stored

        if contact_number:
            found = self._search(ContactFilter.contact_number(contact_number))
            if isinstance(found, Found):
                log.info("Matched ledger contact %s by contact number", found.value.contact_id)
                return LocatedContact(contact=found.value, source=LocateSource.CONTACT_NUMBER)

        if email.strip():
            found = self._search(ContactFilter.email(email.strip()))
            if isinstance(found, Found):
                log.info("Matched ledger contact %s by email", found.value.contact_id)
                return LocatedContact(contact=found.value, source=LocateSource.EMAIL)

        log.info("No existing ledger contact for email=%r contact_number=%r", email, contact_number)
        return None

    def _from_mapping_store(self, email: str, constituent_id: int | None) -> LocatedContact | None:
        candidates: list[int] = []
        if constituent_id is not None:
            candidates.append(constituent_id)

        by_email = self._bridge.contact_id_for_email(email)
        if isinstance(by_email, Found) and by_email.value not in candidates:
            candidates.append(by_email.value)
        elif isinstance(by_email, LookupFailed):
            log.warning("Mapping store stage: email lookup failed (%s)", by_email.reason)

        for candidate in candidates:
            result = self._bridge.mapping_for(candidate)
            if isinstance(result, Found):
                mapping = result.value
                log.info(
                    "Mapping store hit: constituent %s -> ledger contact %s",
                    candidate,
                    mapping.remote_contact_id,
                )
                return LocatedContact(
                    contact=RemoteContact(
                        contact_id=mapping.remote_contact_id,
                        name=mapping.display_name,
                    ),
                    source=LocateSource.MAPPING_STORE,
                    constituent_id=candidate,
                    mapping=mapping,
                )
            log.debug("Mapping store miss for constituent %s: %s", candidate, result.reason)
        return None

    def _search(self, contact_filter: ContactFilter) -> Lookup[RemoteContact]:
        expression = contact_filter.to_expression()
        try:
            contacts = self._registry.search_contacts(contact_filter)
        except Exception as exc:  # noqa: BLE001
            log.warning("Ledger search %s failed, continuing: %s", expression, exc)
            return LookupFailed(exc)
        if not contacts:
            log.debug("Ledger search %s returned nothing", expression)
            return NotFound(f"no contact matching {expression}")
        if len(contacts) > 1:
            log.warning(
                "Ledger search %s matched %d contacts, using the first", expression, len(contacts)
            )
        return Found(contacts[0])
