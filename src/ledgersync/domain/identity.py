"""Bridge between storefront users, CiviCRM constituents and ledger contact ids."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.errors import DuplicateMappingError
from ledgersync.domain.lookup import Found, Lookup, LookupFailed, NotFound
from ledgersync.domain.model import ADMIN_CONTEXT, AccountMapping, ConstituentContact

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledgersync.domain.model import InvocationContext
    from ledgersync.domain.ports import AccountMappingRepository, ConstituentRepository

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MappingAbsence(StrEnum):
    """Why no usable mapping exists; each points at a different history."""

    MISSING_RECORD = "missing_record"  # never synced
    MISSING_FIELD = "missing_field"  # row without a remote id column value
    EMPTY_VALUE = "empty_value"  # a prior write left an empty id


class IdentityBridge:
    """Resolve constituents for orders and keep the account mapping table in step."""

    def __init__(
        self,
        *,
        constituents: ConstituentRepository,
        mappings: AccountMappingRepository,
        ledger_tag: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._constituents = constituents
        self._mappings = mappings
        self._ledger_tag = ledger_tag
        self._clock = clock

    @property
    def ledger_tag(self) -> str:
        return self._ledger_tag

    def constituent_for(
        self,
        user_id: int | None,
        context: InvocationContext = ADMIN_CONTEXT,
    ) -> ConstituentContact | None:
        """Return the constituent for a storefront user, or ``None``.

        A live (non-admin) session contact takes precedence over the stored user match.
        Lookup errors are logged and reported as "not found".
        """

        contact_id = self._resolve_contact_id(user_id, context)
        if contact_id is None:
            return None

        try:
            contact = self._constituents.get_contact(contact_id)
        except Exception:
            log.exception("Failed to load constituent %s details", contact_id)
            contact = None

        if contact is None:
            # the id alone still makes the ledger contact traceable
            return ConstituentContact(id=contact_id)
        return contact

    def _resolve_contact_id(self, user_id: int | None, context: InvocationContext) -> int | None:
        session_contact = context.trusted_session_contact_id
        if session_contact is not None:
            log.debug("Using session constituent %s", session_contact)
            return session_contact

        if user_id is None:
            return None

        try:
            contact_id = self._constituents.contact_id_for_user(user_id)
        except Exception:
            log.exception("Failed to look up constituent for user %s", user_id)
            return None

        if contact_id is None:
            log.info("No constituent linked to user %s", user_id)
        return contact_id

    def contact_id_for_email(self, email: str) -> Lookup[int]:
        if not email.strip():
            return NotFound("blank email")
        try:
            contact_id = self._constituents.contact_id_for_email(email.strip())
        except Exception as exc:  # noqa: BLE001
            log.warning("Constituent lookup by email failed: %s", exc)
            return LookupFailed(exc)
        if contact_id is None:
            return NotFound("no constituent with this email")
        return Found(contact_id)

    def mapping_for(self, contact_id: int) -> Lookup[AccountMapping]:
        try:
            mapping = self._mappings.get(contact_id, self._ledger_tag)
        except Exception as exc:  # noqa: BLE001
            log.warning("Mapping lookup for constituent %s failed: %s", contact_id, exc)
            return LookupFailed(exc)

        if mapping is None:
            log.debug("No %s mapping row for constituent %s", self._ledger_tag, contact_id)
            return NotFound(MappingAbsence.MISSING_RECORD)
        if mapping.remote_contact_id is None:
            log.warning(
                "Mapping row %s for constituent %s has no remote contact id column value",
                mapping.id,
                contact_id,
            )
            return NotFound(MappingAbsence.MISSING_FIELD)
        if not mapping.is_usable:
            log.warning(
                "Mapping row %s for constituent %s has an empty remote contact id",
                mapping.id,
                contact_id,
            )
            return NotFound(MappingAbsence.EMPTY_VALUE)
        return Found(mapping)

    def upsert_mapping(
        self,
        contact_id: int,
        remote_contact_id: str,
        display_name: str | None,
        *,
        data: str | None = None,
    ) -> AccountMapping:
        """Point ``contact_id`` at ``remote_contact_id``, updating the row in place if any."""

        existing = self._mappings.get(contact_id, self._ledger_tag)
        if existing is not None:
            return self._refresh(existing, remote_contact_id, display_name, data)

        mapping = AccountMapping(
            contact_id=contact_id,
            plugin=self._ledger_tag,
            remote_contact_id=remote_contact_id,
            display_name=display_name,
            last_sync_date=self._clock(),
            needs_update=False,
            data=data,
        )
        try:
            self._mappings.add(mapping)
        except DuplicateMappingError:
            log.info("Mapping for constituent %s was created concurrently, updating", contact_id)
            winner = self._mappings.get(contact_id, self._ledger_tag)
            if winner is None:
                raise
            return self._refresh(winner, remote_contact_id, display_name, data)
        log.info("Created %s mapping %s -> %s", self._ledger_tag, contact_id, remote_contact_id)
        return mapping

    def _refresh(
        self,
        mapping: AccountMapping,
        remote_contact_id: str,
        display_name: str | None,
        data: str | None,
    ) -> AccountMapping:
        if mapping.remote_contact_id != remote_contact_id:
            log.warning(
                "Re-pointing constituent %s from %r to %r",
                mapping.contact_id,
                mapping.remote_contact_id,
                remote_contact_id,
            )
        mapping.remote_contact_id = remote_contact_id
        mapping.display_name = display_name
        mapping.last_sync_date = self._clock()
        mapping.needs_update = False
        if data is not None:
            mapping.data = data
        return mapping
