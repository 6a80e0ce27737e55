"""State machine driving one order's contact through to the ledger.

The run walks ``Start -> AddressResolved -> IdentityResolved -> PayloadBuilt ->
Located -> Creating|Updating -> MappingPersisted -> Done``; any step may end in
``Failed``. Failures are recorded in the audit log and never raised to the caller,
so the storefront event that triggered the run is never blocked.

Address and identity are resolved in a short read-only unit of work. The ledger
lookup, the write and the mapping upsert run in a second unit of work that is
opened only once the per-contact lock is held.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.config.errors import ConfigurationError
from ledgersync.domain.address import select_address
from ledgersync.domain.audit import AuditLog
from ledgersync.domain.contact_builder import build_contact_payload
from ledgersync.domain.errors import RemoteWriteError
from ledgersync.domain.identity import IdentityBridge
from ledgersync.domain.locator import RemoteContactLocator
from ledgersync.domain.locking import InProcessKeyedLock
from ledgersync.domain.model import ADMIN_CONTEXT

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledgersync.config.sync import SyncConfig
    from ledgersync.domain.locator import LocatedContact
    from ledgersync.domain.model import (
        ConstituentContact,
        ContactPayload,
        InvocationContext,
        Order,
        OrderStatusChange,
        RemoteContact,
    )
    from ledgersync.domain.ports import ContactRegistry, KeyedLock, SyncUnitOfWork

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncState(StrEnum):
    START = "start"
    ADDRESS_RESOLVED = "address_resolved"
    IDENTITY_RESOLVED = "identity_resolved"
    PAYLOAD_BUILT = "payload_built"
    LOCATED = "located"
    CREATING = "creating"
    UPDATING = "updating"
    MAPPING_PERSISTED = "mapping_persisted"
    DONE = "done"
    FAILED = "failed"


class WriteMode(StrEnum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(slots=True)
class SyncOutcome:
    """What happened to one order; ``states`` lists every state visited in order."""

    order_id: int
    states: list[SyncState] = field(default_factory=lambda: [SyncState.START])
    mode: WriteMode | None = None
    remote_contact: RemoteContact | None = None
    constituent_id: int | None = None
    mapping_written: bool = False
    skipped: bool = False
    error: str | None = None

    @property
    def state(self) -> SyncState:
        return self.states[-1]

    @property
    def succeeded(self) -> bool:
        return self.state is SyncState.DONE

    def advance(self, state: SyncState) -> None:
        log.debug("Order #%s: %s -> %s", self.order_id, self.state, state)
        self.states.append(state)

    def fail(self, message: str) -> None:
        self.error = message
        self.advance(SyncState.FAILED)


class ContactSyncOrchestrator:
    """Create or update the ledger contact for an order, exactly once per run.

    Collaborators are injected: ``unit_of_work_factory`` opens a fresh unit of work
    over the constituent database, and ``registry_factory`` builds the ledger client,
    raising ``ConfigurationError`` when credentials are missing.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], SyncUnitOfWork],
        registry_factory: Callable[[], ContactRegistry],
        config: SyncConfig,
        lock: KeyedLock | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._registry_factory = registry_factory
        self._config = config
        self._lock = lock or InProcessKeyedLock(timeout=config.lock_timeout_seconds)
        self._clock = clock

    @property
    def ledger_label(self) -> str:
        return self._config.ledger_tag.capitalize()

    def handle_status_change(
        self,
        event: OrderStatusChange,
        *,
        context: InvocationContext = ADMIN_CONTEXT,
    ) -> SyncOutcome | None:
        """Entry point for storefront status-change events.

        Returns ``None`` when the new status is not one that triggers a sync.
        """

        if not self._config.triggers_on(event.new_status):
            log.debug(
                "Order #%s moved %s -> %s; status does not trigger a sync",
                event.order_id,
                event.old_status,
                event.new_status,
            )
            return None
        log.info(
            "Order #%s moved %s -> %s; syncing contact",
            event.order_id,
            event.old_status,
            event.new_status,
        )
        return self.sync_order(event.order, context=context)

    def sync_order(
        self,
        order: Order,
        *,
        context: InvocationContext = ADMIN_CONTEXT,
    ) -> SyncOutcome:
        outcome = SyncOutcome(order_id=order.id)

        if not self._config.enabled:
            self._record_bypass(order, outcome)
            return outcome

        try:
            registry = self._registry_factory()
        except ConfigurationError as exc:
            self._record_failure(order, outcome, f"Configuration error: {exc}")
            return outcome
        except Exception as exc:  # noqa: BLE001
            log.debug("Order #%s: ledger client setup failed", order.id, exc_info=True)
            self._record_failure(
                order,
                outcome,
                f"Failed to initialise {self.ledger_label} client: {exc}",
            )
            return outcome

        try:
            self._run(order, context, registry, outcome)
        except Exception as exc:  # noqa: BLE001
            log.debug("Order #%s sync aborted", order.id, exc_info=True)
            self._record_failure(
                order,
                outcome,
                f"Failed to sync contact to {self.ledger_label}: {exc}",
            )
        return outcome

    def _prepare(
        self,
        order: Order,
        context: InvocationContext,
        outcome: SyncOutcome,
    ) -> tuple[ConstituentContact | None, ContactPayload]:
        """Resolve address, constituent and payload in a short read-only unit of work."""

        with self._unit_of_work_factory() as uow:
            bridge = self._bridge(uow)

            kind, address = select_address(order)
            log.debug("Order #%s: resolved %s address", order.id, kind)
            outcome.advance(SyncState.ADDRESS_RESOLVED)

            constituent = bridge.constituent_for(order.user_id, context)
            outcome.constituent_id = constituent.id if constituent is not None else None
            outcome.advance(SyncState.IDENTITY_RESOLVED)

        payload = build_contact_payload(address, constituent, order)
        outcome.advance(SyncState.PAYLOAD_BUILT)
        return constituent, payload

    def _run(
        self,
        order: Order,
        context: InvocationContext,
        registry: ContactRegistry,
        outcome: SyncOutcome,
    ) -> None:
        constituent, payload = self._prepare(order, context, outcome)

        # the unit of work opens only once the lock is held, so its first read
        # sees whatever the previous holder committed
        with (
            self._lock.hold(self._lock_key(order, constituent, payload)),
            self._unit_of_work_factory() as uow,
        ):
            bridge = self._bridge(uow)
            audit = AuditLog(
                uow.repositories.sync_log,
                capacity=self._config.log_capacity,
                clock=self._clock,
            )

            locator = RemoteContactLocator(bridge=bridge, registry=registry)
            located = locator.locate(
                payload.email,
                payload.contact_number,
                constituent_id=outcome.constituent_id,
            )
            outcome.advance(SyncState.LOCATED)

            if located is not None and not located.contact.has_usable_id:
                log.warning(
                    "Order #%s: matched ledger contact via %s has no usable id, creating",
                    order.id,
                    located.source,
                )
                located = None

            if located is None:
                outcome.advance(SyncState.CREATING)
                written = self._write_contact(registry, payload, WriteMode.CREATE)
            else:
                outcome.advance(SyncState.UPDATING)
                written = self._write_contact(
                    registry,
                    payload.with_contact_id(located.contact.contact_id or ""),
                    WriteMode.UPDATE,
                )
            outcome.mode = WriteMode.CREATE if located is None else WriteMode.UPDATE
            outcome.remote_contact = written

            outcome.mapping_written = self._persist_mapping(
                bridge, order, constituent, located, written
            )
            outcome.advance(SyncState.MAPPING_PERSISTED)

            verb = "created" if outcome.mode is WriteMode.CREATE else "updated"
            audit.record_success(
                f"Contact {verb} in {self.ledger_label}",
                order_id=order.id,
                remote_contact_id=written.contact_id,
            )
            uow.commit()

        outcome.advance(SyncState.DONE)

    def _bridge(self, uow: SyncUnitOfWork) -> IdentityBridge:
        return IdentityBridge(
            constituents=uow.repositories.constituents,
            mappings=uow.repositories.mappings,
            ledger_tag=self._config.ledger_tag,
            clock=self._clock,
        )

    def _write_contact(
        self,
        registry: ContactRegistry,
        payload: ContactPayload,
        mode: WriteMode,
    ) -> RemoteContact:
        """Submit a one-element batch and validate the echoed contact."""

        write = registry.create_contacts if mode is WriteMode.CREATE else registry.update_contacts
        try:
            results = write([payload])
        except Exception as exc:
            raise RemoteWriteError(f"Contact {mode} request failed: {exc}", mode=mode) from exc

        if not results:
            raise RemoteWriteError(f"Contact {mode} returned no contacts", mode=mode)
        contact = results[0]
        if not contact.has_usable_id:
            raise RemoteWriteError(f"Contact {mode} response is missing ContactID", mode=mode)
        if not (contact.name and contact.name.strip()):
            raise RemoteWriteError(f"Contact {mode} response is missing Name", mode=mode)
        if mode is WriteMode.UPDATE and contact.contact_id != payload.contact_id:
            log.warning(
                "Update of %s echoed a different ContactID %s",
                payload.contact_id,
                contact.contact_id,
            )
        log.info("Contact %s %s (%s)", contact.contact_id, f"{mode}d", contact.name)
        return contact

    def _persist_mapping(
        self,
        bridge: IdentityBridge,
        order: Order,
        constituent: ConstituentContact | None,
        located: LocatedContact | None,
        written: RemoteContact,
    ) -> bool:
        remote_id = written.contact_id or ""
        data = self._mapping_data(order, written)

        if (
            located is not None
            and located.from_mapping_store
            and located.constituent_id is not None
        ):
            bridge.upsert_mapping(located.constituent_id, remote_id, written.name, data=data)
            if constituent is not None and constituent.id != located.constituent_id:
                bridge.upsert_mapping(constituent.id, remote_id, written.name, data=data)
            return True

        if constituent is None:
            log.warning(
                "Order #%s: no constituent resolved, ledger contact %s is traceable only by "
                "contact number %s",
                order.id,
                remote_id,
                written.contact_number or order.id,
            )
            return False

        if located is not None:
            log.info(
                "Order #%s: recording first observed mapping %s -> %s (found by %s)",
                order.id,
                constituent.id,
                remote_id,
                located.source,
            )
        bridge.upsert_mapping(constituent.id, remote_id, written.name, data=data)
        return True

    def _mapping_data(self, order: Order, written: RemoteContact) -> str:
        return json.dumps(
            {
                "ContactID": written.contact_id,
                "Name": written.name,
                "ContactNumber": written.contact_number,
                "order_id": order.id,
                "synced_at": self._clock().isoformat(),
            },
            sort_keys=True,
        )

    def _lock_key(
        self,
        order: Order,
        constituent: ConstituentContact | None,
        payload: ContactPayload,
    ) -> str:
        tag = self._config.ledger_tag
        if constituent is not None:
            return f"{tag}:constituent:{constituent.id}"
        if payload.email:
            return f"{tag}:email:{payload.email.lower()}"
        return f"{tag}:order:{order.id}"

    def _record_bypass(self, order: Order, outcome: SyncOutcome) -> None:
        outcome.skipped = True
        try:
            with self._unit_of_work_factory() as uow:
                AuditLog(
                    uow.repositories.sync_log,
                    capacity=self._config.log_capacity,
                    clock=self._clock,
                ).record_success(
                    f"Contact sync disabled, order #{order.id} skipped",
                    order_id=order.id,
                )
                uow.commit()
        except Exception:
            log.exception("Could not record skipped sync for order #%s", order.id)
        outcome.advance(SyncState.DONE)

    def _record_failure(self, order: Order, outcome: SyncOutcome, message: str) -> None:
        outcome.fail(message)
        try:
            with self._unit_of_work_factory() as uow:
                AuditLog(
                    uow.repositories.sync_log,
                    capacity=self._config.log_capacity,
                    clock=self._clock,
                ).record_error(message, order_id=order.id)
                uow.commit()
        except Exception:
            log.exception("Could not record sync failure for order #%s: %s", order.id, message)
