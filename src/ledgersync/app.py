"""Application entry points wiring the default adapters to the sync core."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySyncUnitOfWork,
    is_started,
    startup,
)
from ledgersync.adapters.xero import XeroClient
from ledgersync.config import (
    ConfigurationError,
    MissingConfigurationError,
    SyncConfig,
    XeroCredentials,
    get_database_config,
    get_sync_config,
    get_xero_config,
    get_xero_credentials,
)
from ledgersync.domain.audit import AuditLog
from ledgersync.domain.diagnostics import AddressPushReport, diagnose_user, push_address
from ledgersync.domain.identity import IdentityBridge
from ledgersync.domain.locking import InProcessKeyedLock
from ledgersync.domain.model import ADMIN_CONTEXT
from ledgersync.domain.orchestrator import ContactSyncOrchestrator
from ledgersync.domain.ports import ContactRegistry, SyncUnitOfWork

if TYPE_CHECKING:
    from ledgersync.domain.diagnostics import UserDiagnostics
    from ledgersync.domain.model import (
        InvocationContext,
        Invoice,
        Order,
        OrderStatusChange,
        SyncLogEntry,
    )
    from ledgersync.domain.orchestrator import SyncOutcome

UnitOfWorkFactory = Callable[[], SyncUnitOfWork]
RegistryFactory = Callable[[], ContactRegistry]

ACCESS_TOKEN_SETTING = "xero_access_token"
TENANT_ID_SETTING = "xero_tenant_id"

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    ok: bool
    message: str
    organisation_name: str | None = None


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        database = get_database_config()
        if database.standalone:
            log.warning(
                "DATABASE_URI not set, using standalone database %s", database.display_uri()
            )
        startup(database_uri=database.uri, create_constituent_schema=database.standalone)
    return SqlAlchemySyncUnitOfWork


@cache
def _shared_lock(timeout: float) -> InProcessKeyedLock:
    return InProcessKeyedLock(timeout=timeout)


def load_xero_credentials(unit_of_work_factory: UnitOfWorkFactory) -> XeroCredentials:
    """Read Xero credentials from the environment, else from the CiviCRM settings."""

    try:
        return get_xero_credentials()
    except MissingConfigurationError:
        log.debug("Xero credentials not in environment, trying CiviCRM settings")

    with unit_of_work_factory() as uow:
        settings = uow.repositories.settings
        access_token = settings.get(ACCESS_TOKEN_SETTING)
        tenant_id = settings.get(TENANT_ID_SETTING)

    if not access_token or not tenant_id:
        raise MissingConfigurationError(
            "Xero credentials not configured in the environment or CiviCRM settings",
            names=(ACCESS_TOKEN_SETTING, TENANT_ID_SETTING),
        )
    log.info("Using Xero credentials from CiviCRM settings")
    return XeroCredentials(access_token=access_token.strip(), tenant_id=tenant_id.strip())


def xero_registry_factory(unit_of_work_factory: UnitOfWorkFactory) -> RegistryFactory:
    def factory() -> ContactRegistry:
        credentials = load_xero_credentials(unit_of_work_factory)
        return XeroClient(config=get_xero_config(credentials=credentials))

    return factory


def build_orchestrator(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
    config: SyncConfig | None = None,
) -> ContactSyncOrchestrator:
    effective_config = config or get_sync_config()
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    return ContactSyncOrchestrator(
        unit_of_work_factory=effective_uow,
        registry_factory=registry_factory or xero_registry_factory(effective_uow),
        config=effective_config,
        lock=_shared_lock(effective_config.lock_timeout_seconds),
    )


def sync_order_contact(
    order: Order,
    *,
    context: InvocationContext = ADMIN_CONTEXT,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
    config: SyncConfig | None = None,
) -> SyncOutcome:
    """Create or update the ledger contact for ``order`` using the configured adapters."""

    orchestrator = build_orchestrator(
        unit_of_work_factory=unit_of_work_factory,
        registry_factory=registry_factory,
        config=config,
    )
    log.info("Starting contact sync for order #%s", order.id)
    outcome = orchestrator.sync_order(order, context=context)
    log.info(
        "Finished contact sync for order #%s: state=%s, mode=%s, remote=%s",
        order.id,
        outcome.state,
        outcome.mode,
        outcome.remote_contact.contact_id if outcome.remote_contact else None,
    )
    return outcome


def handle_order_status_change(
    event: OrderStatusChange,
    *,
    context: InvocationContext = ADMIN_CONTEXT,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
    config: SyncConfig | None = None,
) -> SyncOutcome | None:
    """Storefront hook: never raises, so the status change itself is never blocked."""

    try:
        orchestrator = build_orchestrator(
            unit_of_work_factory=unit_of_work_factory,
            registry_factory=registry_factory,
            config=config,
        )
    except ConfigurationError:
        log.exception("Contact sync not configured, order #%s not synced", event.order_id)
        return None
    except Exception:
        log.exception("Contact sync unavailable, order #%s not synced", event.order_id)
        return None
    return orchestrator.handle_status_change(event, context=context)


def check_connection(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
) -> ConnectionCheck:
    """Fetch the organisation record to prove the credentials work."""

    try:
        factory = registry_factory or xero_registry_factory(
            _unit_of_work_factory(unit_of_work_factory)
        )
        registry = factory()
    except ConfigurationError as exc:
        return ConnectionCheck(ok=False, message=f"Failed to initialise ledger client: {exc}")

    try:
        organisation = registry.get_organisation()
    except Exception as exc:  # noqa: BLE001
        log.warning("Connection check failed: %s", exc)
        return ConnectionCheck(ok=False, message=str(exc))

    return ConnectionCheck(
        ok=True,
        message=f"Successfully connected to organisation: {organisation.name}",
        organisation_name=organisation.name,
    )


def list_sync_logs(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
) -> list[SyncLogEntry]:
    effective_config = config or get_sync_config()
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        audit = AuditLog(uow.repositories.sync_log, capacity=effective_config.log_capacity)
        return audit.entries()


def clear_sync_logs(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
) -> int:
    effective_config = config or get_sync_config()
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        audit = AuditLog(uow.repositories.sync_log, capacity=effective_config.log_capacity)
        removed = audit.clear()
        uow.commit()
    return removed


def inspect_user(
    user_id: int,
    *,
    order: Order | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
    config: SyncConfig | None = None,
) -> UserDiagnostics:
    """Report how ``user_id`` resolves through CiviCRM to the ledger."""

    effective_config = config or get_sync_config()
    effective_uow = _unit_of_work_factory(unit_of_work_factory)

    registry: ContactRegistry | None
    try:
        registry = (registry_factory or xero_registry_factory(effective_uow))()
    except ConfigurationError as exc:
        log.warning("Ledger client unavailable for diagnostics: %s", exc)
        registry = None

    with effective_uow() as uow:
        bridge = IdentityBridge(
            constituents=uow.repositories.constituents,
            mappings=uow.repositories.mappings,
            ledger_tag=effective_config.ledger_tag,
        )
        return diagnose_user(user_id, bridge=bridge, registry=registry, order=order)


def push_user_address(
    user_id: int,
    *,
    order: Order | None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
    config: SyncConfig | None = None,
) -> AddressPushReport:
    """Overwrite the postal address on ``user_id``'s ledger contact with the order's."""

    effective_config = config or get_sync_config()
    effective_uow = _unit_of_work_factory(unit_of_work_factory)

    try:
        registry = (registry_factory or xero_registry_factory(effective_uow))()
    except ConfigurationError as exc:
        return AddressPushReport(
            user_id=user_id, message=f"Failed to initialise ledger client: {exc}"
        )

    with effective_uow() as uow:
        bridge = IdentityBridge(
            constituents=uow.repositories.constituents,
            mappings=uow.repositories.mappings,
            ledger_tag=effective_config.ledger_tag,
        )
        report = push_address(user_id, bridge=bridge, registry=registry, order=order)
    log.info("Address push for user %s: %s", user_id, report.message)
    return report


def invoice_details(
    invoice_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry_factory: RegistryFactory | None = None,
) -> Invoice | None:
    """Fetch one ledger invoice; ``None`` when the ledger does not know the id."""

    if not invoice_id.strip():
        raise ValueError("Invoice ID is required")
    factory = registry_factory or xero_registry_factory(
        _unit_of_work_factory(unit_of_work_factory)
    )
    return factory().get_invoice(invoice_id.strip())
