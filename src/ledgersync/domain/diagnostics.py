"""Operator report on how a storefront user maps through to the ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.address import postal_address
from ledgersync.domain.contact_builder import address_block
from ledgersync.domain.lookup import Found
from ledgersync.domain.model import ADMIN_CONTEXT, ContactPayload

if TYPE_CHECKING:
    from ledgersync.domain.identity import IdentityBridge
    from ledgersync.domain.model import (
        AccountMapping,
        Address,
        AddressKind,
        ConstituentContact,
        Invoice,
        Order,
        RemoteContact,
    )
    from ledgersync.domain.ports import ContactRegistry

log = getLogger(__name__)

RECENT_INVOICE_LIMIT = 5


@dataclass(slots=True)
class UserDiagnostics:
    user_id: int
    constituent: ConstituentContact | None = None
    mapping: AccountMapping | None = None
    mapping_problem: str | None = None
    remote_contact: RemoteContact | None = None
    invoices: list[Invoice] = field(default_factory=list)
    address_kind: AddressKind | None = None
    address: Address | None = None
    problems: list[str] = field(default_factory=list)


def diagnose_user(
    user_id: int,
    *,
    bridge: IdentityBridge,
    registry: ContactRegistry | None,
    order: Order | None = None,
    invoice_limit: int = RECENT_INVOICE_LIMIT,
) -> UserDiagnostics:
    """Collect everything an operator needs to debug one user's sync.

    Each step degrades independently: a failing remote call is reported in
    ``problems`` and the remaining sections are still filled in.
    """

    report = UserDiagnostics(user_id=user_id)

    if order is not None:
        selected = postal_address(order)
        if selected is not None:
            report.address_kind, report.address = selected

    report.constituent = bridge.constituent_for(user_id, ADMIN_CONTEXT)
    if report.constituent is None:
        report.problems.append("No constituent linked to this user")
        return report

    result = bridge.mapping_for(report.constituent.id)
    if not isinstance(result, Found):
        report.mapping_problem = result.reason
        return report
    report.mapping = result.value

    if registry is None:
        report.problems.append("Ledger client unavailable")
        return report

    remote_id = report.mapping.remote_contact_id or ""
    try:
        report.remote_contact = registry.get_contact(remote_id)
    except Exception as exc:  # noqa: BLE001
        log.warning("Could not fetch ledger contact %s: %s", remote_id, exc)
        report.problems.append(f"Ledger contact lookup failed: {exc}")
        return report

    if report.remote_contact is None:
        report.problems.append(f"Ledger contact {remote_id} no longer exists")
        return report

    try:
        report.invoices = registry.recent_invoices(remote_id, limit=invoice_limit)
    except Exception as exc:  # noqa: BLE001
        log.warning("Could not fetch invoices for %s: %s", remote_id, exc)
        report.problems.append(f"Invoice lookup failed: {exc}")
    return report


@dataclass(slots=True)
class AddressPushReport:
    """Result of pushing an order address onto the mapped ledger contact."""

    user_id: int
    ok: bool = False
    message: str = ""
    request: ContactPayload | None = None
    response: RemoteContact | None = None


def push_address(
    user_id: int,
    *,
    bridge: IdentityBridge,
    registry: ContactRegistry,
    order: Order | None,
) -> AddressPushReport:
    """Overwrite the mapped ledger contact's postal address with the order's.

    Every other field is echoed back from the remote contact, so only the
    address changes. Nothing is raised; the outcome is in the report.
    """

    report = AddressPushReport(user_id=user_id)

    constituent = bridge.constituent_for(user_id, ADMIN_CONTEXT)
    if constituent is None:
        report.message = "No CiviCRM contact found for this user"
        return report

    mapping = bridge.mapping_for(constituent.id)
    if not isinstance(mapping, Found):
        report.message = "No ledger contact found for this user"
        return report

    remote_id = mapping.value.remote_contact_id or ""
    try:
        existing = registry.get_contact(remote_id)
    except Exception as exc:  # noqa: BLE001
        log.warning("Could not fetch ledger contact %s: %s", remote_id, exc)
        report.message = f"Failed to update contact: {exc}"
        return report
    if existing is None or not existing.has_usable_id:
        report.message = "No ledger contact found for this user"
        return report

    selected = postal_address(order) if order is not None else None
    if selected is None:
        report.message = "No address information available"
        return report

    report.request = ContactPayload(
        contact_id=existing.contact_id,
        name=existing.name or "",
        first_name=existing.first_name or "",
        last_name=existing.last_name or "",
        email=existing.email or "",
        contact_number=existing.contact_number or "",
        address=address_block(selected[1]),
    )
    log.info("Pushing %s address of user %s to ledger contact %s", selected[0], user_id, remote_id)
    try:
        results = registry.update_contacts([report.request])
    except Exception as exc:  # noqa: BLE001
        log.warning("Address push to %s failed: %s", remote_id, exc)
        report.message = f"Failed to update contact: {exc}"
        return report

    report.response = results[0] if results else None
    if report.response is None or not report.response.has_usable_id:
        report.message = "Failed to update contact: response carried no contact"
        return report
    report.ok = True
    report.message = "Contact updated successfully"
    return report
