"""Assemble the ledger contact payload for an order."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.model import NO_ADDRESS, ContactPayload, MailingAddress, PhoneEntry

if TYPE_CHECKING:
    from ledgersync.domain.model import Address, AddressBlock, ConstituentContact, Order

log = getLogger(__name__)

NAME_SEPARATOR = " - "


def compose_base_name(address: Address) -> str:
    """``Company - First Last``, ``Company``, or ``First Last``."""

    person = f"{address.first_name} {address.last_name}".strip()
    company = address.company.strip()
    if not company:
        return person
    if address.first_name.strip() or address.last_name.strip():
        return f"{company}{NAME_SEPARATOR}{person}"
    return company


def unique_name(base: str, *, contact_id: int | None, order_id: int) -> str:
    """Suffix the name so two orders never collide in the registry."""

    parts = [base] if base else []
    if contact_id is not None:
        parts.append(f"CiviCRM:{contact_id}")
    parts.append(f"Order:{order_id}")
    return NAME_SEPARATOR.join(parts)


def contact_number_for(contact: ConstituentContact | None, order: Order) -> str:
    if contact is not None:
        return str(contact.id)
    return str(order.id)


def _email_for(address: Address, contact: ConstituentContact | None, order: Order) -> str:
    # shipping addresses usually carry no email; fall back to billing, then CiviCRM
    for candidate in (address.email, order.billing.email, contact.email if contact else ""):
        if candidate.strip():
            return candidate.strip()
    return ""


def address_block(address: Address) -> AddressBlock:
    if not address.has_primary_line:
        return NO_ADDRESS
    return MailingAddress(
        line1=address.address_1,
        line2=address.address_2,
        city=address.city,
        postal_code=address.postcode,
        country=address.country,
        region=address.state,
    )


def build_contact_payload(
    address: Address,
    contact: ConstituentContact | None,
    order: Order,
) -> ContactPayload:
    contact_id = contact.id if contact is not None else None
    name = unique_name(compose_base_name(address), contact_id=contact_id, order_id=order.id)
    phone = address.phone.strip()

    payload = ContactPayload(
        name=name,
        first_name=address.first_name.strip(),
        last_name=address.last_name.strip(),
        email=_email_for(address, contact, order),
        contact_number=contact_number_for(contact, order),
        phone=PhoneEntry(phone) if phone else None,
        address=address_block(address),
    )
    log.info(
        "Prepared contact for order #%s: name=%r email=%r contact_number=%r",
        order.id,
        payload.name,
        payload.email,
        payload.contact_number,
    )
    return payload
