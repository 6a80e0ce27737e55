"""Translate between domain contact shapes and Xero payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledgersync.domain.model import (
    AddressType,
    Invoice,
    MailingAddress,
    OrganisationInfo,
    PhoneEntry,
    PhoneType,
    RemoteContact,
)

if TYPE_CHECKING:
    from ledgersync.domain.model import ContactPayload

    from .schema import AddressModel, ContactModel, InvoiceModel, OrganisationModel, PhoneModel


def contact_to_payload(payload: ContactPayload) -> dict[str, object]:
    """Render a contact for a create or update request.

    ``Phones`` and ``Addresses`` are left out entirely when absent so the remote values
    stay untouched; address sub-fields are always sent, empty strings included.
    """

    body: dict[str, object] = {
        "Name": payload.name,
        "FirstName": payload.first_name,
        "LastName": payload.last_name,
        "EmailAddress": payload.email,
        "ContactNumber": payload.contact_number,
    }
    if payload.contact_id:
        body["ContactID"] = payload.contact_id
    if payload.phone is not None:
        body["Phones"] = [
            {"PhoneType": payload.phone.phone_type.value, "PhoneNumber": payload.phone.number}
        ]
    if isinstance(payload.address, MailingAddress):
        address = payload.address
        body["Addresses"] = [
            {
                "AddressType": address.address_type.value,
                "AddressLine1": address.line1,
                "AddressLine2": address.line2,
                "City": address.city,
                "PostalCode": address.postal_code,
                "Country": address.country,
                "Region": address.region,
            }
        ]
    return body


def _phone_type(value: str) -> PhoneType:
    try:
        return PhoneType(value)
    except ValueError:
        return PhoneType.DEFAULT


def _address_type(value: str) -> AddressType:
    try:
        return AddressType(value)
    except ValueError:
        return AddressType.MAILING


def _phone(model: PhoneModel) -> PhoneEntry | None:
    if model.phone_number is None:
        return None
    return PhoneEntry(model.phone_number, _phone_type(model.phone_type))


def _address(model: AddressModel) -> MailingAddress:
    return MailingAddress(
        line1=model.address_line1,
        line2=model.address_line2,
        city=model.city,
        postal_code=model.postal_code,
        country=model.country,
        region=model.region,
        address_type=_address_type(model.address_type),
    )


def parse_contact(model: ContactModel) -> RemoteContact:
    phones = tuple(phone for phone in map(_phone, model.phones) if phone is not None)
    return RemoteContact(
        contact_id=model.contact_id,
        name=model.name,
        first_name=model.first_name,
        last_name=model.last_name,
        email=model.email_address,
        contact_number=model.contact_number,
        status=model.contact_status,
        phones=phones,
        addresses=tuple(_address(address) for address in model.addresses),
    )


def parse_organisation(model: OrganisationModel) -> OrganisationInfo:
    return OrganisationInfo(
        name=model.name,
        organisation_id=model.organisation_id,
        country_code=model.country_code,
    )


def parse_invoice(model: InvoiceModel) -> Invoice:
    return Invoice(
        invoice_id=model.invoice_id,
        number=model.invoice_number,
        contact_id=model.contact.contact_id if model.contact else None,
        date=model.invoice_date,
        status=model.status,
        total=model.total,
        invoice_type=model.invoice_type,
        amount_due=model.amount_due,
    )
