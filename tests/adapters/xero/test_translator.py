from __future__ import annotations

from ledgersync.adapters.xero import ContactModel, contact_to_payload, parse_contact
from ledgersync.domain.model import (
    AddressType,
    ContactPayload,
    MailingAddress,
    PhoneEntry,
    PhoneType,
)


def test_payload_with_address_sends_every_address_field() -> None:
    payload = ContactPayload(
        name="Acme - Jane Doe - Order:9",
        email="jane@example.org",
        contact_number="9",
        first_name="Jane",
        last_name="Doe",
        address=MailingAddress(line1="1 High Street", region="WGN"),
    )

    body = contact_to_payload(payload)

    assert body["Addresses"] == [
        {
            "AddressType": "POBOX",
            "AddressLine1": "1 High Street",
            "AddressLine2": "",
            "City": "",
            "PostalCode": "",
            "Country": "",
            "Region": "WGN",
        }
    ]
    assert "Phones" not in body
    assert "ContactID" not in body


def test_payload_with_contact_id_and_phone() -> None:
    payload = ContactPayload(
        name="Jane",
        email="",
        contact_number="9",
        phone=PhoneEntry("021", PhoneType.MOBILE),
        contact_id="c-1",
    )

    body = contact_to_payload(payload)

    assert body["ContactID"] == "c-1"
    assert body["Phones"] == [{"PhoneType": "MOBILE", "PhoneNumber": "021"}]
    assert body["EmailAddress"] == ""


def test_parse_contact_normalizes_blank_and_numeric_values() -> None:
    model = ContactModel.model_validate(
        {
            "ContactID": "c-1",
            "Name": "Jane Doe",
            "FirstName": "Jane",
            "LastName": "Doe",
            "EmailAddress": "  ",
            "ContactNumber": 55,
            "ContactStatus": "ACTIVE",
            "Phones": [
                {"PhoneType": "MOBILE", "PhoneNumber": "021 555"},
                {"PhoneType": "FAX", "PhoneNumber": ""},
                {"PhoneType": "SOMETHING", "PhoneNumber": "04 555"},
            ],
            "Addresses": [{"AddressType": "STREET", "AddressLine1": "1 High Street"}],
            "IsSupplier": False,
        }
    )

    contact = parse_contact(model)

    assert contact.email is None
    assert contact.contact_number == "55"
    assert (contact.first_name, contact.last_name) == ("Jane", "Doe")
    assert contact.phones == (
        PhoneEntry("021 555", PhoneType.MOBILE),
        PhoneEntry("04 555", PhoneType.DEFAULT),
    )
    assert contact.addresses[0].address_type is AddressType.STREET
    assert contact.addresses[0].line1 == "1 High Street"


def test_parse_contact_treats_blank_id_as_missing() -> None:
    contact = parse_contact(ContactModel.model_validate({"ContactID": "", "Name": "Jane"}))

    assert contact.contact_id is None
    assert not contact.has_usable_id
