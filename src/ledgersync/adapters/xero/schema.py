"""Pydantic models describing the Xero accounting API payloads."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class XeroBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PhoneModel(XeroBaseModel):
    phone_type: str = Field(default="DEFAULT", alias="PhoneType")
    phone_number: str | None = Field(default=None, alias="PhoneNumber")

    _normalize_number = field_validator("phone_number", mode="before")(_blank_to_none)


class AddressModel(XeroBaseModel):
    address_type: str = Field(default="POBOX", alias="AddressType")
    address_line1: str = Field(default="", alias="AddressLine1")
    address_line2: str = Field(default="", alias="AddressLine2")
    city: str = Field(default="", alias="City")
    postal_code: str = Field(default="", alias="PostalCode")
    country: str = Field(default="", alias="Country")
    region: str = Field(default="", alias="Region")


class ContactModel(XeroBaseModel):
    contact_id: str | None = Field(default=None, alias="ContactID")
    name: str | None = Field(default=None, alias="Name")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")
    email_address: str | None = Field(default=None, alias="EmailAddress")
    contact_number: str | None = Field(default=None, alias="ContactNumber")
    contact_status: str | None = Field(default=None, alias="ContactStatus")
    phones: list[PhoneModel] = Field(default_factory=list[PhoneModel], alias="Phones")
    addresses: list[AddressModel] = Field(default_factory=list[AddressModel], alias="Addresses")

    _normalize_ids = field_validator("contact_id", "name", "email_address", mode="before")(
        _blank_to_none
    )

    @field_validator("contact_number", mode="before")
    @classmethod
    def _stringify_number(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return _blank_to_none(value)


class ContactsResponse(XeroBaseModel):
    contacts: list[ContactModel] = Field(default_factory=list[ContactModel], alias="Contacts")


class OrganisationModel(XeroBaseModel):
    name: str = Field(alias="Name")
    organisation_id: str | None = Field(default=None, alias="OrganisationID")
    country_code: str | None = Field(default=None, alias="CountryCode")


class OrganisationsResponse(XeroBaseModel):
    organisations: list[OrganisationModel] = Field(
        default_factory=list[OrganisationModel], alias="Organisations"
    )


class InvoiceContactModel(XeroBaseModel):
    contact_id: str | None = Field(default=None, alias="ContactID")


class InvoiceModel(XeroBaseModel):
    invoice_id: str = Field(alias="InvoiceID")
    invoice_number: str | None = Field(default=None, alias="InvoiceNumber")
    contact: InvoiceContactModel | None = Field(default=None, alias="Contact")
    date_string: str | None = Field(default=None, alias="DateString")
    status: str | None = Field(default=None, alias="Status")
    invoice_type: str | None = Field(default=None, alias="Type")
    total: Decimal | None = Field(default=None, alias="Total")
    amount_due: Decimal | None = Field(default=None, alias="AmountDue")

    @property
    def invoice_date(self) -> date | None:
        if not self.date_string:
            return None
        return datetime.fromisoformat(self.date_string).date()


class InvoicesResponse(XeroBaseModel):
    invoices: list[InvoiceModel] = Field(default_factory=list[InvoiceModel], alias="Invoices")


class ValidationErrorModel(XeroBaseModel):
    message: str = Field(alias="Message")


class ErrorElementModel(XeroBaseModel):
    validation_errors: list[ValidationErrorModel] = Field(
        default_factory=list[ValidationErrorModel], alias="ValidationErrors"
    )


class ErrorResponse(XeroBaseModel):
    """Both shapes Xero uses: API exceptions (``Type``/``Message``) and auth problems
    (``Title``/``Detail``)."""

    type: str | None = Field(default=None, alias="Type")
    message: str | None = Field(default=None, alias="Message")
    title: str | None = Field(default=None, alias="Title")
    detail: str | None = Field(default=None, alias="Detail")
    elements: list[ErrorElementModel] = Field(
        default_factory=list[ErrorElementModel], alias="Elements"
    )

    def describe(self) -> str:
        headline = self.message or self.detail or self.title or self.type or "Unknown error"
        details = [
            error.message for element in self.elements for error in element.validation_errors
        ]
        if details:
            return f"{headline}: {'; '.join(details)}"
        return headline
