"""Pydantic models for WooCommerce order documents (REST API and webhook shape)."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_blank(value: object) -> object:
    if value is None:
        return ""
    return value


class WooCommerceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AddressPayload(WooCommerceBaseModel):
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""

    _blank_nulls = field_validator("*", mode="before")(_none_to_blank)


class OrderPayload(WooCommerceBaseModel):
    id: int
    customer_id: int | None = None
    status: str = ""
    total: Decimal = Decimal(0)
    billing: AddressPayload = Field(default_factory=AddressPayload)
    shipping: AddressPayload = Field(default_factory=AddressPayload)

    @field_validator("customer_id", mode="before")
    @classmethod
    def _guest_customer(cls, value: object) -> object:
        # guest checkouts carry customer_id 0
        if value in (0, "0", "", None):
            return None
        return value

    @field_validator("total", mode="before")
    @classmethod
    def _blank_total(cls, value: object) -> object:
        if value in ("", None):
            return Decimal(0)
        return value
