"""Public interface for the WooCommerce adapter."""

from __future__ import annotations

from .schema import AddressPayload, OrderPayload
from .translator import parse_order, status_change_from_document

__all__ = [
    "AddressPayload",
    "OrderPayload",
    "parse_order",
    "status_change_from_document",
]
