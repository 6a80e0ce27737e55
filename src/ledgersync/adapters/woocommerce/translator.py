"""Translate WooCommerce order documents into domain orders."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.model import Address, Order, OrderStatusChange

from .schema import OrderPayload

if TYPE_CHECKING:
    from .schema import AddressPayload

log = getLogger(__name__)


def _address(payload: AddressPayload) -> Address:
    return Address.from_fields(payload.model_dump())


def parse_order(document: object) -> Order:
    """Validate a raw order document and convert it to an ``Order``."""

    payload = OrderPayload.model_validate(document)
    order = Order(
        id=payload.id,
        user_id=payload.customer_id,
        billing=_address(payload.billing),
        shipping=_address(payload.shipping),
        total=payload.total,
        status=payload.status,
    )
    log.debug("Parsed order #%s (user %s, status %r)", order.id, order.user_id, order.status)
    return order


def status_change_from_document(document: object, *, old_status: str = "") -> OrderStatusChange:
    """Build the status-change event for an order document's current status."""

    order = parse_order(document)
    return OrderStatusChange(
        order_id=order.id,
        old_status=old_status,
        new_status=order.status,
        order=order,
    )
