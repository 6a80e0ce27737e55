"""Pick the postal address a ledger contact should carry for an order."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ledgersync.domain.model import AddressKind

if TYPE_CHECKING:
    from ledgersync.domain.model import Address, Order

log = getLogger(__name__)


def select_address(order: Order) -> tuple[AddressKind, Address]:
    """Return the address to use and which side of the order it came from.

    Billing wins when it has a primary line, then shipping. Without either, the billing
    address is returned as-is because it may still carry email and phone.
    """

    billing = order.address(AddressKind.BILLING)
    if billing.has_primary_line:
        log.debug("Order #%s: using billing address %r", order.id, billing.address_1)
        return AddressKind.BILLING, billing

    shipping = order.address(AddressKind.SHIPPING)
    if shipping.has_primary_line:
        log.debug("Order #%s: using shipping address %r", order.id, shipping.address_1)
        return AddressKind.SHIPPING, shipping

    log.info("Order #%s has no postal address, using billing contact fields only", order.id)
    return AddressKind.BILLING, billing


def resolve_address(order: Order) -> Address:
    return select_address(order)[1]


def postal_address(order: Order) -> tuple[AddressKind, Address] | None:
    """Like ``select_address`` but ``None`` when neither side has a primary line."""

    kind, address = select_address(order)
    if not address.has_primary_line:
        return None
    return kind, address
