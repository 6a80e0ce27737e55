# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ledgersync import __version__
from ledgersync.adapters.woocommerce import parse_order, status_change_from_document
from ledgersync.adapters.xero import contact_to_payload
from ledgersync.app import (
    check_connection,
    clear_sync_logs,
    handle_order_status_change,
    inspect_user,
    invoice_details,
    list_sync_logs,
    push_user_address,
)
from ledgersync.config import configure_logging
from ledgersync.domain.model import InvocationContext

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from ledgersync.domain.diagnostics import AddressPushReport, UserDiagnostics
    from ledgersync.domain.model import Invoice, SyncLogEntry

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync storefront customers to the ledger")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync the contact for one order")
    sync.add_argument(
        "--order-file",
        type=Path,
        required=True,
        help="WooCommerce order JSON document (REST API or webhook body)",
    )
    sync.add_argument(
        "--old-status",
        type=str,
        default="",
        help="Status the order moved from (the document carries the new status)",
    )
    sync.add_argument(
        "--session-contact-id",
        type=int,
        help="CiviCRM contact of the logged-in customer (storefront context only)",
    )

    subparsers.add_parser("test-connection", help="Check the ledger credentials")

    logs = subparsers.add_parser("logs", help="Sync log commands")
    logs_sub = logs.add_subparsers(dest="logs_command", required=True)
    logs_show = logs_sub.add_parser("show", help="Print the sync log, oldest first")
    logs_show.add_argument("--errors-only", action="store_true", help="Only print errors")
    logs_sub.add_parser("clear", help="Delete every sync log entry")

    inspect = subparsers.add_parser("inspect", help="Diagnose a storefront user's mapping")
    inspect.add_argument("--user-id", type=int, required=True, help="Storefront user id")
    inspect.add_argument(
        "--order-file",
        type=Path,
        help="Most recent order for the user, to show the address a sync would use",
    )
    inspect.add_argument(
        "--push-address",
        action="store_true",
        help="Overwrite the ledger contact's postal address with the --order-file address",
    )

    invoice = subparsers.add_parser("invoice", help="Show one ledger invoice")
    invoice.add_argument("--id", dest="invoice_id", required=True, help="Ledger invoice id")

    return parser.parse_args(list(argv))


def _load_document(path: Path) -> object:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read order document {path}: {exc}") from exc


def _format_entry(entry: SyncLogEntry) -> str:
    timestamp = entry.timestamp.isoformat(timespec="seconds") if entry.timestamp else "-"
    order = f"#{entry.order_id}" if entry.order_id is not None else "-"
    remote = entry.remote_contact_id or "-"
    return f"{timestamp} {entry.kind.upper():7} order={order} contact={remote} {entry.message}"


def _print_diagnostics(report: UserDiagnostics) -> None:
    print(f"User {report.user_id}")
    if report.constituent is None:
        print("  CiviCRM contact: none")
    else:
        contact = report.constituent
        print(f"  CiviCRM contact: {contact.id} {contact.display_name or 'N/A'}")
        print(f"    email: {contact.email or 'N/A'}  phone: {contact.phone or 'N/A'}")
    if report.mapping is not None:
        print(
            f"  Mapping: {report.mapping.remote_contact_id} "
            f"({report.mapping.display_name or 'no name'}, synced {report.mapping.last_sync_date})"
        )
    elif report.mapping_problem is not None:
        print(f"  Mapping: none ({report.mapping_problem})")
    if report.remote_contact is not None:
        remote = report.remote_contact
        print(f"  Ledger contact: {remote.contact_id} {remote.name}")
        print(
            f"    email: {remote.email or 'N/A'}  number: {remote.contact_number or 'N/A'}"
            f"  status: {remote.status or 'N/A'}"
        )
        for address in remote.addresses:
            print(
                f"    {address.address_type}: {address.line1}, {address.city} {address.postal_code}"
            )
    if report.invoices:
        print("  Recent invoices:")
        for invoice in report.invoices:
            label = invoice.number or invoice.invoice_id
            print(f"    {invoice.date} {label} {invoice.status} {invoice.total}")
    if report.address is not None:
        selected = report.address
        print(f"  Sync address ({report.address_kind}): {selected.address_1}, {selected.city}")
    for problem in report.problems:
        print(f"  ! {problem}")


def _print_push(report: AddressPushReport) -> None:
    print(report.message)
    if report.request is not None:
        print("Request Data:")
        print(json.dumps({"Contacts": [contact_to_payload(report.request)]}, indent=2))
    if report.response is not None:
        remote = report.response
        print("Response:")
        print(f"  {remote.contact_id} {remote.name}")
        for address in remote.addresses:
            print(
                f"    {address.address_type}: {address.line1}, {address.city} {address.postal_code}"
            )


def _print_invoice(invoice: Invoice) -> None:
    print(f"Invoice {invoice.number or 'N/A'} ({invoice.invoice_id})")
    print(f"  Contact: {invoice.contact_id or 'N/A'}")
    print(f"  Date: {invoice.date or 'N/A'}  Status: {invoice.status or 'N/A'}")
    print(f"  Type: {invoice.invoice_type or 'N/A'}")
    print(f"  Total: {invoice.total}  Amount due: {invoice.amount_due}")


def _run_command(parsed_args: argparse.Namespace) -> int:
    if parsed_args.command == "sync":
        document = _load_document(parsed_args.order_file)
        event = status_change_from_document(document, old_status=parsed_args.old_status)
        context = InvocationContext(
            is_admin=parsed_args.session_contact_id is None,
            session_contact_id=parsed_args.session_contact_id,
        )
        outcome = handle_order_status_change(event, context=context)
        if outcome is None:
            log.info("Order #%s not synced", event.order_id)
            return 0
        if not outcome.succeeded:
            log.error("Order #%s sync failed: %s", event.order_id, outcome.error)
            return 1
        log.info("Order #%s synced (%s)", event.order_id, outcome.mode or "skipped")
        return 0

    if parsed_args.command == "test-connection":
        result = check_connection()
        print(result.message)
        return 0 if result.ok else 1

    if parsed_args.command == "logs" and parsed_args.logs_command == "show":
        for entry in list_sync_logs():
            if parsed_args.errors_only and not entry.is_error:
                continue
            print(_format_entry(entry))
        return 0

    if parsed_args.command == "logs" and parsed_args.logs_command == "clear":
        removed = clear_sync_logs()
        print(f"Cleared {removed} log entries")
        return 0

    if parsed_args.command == "inspect":
        order = None
        if parsed_args.order_file is not None:
            order = parse_order(_load_document(parsed_args.order_file))
        if parsed_args.push_address:
            if order is None:
                raise ValueError("--push-address needs --order-file")
            report = push_user_address(parsed_args.user_id, order=order)
            _print_push(report)
            return 0 if report.ok else 1
        _print_diagnostics(inspect_user(parsed_args.user_id, order=order))
        return 0

    if parsed_args.command == "invoice":
        found = invoice_details(parsed_args.invoice_id)
        if found is None:
            print(f"Invoice {parsed_args.invoice_id} not found")
            return 1
        _print_invoice(found)
        return 0

    raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = _run_command(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
