from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from ledgersync import __version__
from ledgersync.app import ConnectionCheck
from ledgersync.domain.diagnostics import AddressPushReport, UserDiagnostics
from ledgersync.domain.model import (
    ConstituentContact,
    ContactPayload,
    InvocationContext,
    Invoice,
    LogKind,
    MailingAddress,
    OrderStatusChange,
    RemoteContact,
    SyncLogEntry,
)
from ledgersync.domain.orchestrator import SyncOutcome, SyncState, WriteMode
from ledgersync.ui import cli

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def order_file(tmp_path: Path) -> Path:
    path = tmp_path / "order.json"
    path.write_text(
        json.dumps(
            {
                "id": 77,
                "status": "completed",
                "customer_id": 7,
                "billing": {"first_name": "Jane", "address_1": "1 High Street"},
            }
        ),
        encoding="utf-8",
    )
    return path


def _outcome(*, failed: bool = False) -> SyncOutcome:
    outcome = SyncOutcome(order_id=77, mode=WriteMode.CREATE)
    if failed:
        outcome.fail("Failed to sync contact to Xero: boom")
    else:
        outcome.advance(SyncState.DONE)
    return outcome


def test_sync_command_builds_status_change(
    monkeypatch: pytest.MonkeyPatch,
    order_file: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_handle(event: OrderStatusChange, *, context: InvocationContext) -> SyncOutcome:
        captured["event"] = event
        captured["context"] = context
        return _outcome()

    monkeypatch.setattr(cli, "handle_order_status_change", fake_handle)

    cli.main(["sync", "--order-file", str(order_file), "--old-status", "processing"])

    event = captured["event"]
    assert isinstance(event, OrderStatusChange)
    assert event.old_status == "processing"
    assert event.new_status == "completed"
    assert event.order.user_id == 7
    assert captured["context"] == InvocationContext(is_admin=True)


def test_sync_command_trusts_session_contact(
    monkeypatch: pytest.MonkeyPatch,
    order_file: Path,
) -> None:
    captured: list[InvocationContext] = []

    def fake_handle(event: OrderStatusChange, *, context: InvocationContext) -> SyncOutcome:
        _ = event
        captured.append(context)
        return _outcome()

    monkeypatch.setattr(cli, "handle_order_status_change", fake_handle)

    cli.main(["sync", "--order-file", str(order_file), "--session-contact-id", "66"])

    assert captured == [InvocationContext(is_admin=False, session_contact_id=66)]


def test_sync_command_exits_non_zero_on_failure(
    monkeypatch: pytest.MonkeyPatch,
    order_file: Path,
) -> None:
    monkeypatch.setattr(
        cli, "handle_order_status_change", lambda *_, **__: _outcome(failed=True)
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--order-file", str(order_file)])

    assert excinfo.value.code == 1


def test_unreadable_order_file_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--order-file", str(tmp_path / "missing.json")])

    assert excinfo.value.code == 2


def test_test_connection_prints_message(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(
        cli,
        "check_connection",
        lambda: ConnectionCheck(ok=False, message="Failed to initialise ledger client: nope"),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["test-connection"])

    assert excinfo.value.code == 1
    assert "Failed to initialise ledger client: nope" in capsys.readouterr().out


def test_logs_show_can_filter_errors(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    entries = [
        SyncLogEntry(message="Contact created in Xero", order_id=1, remote_contact_id="x-1"),
        SyncLogEntry(message="Failed to sync contact to Xero: boom", kind=LogKind.ERROR),
    ]
    monkeypatch.setattr(cli, "list_sync_logs", lambda: entries)

    cli.main(["logs", "show", "--errors-only"])

    output = capsys.readouterr().out
    assert "Failed to sync contact to Xero: boom" in output
    assert "Contact created in Xero" not in output
    assert "ERROR" in output


def test_logs_clear_reports_count(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(cli, "clear_sync_logs", lambda: 4)

    cli.main(["logs", "clear"])

    assert "Cleared 4 log entries" in capsys.readouterr().out


def test_inspect_prints_report(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_inspect(user_id: int, *, order: object = None) -> UserDiagnostics:
        _ = order
        return UserDiagnostics(
            user_id=user_id,
            constituent=ConstituentContact(id=55, first_name="Jane", last_name="Doe"),
            mapping_problem="missing_record",
        )

    monkeypatch.setattr(cli, "inspect_user", fake_inspect)

    cli.main(["inspect", "--user-id", "7"])

    output = capsys.readouterr().out
    assert "User 7" in output
    assert "CiviCRM contact: 55 Jane Doe" in output
    assert "Mapping: none (missing_record)" in output



def test_inspect_push_address_prints_request_and_response(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    order_file: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_push(user_id: int, *, order: object) -> AddressPushReport:
        captured["order"] = order
        return AddressPushReport(
            user_id=user_id,
            ok=True,
            message="Contact updated successfully",
            request=ContactPayload(
                name="Jane Doe",
                email="jane@example.org",
                contact_number="55",
                address=MailingAddress(line1="1 High Street", city="Wellington"),
                contact_id="xero-1",
            ),
            response=RemoteContact(
                contact_id="xero-1",
                name="Jane Doe",
                addresses=(MailingAddress(line1="1 High Street", city="Wellington"),),
            ),
        )

    monkeypatch.setattr(cli, "push_user_address", fake_push)

    cli.main(["inspect", "--user-id", "7", "--order-file", str(order_file), "--push-address"])

    output = capsys.readouterr().out
    assert getattr(captured["order"], "id", None) == 77
    assert "Contact updated successfully" in output
    assert "Request Data:" in output
    assert '"ContactID": "xero-1"' in output
    assert '"AddressType": "POBOX"' in output
    assert "Response:" in output
    assert "POBOX: 1 High Street, Wellington" in output


def test_inspect_push_address_needs_order_file() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["inspect", "--user-id", "7", "--push-address"])

    assert excinfo.value.code == 2


def test_inspect_push_address_failure_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch,
    order_file: Path,
) -> None:
    monkeypatch.setattr(
        cli,
        "push_user_address",
        lambda user_id, **_: AddressPushReport(
            user_id=user_id, message="No ledger contact found for this user"
        ),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["inspect", "--user-id", "7", "--order-file", str(order_file), "--push-address"])

    assert excinfo.value.code == 1


def test_invoice_command_prints_details(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    invoice = Invoice(
        invoice_id="i-7",
        number="INV-7",
        contact_id="xero-1",
        date=date(2026, 3, 15),
        status="AUTHORISED",
        total=Decimal("40.00"),
        invoice_type="ACCREC",
        amount_due=Decimal("15.50"),
    )
    monkeypatch.setattr(cli, "invoice_details", lambda invoice_id: invoice)

    cli.main(["invoice", "--id", "i-7"])

    output = capsys.readouterr().out
    assert "Invoice INV-7 (i-7)" in output
    assert "Type: ACCREC" in output
    assert "Amount due: 15.50" in output


def test_invoice_command_reports_missing_invoice(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(cli, "invoice_details", lambda invoice_id: None)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["invoice", "--id", "nope"])

    assert excinfo.value.code == 1
    assert "Invoice nope not found" in capsys.readouterr().out

def test_missing_subcommand_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 2


def test_version_flag_prints_package_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out
