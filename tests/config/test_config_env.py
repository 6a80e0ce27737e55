from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from ledgersync.config import (
    ConfigurationError,
    MissingConfigurationError,
    SyncConfig,
    get_database_config,
    get_sync_config,
    get_xero_config,
    get_xero_credentials,
    require_env_var,
    require_env_vars,
)
from ledgersync.config.env import env_flag, env_list

if TYPE_CHECKING:
    from pathlib import Path


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), ("on", True), ("0", False), ("false", False), ("OFF", False)],
)
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    *,
    expected: bool,
) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_flag("EXAMPLE_FLAG", default=not expected) is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="EXAMPLE_FLAG"):
        env_flag("EXAMPLE_FLAG", default=True)


def test_env_list_skips_blank_items(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_LIST", " processing, ,completed ")

    assert env_list("EXAMPLE_LIST") == ("processing", "completed")


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LEDGERSYNC_SYNC_ENABLED",
        "LEDGERSYNC_LEDGER_TAG",
        "LEDGERSYNC_LOG_CAPACITY",
        "LEDGERSYNC_TRIGGER_STATUSES",
        "LEDGERSYNC_LOCK_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_sync_config()

    assert config == SyncConfig()
    assert config.ledger_tag == "xero"
    assert config.log_capacity == 100
    assert config.triggers_on("anything")


def test_sync_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERSYNC_SYNC_ENABLED", "false")
    monkeypatch.setenv("LEDGERSYNC_LOG_CAPACITY", "25")
    monkeypatch.setenv("LEDGERSYNC_TRIGGER_STATUSES", "processing,completed")
    monkeypatch.setenv("LEDGERSYNC_LOCK_TIMEOUT", "2.5")

    config = get_sync_config()

    assert not config.enabled
    assert config.log_capacity == 25
    assert config.lock_timeout_seconds == 2.5
    assert config.triggers_on("completed")
    assert not config.triggers_on("pending")


def test_sync_config_rejects_non_positive_capacity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGERSYNC_LOG_CAPACITY", "0")

    with pytest.raises(ConfigurationError, match="LEDGERSYNC_LOG_CAPACITY"):
        get_sync_config()


def test_xero_credentials_are_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("XERO_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("XERO_TENANT_ID", "tenant")

    with pytest.raises(MissingConfigurationError, match="XERO_ACCESS_TOKEN"):
        get_xero_credentials()


def test_xero_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XERO_ACCESS_TOKEN", " token ")
    monkeypatch.setenv("XERO_TENANT_ID", "tenant")
    monkeypatch.setenv("XERO_BASE_URL", "https://xero.test/api/")

    config = get_xero_config()

    assert config.credentials.access_token == "token"
    assert config.resilience.base_url == "https://xero.test/api/"
    assert config.resilience.ratelimit is not None
    assert "POST" not in config.resilience.retry.methods


def test_database_config_prefers_explicit_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "mysql+pymysql://civi@localhost/civicrm")

    assert get_database_config().uri == "mysql+pymysql://civi@localhost/civicrm"


def test_database_config_defaults_to_local_sqlite(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("LEDGERSYNC_DATA_DIR", str(tmp_path))

    uri = get_database_config().uri

    assert uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'ledgersync.db'}"


def test_database_config_marks_local_fallback_as_standalone(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("LEDGERSYNC_DATA_DIR", str(tmp_path))

    assert get_database_config().standalone
    monkeypatch.setenv("DATABASE_URI", "mysql+pymysql://civi:secret@db/civicrm")
    config = get_database_config()
    assert not config.standalone
    assert "secret" not in config.display_uri()
