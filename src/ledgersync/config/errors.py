"""Errors raised while reading sync settings.

Any of these stops a sync before the ledger is contacted. The orchestrator records
them in the sync log as ``Configuration error: ...``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, e.g. a non-numeric log capacity."""


class MissingConfigurationError(ConfigurationError):
    """Required settings were found neither in the environment nor in CiviCRM.

    ``names`` lists the settings that were looked up, when the caller knows them.
    """

    def __init__(self, message: str, *, names: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.names = tuple(names)
