"""Sync storefront customers into the ledger as contacts, keyed by CiviCRM identity."""

from __future__ import annotations

from importlib import metadata

DISTRIBUTION_NAME = "ledgersync"

try:
    __version__ = metadata.version(DISTRIBUTION_NAME)
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
