from __future__ import annotations

import pytest

from ledgersync.domain.identity import IdentityBridge
from ledgersync.domain.locator import RemoteContactLocator
from ledgersync.domain.model import (
    AccountMapping,
    ConstituentContact,
    LocateSource,
    RemoteContact,
)
from ledgersync.domain.ports import FilterField
from tests.helpers.ledger import (
    FakeContactRegistry,
    InMemoryAccountMappingRepository,
    InMemoryConstituentRepository,
)


@pytest.fixture
def constituents() -> InMemoryConstituentRepository:
    return InMemoryConstituentRepository(
        [ConstituentContact(id=55, email="jane@example.org")],
        user_matches={7: 55},
    )


@pytest.fixture
def mappings() -> InMemoryAccountMappingRepository:
    return InMemoryAccountMappingRepository()


@pytest.fixture
def registry() -> FakeContactRegistry:
    return FakeContactRegistry(
        [
            RemoteContact(contact_id="by-email", email="jane@example.org", contact_number="1"),
            RemoteContact(contact_id="by-number", email="other@example.org", contact_number="55"),
        ]
    )


@pytest.fixture
def locator(
    constituents: InMemoryConstituentRepository,
    mappings: InMemoryAccountMappingRepository,
    registry: FakeContactRegistry,
) -> RemoteContactLocator:
    bridge = IdentityBridge(constituents=constituents, mappings=mappings, ledger_tag="xero")
    return RemoteContactLocator(bridge=bridge, registry=registry)


def test_mapping_store_wins_over_remote_search(
    locator: RemoteContactLocator,
    mappings: InMemoryAccountMappingRepository,
    registry: FakeContactRegistry,
) -> None:
    mappings.add(
        AccountMapping(contact_id=55, plugin="xero", remote_contact_id="from-mapping")
    )

    located = locator.locate("jane@example.org", "55")

    assert located is not None
    assert located.source is LocateSource.MAPPING_STORE
    assert located.contact.contact_id == "from-mapping"
    assert located.constituent_id == 55
    assert registry.searches == []


def test_resolved_constituent_mapping_checked_before_email_reverse_lookup(
    locator: RemoteContactLocator,
    mappings: InMemoryAccountMappingRepository,
) -> None:
    mappings.add(AccountMapping(contact_id=88, plugin="xero", remote_contact_id="for-88"))

    located = locator.locate("jane@example.org", "88", constituent_id=88)

    assert located is not None
    assert located.contact.contact_id == "for-88"
    assert located.constituent_id == 88


def test_contact_number_search_precedes_email_search(
    locator: RemoteContactLocator,
    registry: FakeContactRegistry,
) -> None:
    located = locator.locate("jane@example.org", "55")

    assert located is not None
    assert located.source is LocateSource.CONTACT_NUMBER
    assert located.contact.contact_id == "by-number"
    assert registry.searches[0] is not None
    assert registry.searches[0].field is FilterField.CONTACT_NUMBER


def test_email_search_used_without_contact_number(locator: RemoteContactLocator) -> None:
    located = locator.locate("jane@example.org")

    assert located is not None
    assert located.source is LocateSource.EMAIL
    assert located.contact.contact_id == "by-email"


def test_failing_stage_does_not_abort_the_chain(
    locator: RemoteContactLocator,
    constituents: InMemoryConstituentRepository,
    registry: FakeContactRegistry,
) -> None:
    constituents.fail_lookups = True
    registry.failing_fields.add(FilterField.CONTACT_NUMBER)

    located = locator.locate("jane@example.org", "55")

    assert located is not None
    assert located.source is LocateSource.EMAIL


def test_failing_mapping_lookup_falls_through_to_search(
    locator: RemoteContactLocator,
    mappings: InMemoryAccountMappingRepository,
) -> None:
    mappings.fail_lookups = True

    located = locator.locate("jane@example.org", "55")

    assert located is not None
    assert located.source is LocateSource.CONTACT_NUMBER


def test_miss_everywhere_returns_none(
    locator: RemoteContactLocator,
    registry: FakeContactRegistry,
) -> None:
    assert locator.locate("nobody@example.org", "999") is None
    assert len(registry.searches) == 2


def test_blank_email_skips_email_search(
    locator: RemoteContactLocator,
    registry: FakeContactRegistry,
) -> None:
    assert locator.locate("", None) is None
    assert registry.searches == []
