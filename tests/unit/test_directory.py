"""
Unit tests for the DomainDirectory lifecycle and content records.

Tests verify:
- Lifecycle states around expiry and grace period
- Renewal and unregistration rules
- Ownership changes and content slots
- Read proxy forwarding
"""

from unittest.mock import MagicMock

import pytest

from src.domain import hashing
from src.domain.directory import DomainDirectory
from src.domain.events import DomainRenewed, GracePeriodChanged
from src.domain.exceptions import (
    DomainNotExpired,
    DomainNotRegistered,
    DurationTooLong,
    DurationTooShort,
    InvalidContentKey,
    InvalidParameter,
    PermissionDenied,
    RenewTimeExpired,
)
from src.domain.models import MAX_TIME, ContentCategory, DomainRecord
from src.domain.ports import DomainState
from src.domain.proxy import Directory
from tests.support import ADMIN, ALICE, BOB, MALLORY, MANAGER, RESOLVER, SECRET, T0, YEAR, ctx


@pytest.fixture
def expiry(alice_domain: DomainRecord) -> int:
    return alice_domain.expiry_time


class TestSetRecord:
    def test_digest_mismatch_refused(self, directory: DomainDirectory) -> None:
        digest = hashing.integrity_digest("alice.vne", ALICE, T0 + YEAR)
        created = directory.set_record(digest, "alice.vne", ALICE, YEAR, SECRET, RESOLVER, T0 + YEAR + 1)
        assert created is False
        assert directory.check_availability("alice.vne") is True

    def test_existing_name_refused(self, directory: DomainDirectory) -> None:
        digest = hashing.integrity_digest("alice.vne", ALICE, T0 + YEAR)
        assert directory.set_record(digest, "alice.vne", ALICE, YEAR, SECRET, RESOLVER, T0 + YEAR) is True
        assert directory.set_record(digest, "alice.vne", ALICE, YEAR, SECRET, RESOLVER, T0 + YEAR) is False


class TestDomainState:
    def test_unknown_name_is_available(self, directory: DomainDirectory) -> None:
        assert directory.domain_state("nobody.vne", T0) == DomainState.AVAILABLE

    def test_states_follow_expiry_and_grace(self, directory: DomainDirectory, expiry: int) -> None:
        grace = directory.grace_period
        assert directory.domain_state("alice.vne", expiry - 1) == DomainState.REGISTERED
        assert directory.domain_state("alice.vne", expiry) == DomainState.EXPIRED_GRACE
        assert directory.domain_state("alice.vne", expiry + grace) == DomainState.EXPIRED_GRACE
        assert directory.domain_state("alice.vne", expiry + grace + 1) == DomainState.UNREGISTERABLE


class TestRenew:
    def test_renew_extends_expiry_exactly(self, directory: DomainDirectory, expiry: int) -> None:
        record = directory.renew_domain(ctx(ALICE, now=T0 + 1_000), "alice.vne", YEAR)
        assert record.expiry_time == expiry + YEAR
        assert directory.read_expiry("alice.vne") == expiry + YEAR

    def test_renew_allowed_on_last_grace_second(self, directory: DomainDirectory, expiry: int) -> None:
        now = expiry + directory.grace_period
        assert directory.renew_domain(ctx(ALICE, now=now), "alice.vne", 10).expiry_time == expiry + 10

    def test_renew_after_grace_rejected(self, directory: DomainDirectory, expiry: int) -> None:
        with pytest.raises(RenewTimeExpired):
            directory.renew_domain(ctx(ALICE, now=expiry + directory.grace_period + 1), "alice.vne", YEAR)

    def test_renew_by_non_owner_rejected(self, directory: DomainDirectory, expiry: int) -> None:
        with pytest.raises(PermissionDenied):
            directory.renew_domain(ctx(MALLORY), "alice.vne", YEAR)
        assert directory.read_expiry("alice.vne") == expiry

    @pytest.mark.parametrize("extra", [0, -5])
    def test_non_positive_extension_rejected(self, directory: DomainDirectory, alice_domain, extra: int) -> None:
        with pytest.raises(DurationTooShort):
            directory.renew_domain(ctx(ALICE), "alice.vne", extra)

    def test_extension_past_storable_range_rejected(self, directory: DomainDirectory, expiry: int) -> None:
        with pytest.raises(DurationTooLong):
            directory.renew_domain(ctx(ALICE), "alice.vne", MAX_TIME - expiry + 1)
        assert directory.read_expiry("alice.vne") == expiry

    def test_renew_unknown_domain(self, directory: DomainDirectory) -> None:
        with pytest.raises(DomainNotRegistered):
            directory.renew_domain(ctx(ALICE), "ghost.vne", YEAR)

    def test_renew_publishes_event(self, directory: DomainDirectory, expiry: int) -> None:
        directory.events = MagicMock()
        directory.renew_domain(ctx(ALICE), "alice.vne", 100)
        event = directory.events.publish.call_args.args[0]
        assert isinstance(event, DomainRenewed)
        assert event.domain_expiry_time == expiry + 100


class TestUnregister:
    def test_manager_unregisters_after_grace(self, directory: DomainDirectory, expiry: int) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", "social", "@alice")
        now = expiry + directory.grace_period + 1

        directory.unregister_domain(ctx(MANAGER, now=now), "alice.vne")

        assert directory.check_availability("alice.vne") is True
        assert directory.domain_state("alice.vne", now) == DomainState.AVAILABLE
        with pytest.raises(DomainNotRegistered):
            directory.read_content("alice.vne")

    def test_unregister_inside_grace_rejected(self, directory: DomainDirectory, expiry: int) -> None:
        with pytest.raises(DomainNotExpired):
            directory.unregister_domain(ctx(MANAGER, now=expiry + directory.grace_period), "alice.vne")

    def test_unregister_by_owner_rejected(self, directory: DomainDirectory, expiry: int) -> None:
        with pytest.raises(PermissionDenied):
            directory.unregister_domain(ctx(ALICE, now=expiry + directory.grace_period + 1), "alice.vne")

    def test_unregister_unknown_domain(self, directory: DomainDirectory) -> None:
        with pytest.raises(DomainNotRegistered):
            directory.unregister_domain(ctx(MANAGER), "ghost.vne")

    def test_unregister_drops_subdomain_delegation(self, directory: DomainDirectory, expiry: int) -> None:
        directory.register_subdomain(ctx(ALICE), "alice.vne", "blog.alice.vne")
        directory.unregister_domain(ctx(MANAGER, now=expiry + directory.grace_period + 1), "alice.vne")
        with pytest.raises(DomainNotRegistered):
            directory.read_subdomain_manager("blog.alice.vne")


class TestChangeOwner:
    def test_owner_hands_over_and_drops_content(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", "website", "https://alice.example")
        directory.change_domain_owner(ctx(ALICE), "alice.vne", BOB, keep_content=False)

        assert directory.read_owner("alice.vne") == BOB
        assert directory.read_content("alice.vne").website == ""

    def test_keep_content(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", "website", "https://alice.example")
        directory.change_domain_owner(ctx(ALICE), "alice.vne", BOB, keep_content=True)
        assert directory.read_content("alice.vne").website == "https://alice.example"

    def test_non_owner_rejected(self, directory: DomainDirectory, alice_domain) -> None:
        with pytest.raises(PermissionDenied):
            directory.change_domain_owner(ctx(MALLORY), "alice.vne", MALLORY, keep_content=False)


class TestContent:
    def test_fresh_content_has_empty_slots(self, directory: DomainDirectory, alice_domain) -> None:
        content = directory.read_content("alice.vne")
        assert content.entries["social"] == [""] * 5
        assert content.website == ""
        assert content.content_hash == ""

    def test_slots_fill_in_order(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", ContentCategory.SOCIAL, "@one")
        directory.set_content_text(ctx(ALICE), "alice.vne", "SOCIAL", "@two")
        assert directory.read_content("alice.vne").entries["social"][:3] == ["@one", "@two", ""]

    def test_explicit_index_overwrites(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", "address", "first")
        directory.set_content_text(ctx(ALICE), "alice.vne", "address", "replaced", index=0)
        assert directory.read_content("alice.vne").entries["address"][0] == "replaced"

    def test_full_category_rejected(self, directory: DomainDirectory, alice_domain) -> None:
        for i in range(5):
            directory.set_content_text(ctx(ALICE), "alice.vne", "general", f"g{i}")
        with pytest.raises(InvalidContentKey):
            directory.set_content_text(ctx(ALICE), "alice.vne", "general", "overflow")

    @pytest.mark.parametrize("key,index", [("nickname", None), ("social", 5)])
    def test_bad_key_or_index_rejected(self, directory: DomainDirectory, alice_domain, key, index) -> None:
        with pytest.raises(InvalidContentKey):
            directory.set_content_text(ctx(ALICE), "alice.vne", key, "x", index=index)

    def test_failed_write_leaves_content_untouched(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_text(ctx(ALICE), "alice.vne", "social", "@keep")
        with pytest.raises(InvalidContentKey):
            directory.set_content_text(ctx(ALICE), "alice.vne", "social", "x", index=9)
        assert directory.read_content("alice.vne").entries["social"][0] == "@keep"

    def test_content_hash(self, directory: DomainDirectory, alice_domain) -> None:
        directory.set_content_hash(ctx(ALICE), "alice.vne", "bafy-hash")
        assert directory.read_content_hash("alice.vne") == "bafy-hash"

    def test_content_writes_owner_only(self, directory: DomainDirectory, alice_domain) -> None:
        with pytest.raises(PermissionDenied):
            directory.set_content_text(ctx(MALLORY), "alice.vne", "social", "@mallory")
        with pytest.raises(PermissionDenied):
            directory.set_content_hash(ctx(MALLORY), "alice.vne", "evil")


class TestAdministration:
    def test_grace_period_applies_to_existing_domains(self, directory: DomainDirectory, expiry: int) -> None:
        directory.set_grace_period(ctx(ADMIN), 0)
        assert directory.domain_state("alice.vne", expiry + 1) == DomainState.UNREGISTERABLE

    def test_grace_period_event(self, directory: DomainDirectory) -> None:
        directory.events = MagicMock()
        directory.set_grace_period(ctx(ADMIN), 10)
        assert directory.events.publish.call_args.args[0] == GracePeriodChanged(grace_period=10)

    def test_negative_grace_period_rejected(self, directory: DomainDirectory) -> None:
        with pytest.raises(InvalidParameter):
            directory.set_grace_period(ctx(ADMIN), -1)

    def test_grace_period_admin_only(self, directory: DomainDirectory) -> None:
        with pytest.raises(PermissionDenied):
            directory.set_grace_period(ctx(MALLORY), 1)

    def test_non_admin_invalid_grace_period_is_permission_denied(self, directory: DomainDirectory) -> None:
        with pytest.raises(PermissionDenied):
            directory.set_grace_period(ctx(MALLORY), -1)

    def test_change_manager(self, directory: DomainDirectory, expiry: int) -> None:
        directory.change_manager(ctx(ADMIN), BOB)
        now = expiry + directory.grace_period + 1
        with pytest.raises(PermissionDenied):
            directory.unregister_domain(ctx(MANAGER, now=now), "alice.vne")
        directory.unregister_domain(ctx(BOB, now=now), "alice.vne")
        assert directory.check_availability("alice.vne")


class TestReadProxy:
    def test_proxy_forwards_reads(self, directory: DomainDirectory, alice_domain: DomainRecord) -> None:
        directory.set_content_hash(ctx(ALICE), "alice.vne", "h")
        proxy = Directory(reader=directory)
        assert proxy.read_owner("alice.vne") == ALICE
        assert proxy.read_expiry("alice.vne") == alice_domain.expiry_time
        assert proxy.read_content_hash("alice.vne") == "h"

    def test_proxy_propagates_not_registered(self, directory: DomainDirectory) -> None:
        with pytest.raises(DomainNotRegistered):
            Directory(reader=directory).read_owner("ghost.vne")
