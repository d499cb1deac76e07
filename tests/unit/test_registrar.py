"""
Unit tests for the Registrar commit-reveal flow.

Tests verify:
- Commit-then-register succeeds exactly once
- Commitment timing windows
- Exact payment, fee crediting and rollback on failure
- Admin tunables and ownership token minting
"""

from unittest.mock import MagicMock

import pytest

from src.adapters.treasury.memory import InMemoryTreasury
from src.domain.directory import DomainDirectory
from src.domain.events import CommitSubmitted, DomainRegistered, TokenMinted
from src.domain.exceptions import (
    AlreadyRegistered,
    CommitmentNotFound,
    CommitmentTooNew,
    CommitmentTooOld,
    DomainNotRegistered,
    DurationTooLong,
    DurationTooShort,
    IncorrectPayment,
    InvalidDomainName,
    InvalidParameter,
    PermissionDenied,
    PriceUnavailable,
    TokenExists,
)
from src.domain.models import MAX_TIME, DomainRecord, RegistrarConfig
from src.domain.registrar import Registrar
from tests.support import ADMIN, ALICE, BOB, MALLORY, RESOLVER, SECRET, T0, YEAR, commit_and_register, ctx


def _commit(registrar: Registrar, name: str = "alice.vne", owner: str = ALICE, secret: bytes = SECRET) -> str:
    commit_hash = registrar.make_commitment(name, owner, YEAR, secret, RESOLVER)
    registrar.commit(ctx(owner, now=T0), commit_hash)
    return commit_hash


def _register(registrar: Registrar, now: int, name: str = "alice.vne", owner: str = ALICE, **kwargs) -> DomainRecord:
    payment = kwargs.pop("payment", registrar.read_domain_price(name, YEAR))
    secret = kwargs.pop("secret", SECRET)
    return registrar.register(ctx(owner, now=now, payment=payment), name, owner, YEAR, secret, RESOLVER)


class TestMakeCommitment:
    def test_duration_at_minimum_is_too_short(self, registrar: Registrar) -> None:
        with pytest.raises(DurationTooShort):
            registrar.make_commitment("alice.vne", ALICE, registrar.min_registration_duration, SECRET, RESOLVER)

    def test_name_without_suffix_rejected(self, registrar: Registrar) -> None:
        with pytest.raises(InvalidDomainName):
            registrar.make_commitment("alice.com", ALICE, YEAR, SECRET, RESOLVER)

    def test_dotted_label_rejected(self, registrar: Registrar) -> None:
        with pytest.raises(InvalidDomainName):
            registrar.make_commitment("blog.alice.vne", ALICE, YEAR, SECRET, RESOLVER)

    def test_name_is_normalized_before_hashing(self, registrar: Registrar) -> None:
        assert registrar.make_commitment(" Alice.VNE", ALICE, YEAR, SECRET, RESOLVER) == registrar.make_commitment(
            "alice.vne", ALICE, YEAR, SECRET, RESOLVER
        )


class TestRegister:
    def test_end_to_end_alice(self, registrar: Registrar, directory: DomainDirectory) -> None:
        """Commit, wait min_commit_age, register for one year."""
        record = commit_and_register(registrar)

        assert record.domain_owner == ALICE
        assert record.expiry_time == T0 + registrar.min_commit_age + YEAR
        assert record.resolver == RESOLVER
        assert directory.check_availability("alice.vne") is False

    def test_register_before_min_age_is_too_new(self, registrar: Registrar) -> None:
        _commit(registrar)
        with pytest.raises(CommitmentTooNew):
            _register(registrar, now=T0 + registrar.min_commit_age - 1)

    def test_register_after_max_age_is_too_old(self, registrar: Registrar) -> None:
        _commit(registrar)
        with pytest.raises(CommitmentTooOld):
            _register(registrar, now=T0 + registrar.max_commit_age)

    def test_register_without_commitment_not_found(self, registrar: Registrar) -> None:
        with pytest.raises(CommitmentNotFound):
            _register(registrar, now=T0 + 100)

    def test_register_with_different_secret_not_found(self, registrar: Registrar) -> None:
        _commit(registrar)
        with pytest.raises(CommitmentNotFound):
            _register(registrar, now=T0 + 100, secret=bytes(32))

    def test_replay_fails_already_registered(self, registrar: Registrar) -> None:
        _commit(registrar)
        _register(registrar, now=T0 + 100)
        with pytest.raises(AlreadyRegistered):
            _register(registrar, now=T0 + 101)

    def test_second_commitment_for_taken_name_fails(self, registrar: Registrar) -> None:
        _commit(registrar)
        _register(registrar, now=T0 + 100)
        _commit(registrar, owner=BOB, secret=b"\x07" * 32)
        with pytest.raises(AlreadyRegistered):
            _register(registrar, now=T0 + 200, owner=BOB, secret=b"\x07" * 32)

    def test_incorrect_payment_rejected(self, registrar: Registrar, directory: DomainDirectory) -> None:
        _commit(registrar)
        price = registrar.read_domain_price("alice.vne", YEAR)
        with pytest.raises(IncorrectPayment):
            _register(registrar, now=T0 + 100, payment=price - 1)
        with pytest.raises(IncorrectPayment):
            _register(registrar, now=T0 + 100, payment=price + 1)
        assert directory.check_availability("alice.vne") is True

    def test_fee_credited_to_admin(self, registrar: Registrar, treasury: InMemoryTreasury) -> None:
        price = registrar.read_domain_price("alice.vne", YEAR)
        commit_and_register(registrar)
        assert treasury.balance_of(ADMIN) == price

    def test_unpriceable_name_rejected(self, registrar: Registrar) -> None:
        registrar.pricing = MagicMock()
        registrar.pricing.calculate_price.return_value = None
        with pytest.raises(PriceUnavailable):
            _register(registrar, now=T0 + 100, payment=0)

    def test_duration_past_storable_range_rejected(self, registrar: Registrar, directory: DomainDirectory) -> None:
        with pytest.raises(DurationTooLong):
            registrar.register(ctx(ALICE, now=T0 + 100), "alice.vne", ALICE, MAX_TIME - T0, SECRET, RESOLVER)
        assert directory.check_availability("alice.vne") is True

    def test_treasury_failure_rolls_back_record(self, registrar: Registrar, directory: DomainDirectory) -> None:
        _commit(registrar)
        registrar.treasury = MagicMock()
        registrar.treasury.credit.side_effect = RuntimeError("treasury offline")

        with pytest.raises(RuntimeError):
            _register(registrar, now=T0 + 100)

        assert directory.check_availability("alice.vne") is True

    def test_events_published_after_success(self, registrar: Registrar) -> None:
        registrar.events = MagicMock()
        _commit(registrar)
        _register(registrar, now=T0 + 100)

        published = [c.args[0] for c in registrar.events.publish.call_args_list]
        assert isinstance(published[0], CommitSubmitted)
        registered = published[-1]
        assert isinstance(registered, DomainRegistered)
        assert registered.domain_grace_period == registrar.directory.grace_period
        assert registered.domain_creation_time == T0 + 100

    def test_no_event_on_failure(self, registrar: Registrar) -> None:
        registrar.events = MagicMock()
        with pytest.raises(CommitmentNotFound):
            _register(registrar, now=T0 + 100)
        registrar.events.publish.assert_not_called()


class TestConsumeCommitment:
    def test_valid_commitment_returned(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar)
        commitment = registrar.consume_commitment("alice.vne", YEAR, commit_hash, T0 + registrar.min_commit_age)
        assert commitment.submitted_at == T0

    def test_unknown_hash_not_found(self, registrar: Registrar) -> None:
        with pytest.raises(CommitmentNotFound):
            registrar.consume_commitment("alice.vne", YEAR, "ab" * 32, T0 + 100)

    def test_young_commitment_too_new(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar)
        with pytest.raises(CommitmentTooNew):
            registrar.consume_commitment("alice.vne", YEAR, commit_hash, T0 + registrar.min_commit_age - 1)

    def test_aged_out_commitment_too_old(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar)
        with pytest.raises(CommitmentTooOld):
            registrar.consume_commitment("alice.vne", YEAR, commit_hash, T0 + registrar.max_commit_age)

    def test_duration_below_minimum_too_short(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar)
        with pytest.raises(DurationTooShort):
            registrar.consume_commitment(
                "alice.vne", registrar.min_registration_duration - 1, commit_hash, T0 + 100
            )

    def test_taken_name_already_registered(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar, owner=BOB, secret=b"\x07" * 32)
        commit_and_register(registrar)
        with pytest.raises(AlreadyRegistered):
            registrar.consume_commitment("alice.vne", YEAR, commit_hash, T0 + 100)


class TestParameters:
    def test_defaults_come_from_config(self, registrar: Registrar) -> None:
        assert registrar.min_commit_age == 60
        assert registrar.max_commit_age == 86_400
        assert registrar.min_registration_duration == 2_419_200

    def test_admin_updates_window(self, registrar: Registrar) -> None:
        registrar.set_max_commit_age(ctx(ADMIN), 3_600)
        registrar.set_min_commit_age(ctx(ADMIN), 10)
        registrar.set_min_registration_duration(ctx(ADMIN), 100)
        assert (registrar.min_commit_age, registrar.max_commit_age) == (10, 3_600)
        assert registrar.min_registration_duration == 100

    def test_non_admin_rejected(self, registrar: Registrar) -> None:
        with pytest.raises(PermissionDenied):
            registrar.set_min_commit_age(ctx(MALLORY), 1)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_commit_age": 86_400},
            {"max_commit_age": 60},
            {"min_commit_age": -1},
            {"min_registration_duration": -1},
        ],
    )
    def test_invalid_values_rejected(self, registrar: Registrar, kwargs: dict) -> None:
        with pytest.raises(InvalidParameter):
            registrar.update_parameters(ctx(ADMIN), **kwargs)

    def test_update_is_all_or_nothing(self, registrar: Registrar) -> None:
        with pytest.raises(InvalidParameter):
            registrar.update_parameters(ctx(ADMIN), min_registration_duration=5, min_commit_age=10**9)
        assert registrar.min_registration_duration == 2_419_200

    def test_tunables_survive_a_new_registrar(self, registrar: Registrar) -> None:
        registrar.set_min_commit_age(ctx(ADMIN), 5)
        other = Registrar(
            store=registrar.store,
            directory=registrar.directory,
            pricing=registrar.pricing,
            tokens=registrar.tokens,
            treasury=registrar.treasury,
            events=registrar.events,
            config=RegistrarConfig(admin=ADMIN),
        )
        assert other.min_commit_age == 5

    def test_purge_expired_commitments(self, registrar: Registrar) -> None:
        commit_hash = _commit(registrar)
        assert registrar.purge_expired_commitments(ctx(ADMIN, now=T0 + 2 * registrar.max_commit_age)) == 1
        assert registrar.commitments.get(commit_hash) is None

    def test_purge_requires_admin(self, registrar: Registrar) -> None:
        with pytest.raises(PermissionDenied):
            registrar.purge_expired_commitments(ctx(MALLORY))


class TestMintNft:
    def test_mint_allocates_sequential_ids(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        commit_and_register(registrar, "bob.vne", owner=BOB)

        assert registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://a") == 1
        assert registrar.mint_nft(ctx(BOB), "bob.vne", BOB, "ipfs://b") == 2
        assert registrar.token_id == 2
        assert registrar.tokens.owner_of(1) == ALICE
        assert registrar.tokens.domain_of(2) == "bob.vne"

    def test_mint_for_non_owner_rejected(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        with pytest.raises(PermissionDenied):
            registrar.mint_nft(ctx(MALLORY), "alice.vne", MALLORY, "ipfs://x")
        assert registrar.token_id == 0

    def test_mint_unregistered_domain(self, registrar: Registrar) -> None:
        with pytest.raises(DomainNotRegistered):
            registrar.mint_nft(ctx(ALICE), "ghost.vne", ALICE, "ipfs://x")

    def test_mint_publishes_event(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        registrar.events = MagicMock()
        registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://a")
        event = registrar.events.publish.call_args.args[0]
        assert isinstance(event, TokenMinted)
        assert event.token_id == 1

    def test_caller_must_own_the_domain(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        with pytest.raises(PermissionDenied):
            registrar.mint_nft(ctx(MALLORY), "alice.vne", ALICE, "ipfs://x")
        assert registrar.token_id == 0
        assert registrar.tokens.balance_of(ALICE) == 0

    def test_second_mint_for_domain_rejected(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://a")

        with pytest.raises(TokenExists):
            registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://b")
        assert registrar.token_id == 1
        assert registrar.tokens.balance_of(ALICE) == 1

    def test_mint_again_after_burn(self, registrar: Registrar) -> None:
        commit_and_register(registrar)
        registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://a")
        registrar.tokens.burn(ALICE, 1)

        assert registrar.mint_nft(ctx(ALICE), "alice.vne", ALICE, "ipfs://a") == 2
