"""
Registrar - commit-reveal registration protocol.

Registration Flow
=================

1. commit(hash)            caller publishes hash(name, owner, duration, secret, resolver)
2. wait                    at least min_commit_age, less than max_commit_age
3. register(parameters)    price check -> recompute hash -> consume commitment
                           -> directory.set_record -> treasury credit -> event

The secret never appears on the wire until step 3, and by then the
commitment has been visible for min_commit_age. Someone who copies the
revealed parameters with a different owner produces a different hash,
for which no aged commitment exists.

register runs as a single store.atomic() block: a failure in any nested
call (pricing, directory, treasury) rolls back every write, and the
DomainRegistered event is published only after the block commits.
"""

import logging
from dataclasses import dataclass, field

from . import hashing
from .commitments import CommitStore
from .directory import DomainDirectory
from .events import CommitSubmitted, DomainRegistered, TokenMinted
from .exceptions import (
    AlreadyRegistered,
    DurationTooLong,
    DurationTooShort,
    IncorrectPayment,
    InvalidParameter,
    PermissionDenied,
    PriceUnavailable,
    TokenExists,
)
from .models import MAX_TIME, CommitInfo, Commitment, DomainRecord, OperationContext, RegistrarConfig
from .names import normalize_name, validate_domain_name
from .ports import EventPublisher, OwnershipTokenService, PricingService, RegistryStore, Treasury

logger = logging.getLogger(__name__)

MIN_COMMIT_AGE_KEY = "registrar.min_commit_age"
MAX_COMMIT_AGE_KEY = "registrar.max_commit_age"
MIN_REGISTRATION_DURATION_KEY = "registrar.min_registration_duration"
TOKEN_ID_KEY = "registrar.token_id"


@dataclass
class Registrar:
    """
    Domain service orchestrating commitments, pricing, record creation and minting.

    Collaborators are injected as ports; the directory is the only one the
    registrar writes to.
    """

    store: RegistryStore
    directory: DomainDirectory
    pricing: PricingService
    tokens: OwnershipTokenService
    treasury: Treasury
    events: EventPublisher
    config: RegistrarConfig
    commitments: CommitStore = field(init=False)

    def __post_init__(self) -> None:
        self.commitments = CommitStore(self.store)

    # Tunables

    @property
    def admin(self) -> str:
        return self.config.admin

    @property
    def resolver(self) -> str:
        return self.config.resolver

    @property
    def min_commit_age(self) -> int:
        return self._read_int(MIN_COMMIT_AGE_KEY, self.config.min_commit_age)

    @property
    def max_commit_age(self) -> int:
        return self._read_int(MAX_COMMIT_AGE_KEY, self.config.max_commit_age)

    @property
    def min_registration_duration(self) -> int:
        return self._read_int(MIN_REGISTRATION_DURATION_KEY, self.config.min_registration_duration)

    @property
    def token_id(self) -> int:
        """Last allocated ownership token id (0 before the first mint)."""
        return self._read_int(TOKEN_ID_KEY, 0)

    def set_max_commit_age(self, ctx: OperationContext, max_commit_age: int) -> None:
        self.update_parameters(ctx, max_commit_age=max_commit_age)

    def set_min_commit_age(self, ctx: OperationContext, min_commit_age: int) -> None:
        self.update_parameters(ctx, min_commit_age=min_commit_age)

    def set_min_registration_duration(self, ctx: OperationContext, min_registration_duration: int) -> None:
        self.update_parameters(ctx, min_registration_duration=min_registration_duration)

    def update_parameters(
        self,
        ctx: OperationContext,
        *,
        min_commit_age: int | None = None,
        max_commit_age: int | None = None,
        min_registration_duration: int | None = None,
    ) -> None:
        """
        Admin only. Apply any subset of the tunables as one operation.

        Raises:
            PermissionDenied: If the caller is not the admin
            InvalidParameter: If a value is negative or the resulting
                commit window is empty
        """
        with self.store.atomic():
            self._require_admin(ctx)
            new_min = self.min_commit_age if min_commit_age is None else min_commit_age
            new_max = self.max_commit_age if max_commit_age is None else max_commit_age
            if new_min < 0 or new_max < 0:
                raise InvalidParameter("commit ages must not be negative")
            if new_min >= new_max:
                raise InvalidParameter("min_commit_age must be below max_commit_age")
            if min_registration_duration is not None and min_registration_duration < 0:
                raise InvalidParameter("min_registration_duration must not be negative")

            if min_commit_age is not None:
                self.store.write_parameter(MIN_COMMIT_AGE_KEY, str(min_commit_age))
            if max_commit_age is not None:
                self.store.write_parameter(MAX_COMMIT_AGE_KEY, str(max_commit_age))
            if min_registration_duration is not None:
                self.store.write_parameter(MIN_REGISTRATION_DURATION_KEY, str(min_registration_duration))

        logger.info(
            "Registrar parameters: min_commit_age=%d max_commit_age=%d min_registration_duration=%d",
            self.min_commit_age,
            self.max_commit_age,
            self.min_registration_duration,
        )

    def purge_expired_commitments(self, ctx: OperationContext) -> int:
        """Admin only. Returns the number of commitments deleted."""
        self._require_admin(ctx)
        return self.commitments.purge_expired(ctx.now, self.max_commit_age)

    # Commit-reveal

    def make_commitment(
        self,
        domain_name: str,
        domain_owner: str,
        duration: int,
        secret: bytes,
        resolver: str,
    ) -> str:
        """
        Compute the commitment hash for a future registration.

        Pure function of its inputs and the current tunables; register()
        calls it again with the revealed parameters.

        Raises:
            DurationTooShort: If duration <= min_registration_duration
            InvalidDomainName: If the name lacks the configured suffix
        """
        if duration <= self.min_registration_duration:
            raise DurationTooShort(duration)
        domain_name = validate_domain_name(domain_name, self.config.tld_suffix)
        info = CommitInfo(
            domain_name=domain_name,
            domain_owner=domain_owner,
            duration=duration,
            secret=secret,
            resolver=resolver,
        )
        return hashing.commitment_hash(info)

    def commit(self, ctx: OperationContext, commit_hash: str) -> Commitment:
        """
        Publish a commitment hash.

        Raises:
            UnexpiredCommitmentExists: If the same hash is still inside its window
        """
        commit_hash = commit_hash.strip().lower()
        commitment = self.commitments.commit(commit_hash, ctx.now, self.max_commit_age)
        self.events.publish(CommitSubmitted(commit_hash=commit_hash, caller=ctx.caller))
        return commitment

    def consume_commitment(self, domain_name: str, duration: int, commit_hash: str, now: int) -> Commitment:
        """
        Validate a commitment for registering domain_name.

        Raises:
            CommitmentNotFound, CommitmentTooNew, CommitmentTooOld: Window checks
            DurationTooShort: If duration < min_registration_duration
            AlreadyRegistered: If the name is no longer available
        """
        commitment = self.commitments.consume(commit_hash, now, self.min_commit_age, self.max_commit_age)
        if duration < self.min_registration_duration:
            raise DurationTooShort(duration)
        if not self.directory.check_availability(domain_name):
            raise AlreadyRegistered(normalize_name(domain_name))
        return commitment

    def register(
        self,
        ctx: OperationContext,
        domain_name: str,
        domain_owner: str,
        duration: int,
        secret: bytes,
        resolver: str,
    ) -> DomainRecord:
        """
        Register domain_name for domain_owner, revealing a prior commitment.

        ctx.payment must equal the quoted fee exactly; the fee is credited
        to the admin account.

        Raises:
            PriceUnavailable: If the name cannot be priced
            IncorrectPayment: If ctx.payment differs from the fee
            DurationTooLong: If now + duration exceeds the storable range
            DurationTooShort, InvalidDomainName: From make_commitment
            CommitmentNotFound, CommitmentTooNew, CommitmentTooOld: From the commit store
            AlreadyRegistered: If the name is taken
        """
        domain_name = normalize_name(domain_name)

        with self.store.atomic():
            if ctx.now + duration > MAX_TIME:
                raise DurationTooLong(duration)
            fee = self.pricing.calculate_price(domain_name, duration)
            if fee is None:
                raise PriceUnavailable(domain_name)
            if ctx.payment != fee:
                raise IncorrectPayment(f"expected {fee}, got {ctx.payment}")

            commit_hash = self.make_commitment(domain_name, domain_owner, duration, secret, resolver)
            self.consume_commitment(domain_name, duration, commit_hash, ctx.now)

            expiry_time = ctx.now + duration
            digest = hashing.integrity_digest(domain_name, domain_owner, expiry_time)
            created = self.directory.set_record(
                digest, domain_name, domain_owner, duration, secret, resolver, expiry_time
            )
            if not created:
                raise AlreadyRegistered(domain_name)

            self.treasury.credit(self.admin, fee)
            grace_period = self.directory.grace_period

        logger.info("Registered %s to %s until %d", domain_name, domain_owner, expiry_time)
        self.events.publish(
            DomainRegistered(
                domain_name=domain_name,
                domain_owner=domain_owner,
                registration_fee=fee,
                duration=duration,
                domain_creation_time=ctx.now,
                domain_expiry_time=expiry_time,
                domain_grace_period=grace_period,
                resolver=resolver,
            )
        )
        return self.directory.read_record(domain_name)

    # Ownership token

    def mint_nft(self, ctx: OperationContext, domain_name: str, domain_owner: str, token_uri: str) -> int:
        """
        Mint the next ownership token for a registered domain.

        Minting is a separate step from register(); the token and the
        domain record are not kept in sync afterwards.

        Returns:
            The allocated token id

        Raises:
            DomainNotRegistered: If the domain has no record
            PermissionDenied: If the caller or domain_owner does not own the domain
            TokenExists: If a token for the domain is already outstanding
            TokenError: Propagated unchanged from the token service
        """
        domain_name = normalize_name(domain_name)
        with self.store.atomic():
            record_owner = self.directory.read_owner(domain_name)
            if ctx.caller != record_owner or domain_owner != record_owner:
                logger.warning("Refusing to mint %s for %s (caller %s)", domain_name, domain_owner, ctx.caller)
                raise PermissionDenied(f"{ctx.caller} may not mint {domain_name} for {domain_owner}")
            existing = self.tokens.token_of(domain_name)
            if existing is not None:
                raise TokenExists(existing)

            token_id = self.token_id + 1
            self.tokens.mint(token_id, domain_name, domain_owner, token_uri)
            self.store.write_parameter(TOKEN_ID_KEY, str(token_id))

        self.events.publish(
            TokenMinted(token_id=token_id, domain_name=domain_name, domain_owner=domain_owner, uri=token_uri)
        )
        return token_id

    # Pass-through calls

    def register_subdomain(self, ctx: OperationContext, parent_domain: str, subdomain: str) -> DomainRecord:
        return self.directory.register_subdomain(ctx, parent_domain, subdomain)

    def check_domain_availability(self, domain_name: str) -> bool:
        return self.directory.check_availability(domain_name)

    def read_domain_price(self, domain_name: str, duration: int) -> int | None:
        return self.pricing.calculate_price(normalize_name(domain_name), duration)

    # Helpers

    def _read_int(self, key: str, default: int) -> int:
        value = self.store.read_parameter(key)
        return default if value is None else int(value)

    def _require_admin(self, ctx: OperationContext) -> None:
        if ctx.caller != self.admin:
            logger.warning("Permission denied: %s is not the registrar admin", ctx.caller)
            raise PermissionDenied(f"{ctx.caller} is not the registrar admin")

