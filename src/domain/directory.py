"""
Domain directory - authoritative domain records and their lifecycle.

Domain Lifecycle
================

States (see DomainState):
- AVAILABLE: no record for the name
- REGISTERED: record exists and now < expiry_time
- EXPIRED_GRACE: expiry_time <= now <= expiry_time + grace_period
- UNREGISTERABLE: now > expiry_time + grace_period

Rules:
- set_record moves AVAILABLE -> REGISTERED, only with a matching integrity digest
- renew_domain is accepted while now <= expiry_time + grace_period, owner only
- unregister_domain is accepted once now > expiry_time + grace_period, manager only
- content and ownership changes are owner only; subdomain content is
  subdomain-manager only, even for the parent owner

Every mutating operation runs inside one store.atomic() block and emits
its event after the block commits.
"""

import logging
from dataclasses import dataclass

from . import hashing
from .events import (
    ContentUpdated,
    DomainOwnerChanged,
    DomainRenewed,
    DomainUnregistered,
    GracePeriodChanged,
    SubdomainContentUpdated,
    SubdomainRegistered,
)
from .exceptions import (
    DomainNotExpired,
    DomainNotRegistered,
    DurationTooLong,
    DurationTooShort,
    InvalidContentKey,
    InvalidParameter,
    PermissionDenied,
    RenewTimeExpired,
)
from .models import MAX_TIME, ContentCategory, ContentRecord, DirectoryConfig, DomainRecord, OperationContext
from .names import normalize_name, validate_subdomain_name
from .ports import ContentScope, DomainState, EventPublisher, RegistryStore

logger = logging.getLogger(__name__)

GRACE_PERIOD_KEY = "directory.grace_period"
MANAGER_KEY = "directory.manager"


def parse_content_key(key: str | ContentCategory) -> ContentCategory:
    """
    Map a caller-supplied key onto a content category.

    Raises:
        InvalidContentKey: If the key names no category
    """
    if isinstance(key, ContentCategory):
        return key
    try:
        return ContentCategory(normalize_name(key))
    except ValueError:
        raise InvalidContentKey(key) from None


@dataclass
class DomainDirectory:
    """
    Domain service owning domain records, content records and subdomain delegation.

    The registrar writes new records through set_record; everything else is
    driven directly by owners, managers and the admin.
    """

    store: RegistryStore
    events: EventPublisher
    config: DirectoryConfig

    # Tunables

    @property
    def grace_period(self) -> int:
        value = self.store.read_parameter(GRACE_PERIOD_KEY)
        return self.config.grace_period if value is None else int(value)

    @property
    def manager(self) -> str:
        value = self.store.read_parameter(MANAGER_KEY)
        return self.config.manager if value is None else value

    @property
    def admin(self) -> str:
        return self.config.admin

    def set_grace_period(self, ctx: OperationContext, grace_period: int) -> None:
        """Admin only. Applies to every domain, including ones already registered."""
        with self.store.atomic():
            self._require_admin(ctx)
            if grace_period < 0:
                raise InvalidParameter("grace_period must not be negative")
            self.store.write_parameter(GRACE_PERIOD_KEY, str(grace_period))
        self.events.publish(GracePeriodChanged(grace_period=grace_period))

    def change_manager(self, ctx: OperationContext, manager: str) -> None:
        """Admin only."""
        with self.store.atomic():
            self._require_admin(ctx)
            self.store.write_parameter(MANAGER_KEY, manager)
        logger.info("Directory manager changed to %s", manager)

    # Registration

    def set_record(
        self,
        integrity_digest: str,
        domain_name: str,
        domain_owner: str,
        duration: int,
        secret: bytes,
        resolver: str,
        expiry_time: int,
    ) -> bool:
        """
        Create the record for a newly registered domain.

        The digest is recomputed from (name, owner, expiry_time) and must
        match the one supplied by the registrar.

        Returns:
            True if the record was created, False if the name is taken or
            the digest does not match
        """
        domain_name = normalize_name(domain_name)
        if integrity_digest != hashing.integrity_digest(domain_name, domain_owner, expiry_time):
            logger.warning("Integrity digest mismatch for %s", domain_name)
            return False

        record = DomainRecord(
            domain_name=domain_name,
            domain_owner=domain_owner,
            duration=duration,
            secret=secret,
            resolver=resolver,
            expiry_time=expiry_time,
        )
        with self.store.atomic():
            return self.store.insert_domain(record)

    def check_availability(self, domain_name: str) -> bool:
        return self.store.get_domain(normalize_name(domain_name)) is None

    def domain_state(self, domain_name: str, now: int) -> DomainState:
        record = self.store.get_domain(normalize_name(domain_name))
        if record is None:
            return DomainState.AVAILABLE
        if now < record.expiry_time:
            return DomainState.REGISTERED
        if now <= record.expiry_time + self.grace_period:
            return DomainState.EXPIRED_GRACE
        return DomainState.UNREGISTERABLE

    # Lifecycle

    def renew_domain(self, ctx: OperationContext, domain_name: str, extra_duration: int) -> DomainRecord:
        """
        Extend a domain by extra_duration seconds from its current expiry.

        Raises:
            DurationTooShort: If extra_duration is not positive
            DomainNotRegistered: If the domain has no record
            PermissionDenied: If the caller is not the owner
            RenewTimeExpired: If now > expiry_time + grace_period
            DurationTooLong: If the new expiry exceeds the storable range
        """
        if extra_duration <= 0:
            raise DurationTooShort(extra_duration)

        with self.store.atomic():
            record = self._require_record(domain_name)
            self._require_owner(ctx, record)
            if ctx.now > record.expiry_time + self.grace_period:
                raise RenewTimeExpired(record.domain_name)
            if record.expiry_time + extra_duration > MAX_TIME or record.duration + extra_duration > MAX_TIME:
                raise DurationTooLong(extra_duration)

            record.duration += extra_duration
            record.expiry_time += extra_duration
            self.store.update_domain(record)

        self.events.publish(
            DomainRenewed(
                domain_name=record.domain_name,
                domain_expiry_time=record.expiry_time,
                domain_duration=record.duration,
            )
        )
        return record

    def unregister_domain(self, ctx: OperationContext, domain_name: str) -> None:
        """
        Delete an expired domain and everything attached to it.

        Raises:
            PermissionDenied: If the caller is not the manager
            DomainNotRegistered: If the domain has no record
            DomainNotExpired: If now <= expiry_time + grace_period
        """
        with self.store.atomic():
            if ctx.caller != self.manager:
                self._deny(ctx, "unregister", domain_name)
            record = self._require_record(domain_name)
            if ctx.now <= record.expiry_time + self.grace_period:
                raise DomainNotExpired(record.domain_name)

            self.store.delete_domain(record.domain_name)
            self.store.delete_content(ContentScope.DOMAIN, record.domain_name)
            if record.subdomain:
                self._drop_subdomain(record.subdomain)

        logger.info("Unregistered %s", record.domain_name)
        self.events.publish(DomainUnregistered(domain_name=record.domain_name))

    def change_domain_owner(
        self, ctx: OperationContext, domain_name: str, new_owner: str, keep_content: bool
    ) -> DomainRecord:
        """
        Hand a domain to new_owner.

        The ownership token, if one was minted, is not moved here.
        Content is deleted unless keep_content is set.
        """
        with self.store.atomic():
            record = self._require_record(domain_name)
            self._require_owner(ctx, record)
            record.domain_owner = new_owner
            self.store.update_domain(record)
            if not keep_content:
                self.store.delete_content(ContentScope.DOMAIN, record.domain_name)

        self.events.publish(
            DomainOwnerChanged(
                domain_name=record.domain_name,
                domain_owner=new_owner,
                content_kept=keep_content,
            )
        )
        return record

    # Content

    def set_content_text(
        self,
        ctx: OperationContext,
        domain_name: str,
        key: str | ContentCategory,
        value: str,
        index: int | None = None,
    ) -> ContentRecord:
        """Owner only. Writes one slot (or the website field) of the domain's content."""
        with self.store.atomic():
            record = self._require_record(domain_name)
            self._require_owner(ctx, record)
            category = parse_content_key(key)
            content = self._load_content(ContentScope.DOMAIN, record.domain_name)
            self._write_slot(content, category, value, index)
            self.store.put_content(ContentScope.DOMAIN, record.domain_name, content)

        self.events.publish(ContentUpdated(domain_name=record.domain_name, category=category.value))
        return content

    def set_content_hash(self, ctx: OperationContext, domain_name: str, content_hash: str) -> ContentRecord:
        """Owner only."""
        with self.store.atomic():
            record = self._require_record(domain_name)
            self._require_owner(ctx, record)
            content = self._load_content(ContentScope.DOMAIN, record.domain_name)
            content.content_hash = content_hash
            self.store.put_content(ContentScope.DOMAIN, record.domain_name, content)

        self.events.publish(ContentUpdated(domain_name=record.domain_name, category="content_hash"))
        return content

    # Subdomains

    def register_subdomain(self, ctx: OperationContext, parent_domain: str, subdomain: str) -> DomainRecord:
        """
        Attach subdomain to parent_domain and delegate it to the parent's owner.

        A parent holds at most one subdomain; registering another replaces it
        and drops the previous child's delegation and content.
        """
        with self.store.atomic():
            record = self._require_record(parent_domain)
            self._require_owner(ctx, record)
            child = validate_subdomain_name(subdomain, record.domain_name)

            if record.subdomain and record.subdomain != child:
                self._drop_subdomain(record.subdomain)
            record.subdomain = child
            self.store.update_domain(record)
            self.store.set_subdomain_manager(child, record.domain_owner)

        self.events.publish(
            SubdomainRegistered(
                parent_domain=record.domain_name,
                subdomain=child,
                manager=record.domain_owner,
            )
        )
        return record

    def unregister_subdomain(self, ctx: OperationContext, parent_domain: str) -> None:
        """Parent owner only. Clears the child together with its delegation and content."""
        with self.store.atomic():
            record = self._require_record(parent_domain)
            self._require_owner(ctx, record)
            if not record.subdomain:
                raise DomainNotRegistered(f"{record.domain_name} has no subdomain")

            self._drop_subdomain(record.subdomain)
            record.subdomain = None
            self.store.update_domain(record)

    def change_subdomain_manager(self, ctx: OperationContext, parent_domain: str, manager: str) -> None:
        """Parent owner only."""
        with self.store.atomic():
            record = self._require_record(parent_domain)
            self._require_owner(ctx, record)
            if not record.subdomain:
                raise DomainNotRegistered(f"{record.domain_name} has no subdomain")
            self.store.set_subdomain_manager(record.subdomain, manager)

        logger.info("Subdomain %s delegated to %s", record.subdomain, manager)

    def set_subdomain_content_text(
        self,
        ctx: OperationContext,
        subdomain: str,
        key: str | ContentCategory,
        value: str,
        index: int | None = None,
    ) -> ContentRecord:
        """
        Write subdomain content.

        Raises:
            DomainNotRegistered: If the subdomain has no delegated manager
            PermissionDenied: If the caller is not that manager
            InvalidContentKey: If key or index is invalid
        """
        subdomain = normalize_name(subdomain)
        with self.store.atomic():
            manager = self.store.get_subdomain_manager(subdomain)
            if manager is None:
                raise DomainNotRegistered(subdomain)
            if ctx.caller != manager:
                self._deny(ctx, "manage", subdomain)

            category = parse_content_key(key)
            content = self._load_content(ContentScope.SUBDOMAIN, subdomain)
            self._write_slot(content, category, value, index)
            self.store.put_content(ContentScope.SUBDOMAIN, subdomain, content)

        self.events.publish(SubdomainContentUpdated(subdomain=subdomain, category=category.value))
        return content

    # Reads

    def read_record(self, domain_name: str) -> DomainRecord:
        return self._require_record(domain_name)

    def read_owner(self, domain_name: str) -> str:
        return self._require_record(domain_name).domain_owner

    def read_expiry(self, domain_name: str) -> int:
        return self._require_record(domain_name).expiry_time

    def read_content(self, domain_name: str) -> ContentRecord:
        record = self._require_record(domain_name)
        return self._load_content(ContentScope.DOMAIN, record.domain_name)

    def read_content_hash(self, domain_name: str) -> str:
        return self.read_content(domain_name).content_hash

    def read_subdomain_manager(self, subdomain: str) -> str:
        subdomain = normalize_name(subdomain)
        manager = self.store.get_subdomain_manager(subdomain)
        if manager is None:
            raise DomainNotRegistered(subdomain)
        return manager

    def read_subdomain_content(self, subdomain: str) -> ContentRecord:
        subdomain = normalize_name(subdomain)
        self.read_subdomain_manager(subdomain)
        return self._load_content(ContentScope.SUBDOMAIN, subdomain)

    # Helpers

    def _require_record(self, domain_name: str) -> DomainRecord:
        domain_name = normalize_name(domain_name)
        record = self.store.get_domain(domain_name)
        if record is None:
            raise DomainNotRegistered(domain_name)
        return record

    def _require_owner(self, ctx: OperationContext, record: DomainRecord) -> None:
        if ctx.caller != record.domain_owner:
            self._deny(ctx, "own", record.domain_name)

    def _require_admin(self, ctx: OperationContext) -> None:
        if ctx.caller != self.admin:
            self._deny(ctx, "administer", "the directory")

    def _deny(self, ctx: OperationContext, role: str, target: str) -> None:
        logger.warning("Permission denied: %s does not %s %s", ctx.caller, role, target)
        raise PermissionDenied(f"{ctx.caller} does not {role} {target}")

    def _load_content(self, scope: ContentScope, name: str) -> ContentRecord:
        content = self.store.get_content(scope, name)
        return ContentRecord.empty(self.config.content_slots) if content is None else content

    def _write_slot(
        self, content: ContentRecord, category: ContentCategory, value: str, index: int | None
    ) -> None:
        if not category.is_slotted:
            content.website = value
            return

        slots = content.slots_for(category)
        slots.extend([""] * (self.config.content_slots - len(slots)))
        if index is None:
            try:
                index = slots.index("", 0, self.config.content_slots)
            except ValueError:
                raise InvalidContentKey(f"no free {category.value} slot") from None
        if not 0 <= index < self.config.content_slots:
            raise InvalidContentKey(f"{category.value}[{index}]")
        slots[index] = value

    def _drop_subdomain(self, subdomain: str) -> None:
        self.store.delete_subdomain_manager(subdomain)
        self.store.delete_content(ContentScope.SUBDOMAIN, subdomain)
