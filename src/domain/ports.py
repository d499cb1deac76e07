"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure and external collaborators. Adapters implement
these protocols structurally.
"""

from contextlib import AbstractContextManager
from enum import Enum
from typing import Protocol

from .events import DomainEvent
from .models import Commitment, ContentRecord, DomainRecord


class DomainState(str, Enum):
    """
    Domain lifecycle states.

    State Transitions:
    - AVAILABLE -> REGISTERED (successful registration)
    - REGISTERED -> EXPIRED_GRACE (now reaches expiry_time)
    - EXPIRED_GRACE -> REGISTERED (renewal pushes expiry_time past now)
    - EXPIRED_GRACE -> UNREGISTERABLE (now passes expiry_time + grace_period)
    - UNREGISTERABLE -> AVAILABLE (manager unregisters the domain)

    Renewal is accepted in REGISTERED and EXPIRED_GRACE only.
    Unregistration is accepted in UNREGISTERABLE only.
    """

    AVAILABLE = "AVAILABLE"
    REGISTERED = "REGISTERED"
    EXPIRED_GRACE = "EXPIRED_GRACE"
    UNREGISTERABLE = "UNREGISTERABLE"


class ContentScope(str, Enum):
    """Which table a content record belongs to."""

    DOMAIN = "domain"
    SUBDOMAIN = "subdomain"


class RegistryStore(Protocol):
    """Port interface for registry persistence (commitments, domains, content)."""

    def atomic(self) -> AbstractContextManager[None]:
        """
        Bracket one operation.

        All writes made inside the block are committed together when it
        exits normally and discarded when it exits with an exception.
        Nested blocks join the outermost one. Operations are serialized:
        no other operation observes an in-progress block.
        """
        ...

    def get_commitment(self, commit_hash: str) -> Commitment | None: ...

    def put_commitment(self, commitment: Commitment) -> None:
        """Insert or overwrite the commitment stored under its hash."""
        ...

    def delete_commitments_before(self, cutoff: int) -> int:
        """Delete commitments submitted strictly before cutoff, returning the count."""
        ...

    def get_domain(self, domain_name: str) -> DomainRecord | None: ...

    def insert_domain(self, record: DomainRecord) -> bool:
        """
        Insert a new domain record.

        Returns:
            True if inserted, False if a record for the name already exists
        """
        ...

    def update_domain(self, record: DomainRecord) -> None: ...

    def delete_domain(self, domain_name: str) -> None: ...

    def get_content(self, scope: ContentScope, name: str) -> ContentRecord | None: ...

    def put_content(self, scope: ContentScope, name: str, content: ContentRecord) -> None: ...

    def delete_content(self, scope: ContentScope, name: str) -> None: ...

    def get_subdomain_manager(self, subdomain: str) -> str | None: ...

    def set_subdomain_manager(self, subdomain: str, manager: str) -> None: ...

    def delete_subdomain_manager(self, subdomain: str) -> None: ...

    def read_parameter(self, key: str) -> str | None: ...

    def write_parameter(self, key: str, value: str) -> None: ...


class PricingService(Protocol):
    """Port interface for the external price lookup."""

    def calculate_price(self, name: str, duration: int) -> int | None:
        """
        Quote the fee for registering name for duration seconds.

        Returns:
            Fee, or None when the name cannot be priced
        """
        ...


class OwnershipTokenService(Protocol):
    """Port interface for the external ownership-token ledger."""

    def mint(self, token_id: int, domain_name: str, owner: str, uri: str) -> None:
        """
        Mint token_id for domain_name to owner.

        Raises:
            TokenError: If the ledger rejects the mint
            DomainNotRegistered: If the ledger finds the name unregistered
        """
        ...

    def token_of(self, domain_name: str) -> int | None:
        """Return the outstanding token id minted for domain_name, if any."""
        ...


class Treasury(Protocol):
    """Port interface for fee settlement."""

    def credit(self, account: str, amount: int) -> None: ...


class EventPublisher(Protocol):
    """Port interface for domain event delivery."""

    def publish(self, event: DomainEvent) -> None: ...


class DomainReader(Protocol):
    """Read surface consumed by the directory proxy."""

    def read_owner(self, domain_name: str) -> str: ...

    def read_expiry(self, domain_name: str) -> int: ...

    def read_content_hash(self, domain_name: str) -> str: ...
