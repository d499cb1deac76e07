"""
Domain events - Observability records emitted after an operation commits.

Events are published only once the operation's writes are durable, so a
subscriber never sees an event for a rolled-back operation.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class DomainEvent:
    """Base class for published events."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CommitSubmitted(DomainEvent):
    commit_hash: str
    caller: str


@dataclass(frozen=True)
class DomainRegistered(DomainEvent):
    domain_name: str
    domain_owner: str
    registration_fee: int
    duration: int
    domain_creation_time: int
    domain_expiry_time: int
    domain_grace_period: int
    resolver: str


@dataclass(frozen=True)
class DomainRenewed(DomainEvent):
    domain_name: str
    domain_expiry_time: int
    domain_duration: int


@dataclass(frozen=True)
class DomainOwnerChanged(DomainEvent):
    domain_name: str
    domain_owner: str
    content_kept: bool


@dataclass(frozen=True)
class DomainUnregistered(DomainEvent):
    domain_name: str


@dataclass(frozen=True)
class ContentUpdated(DomainEvent):
    domain_name: str
    category: str


@dataclass(frozen=True)
class SubdomainRegistered(DomainEvent):
    parent_domain: str
    subdomain: str
    manager: str


@dataclass(frozen=True)
class SubdomainContentUpdated(DomainEvent):
    subdomain: str
    category: str


@dataclass(frozen=True)
class GracePeriodChanged(DomainEvent):
    grace_period: int


@dataclass(frozen=True)
class TokenMinted(DomainEvent):
    token_id: int
    domain_name: str
    domain_owner: str
    uri: str
