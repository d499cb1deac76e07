"""
Domain models - Records held by the registry and the per-operation context.

These are plain dataclasses; persistence adapters copy them in and out
so that callers never mutate stored state without going through a write.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

# Largest time or duration the stores can hold (signed 64-bit columns)
MAX_TIME = 2**63 - 1


class ContentCategory(str, Enum):
    """
    Content record categories.

    Slotted categories hold a fixed number of ordered entries;
    WEBSITE holds a single value.
    """

    SOCIAL = "social"
    GENERAL = "general"
    ADDRESS = "address"
    OTHER = "other"
    WEBSITE = "website"

    @property
    def is_slotted(self) -> bool:
        return self is not ContentCategory.WEBSITE


SLOTTED_CATEGORIES = tuple(c for c in ContentCategory if c.is_slotted)


@dataclass(frozen=True)
class OperationContext:
    """
    Authenticated caller, logical time and attached value of one operation.

    Built fresh for every operation by the host (HTTP layer or test);
    never cached across operations.
    """

    caller: str
    now: int
    payment: int = 0

    def with_payment(self, payment: int) -> "OperationContext":
        return replace(self, payment=payment)


@dataclass(frozen=True)
class Commitment:
    """Commitment hash and the logical time of its first submission."""

    commit_hash: str
    submitted_at: int


@dataclass(frozen=True)
class CommitInfo:
    """Registration parameters bound by a commitment. Only ever hashed."""

    domain_name: str
    domain_owner: str
    duration: int
    secret: bytes
    resolver: str


@dataclass
class DomainRecord:
    """Authoritative entry for a registered domain."""

    domain_name: str
    domain_owner: str
    duration: int
    secret: bytes
    resolver: str
    expiry_time: int
    subdomain: str | None = None


@dataclass
class ContentRecord:
    """Free-form content attached to a domain or subdomain."""

    entries: dict[str, list[str]] = field(default_factory=dict)
    website: str = ""
    content_hash: str = ""

    @classmethod
    def empty(cls, slots: int) -> "ContentRecord":
        return cls(entries={c.value: [""] * slots for c in SLOTTED_CATEGORIES})

    def slots_for(self, category: ContentCategory) -> list[str]:
        return self.entries.setdefault(category.value, [])


@dataclass(frozen=True)
class RegistrarConfig:
    """Construction-time registrar settings; tunable values are defaults only."""

    admin: str
    resolver: str = ""
    tld_suffix: str = ".vne"
    min_commit_age: int = 60
    max_commit_age: int = 86_400
    min_registration_duration: int = 2_419_200


@dataclass(frozen=True)
class DirectoryConfig:
    """Construction-time directory settings; manager and grace period are defaults only."""

    admin: str
    manager: str
    tld_suffix: str = ".vne"
    grace_period: int = 7_776_000
    content_slots: int = 5
