"""
Domain layer - Pure business logic with zero framework imports.

This package contains the name registration protocol: the commit-reveal
Registrar, the DomainDirectory lifecycle state machine and its read-only
Directory proxy. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .commitments import CommitStore
from .directory import DomainDirectory
from .exceptions import (
    AlreadyRegistered,
    CommitmentNotFound,
    CommitmentTooNew,
    CommitmentTooOld,
    DomainNotExpired,
    DomainNotRegistered,
    DurationTooLong,
    DurationTooShort,
    IncorrectPayment,
    InvalidCaller,
    InvalidContentKey,
    InvalidDomainName,
    InvalidParameter,
    PermissionDenied,
    PriceUnavailable,
    RegistrationError,
    RenewTimeExpired,
    TokenError,
    UnexpiredCommitmentExists,
)
from .models import (
    Commitment,
    CommitInfo,
    ContentCategory,
    ContentRecord,
    DirectoryConfig,
    DomainRecord,
    OperationContext,
    RegistrarConfig,
)
from .ports import (
    ContentScope,
    DomainReader,
    DomainState,
    EventPublisher,
    OwnershipTokenService,
    PricingService,
    RegistryStore,
    Treasury,
)
from .proxy import Directory
from .registrar import Registrar

__all__ = [
    "AlreadyRegistered",
    "CommitInfo",
    "CommitStore",
    "Commitment",
    "CommitmentNotFound",
    "CommitmentTooNew",
    "CommitmentTooOld",
    "ContentCategory",
    "ContentRecord",
    "ContentScope",
    "Directory",
    "DirectoryConfig",
    "DomainDirectory",
    "DomainNotExpired",
    "DomainNotRegistered",
    "DomainReader",
    "DomainRecord",
    "DomainState",
    "DurationTooLong",
    "DurationTooShort",
    "EventPublisher",
    "IncorrectPayment",
    "InvalidCaller",
    "InvalidContentKey",
    "InvalidDomainName",
    "InvalidParameter",
    "OperationContext",
    "OwnershipTokenService",
    "PermissionDenied",
    "PriceUnavailable",
    "PricingService",
    "Registrar",
    "RegistrarConfig",
    "RegistrationError",
    "RegistryStore",
    "RenewTimeExpired",
    "TokenError",
    "Treasury",
    "UnexpiredCommitmentExists",
]
