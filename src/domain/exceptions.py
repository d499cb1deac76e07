"""
Domain exceptions - Semantic error types for name registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Every failure aborts the whole operation; no partial writes survive.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


# Commit-reveal and registrar errors


class UnexpiredCommitmentExists(RegistrationError):
    """The same commitment hash was submitted and has not expired yet."""

    pass


class CommitmentNotFound(RegistrationError):
    """No commitment is stored for the recomputed hash."""

    pass


class CommitmentTooNew(RegistrationError):
    """Commitment is younger than min_commit_age."""

    pass


class CommitmentTooOld(RegistrationError):
    """Commitment is max_commit_age old or older."""

    pass


class DurationTooShort(RegistrationError):
    """Requested duration is below the minimum registration duration."""

    pass


class DurationTooLong(RegistrationError):
    """Requested duration pushes the expiry past the largest storable time."""

    pass


class AlreadyRegistered(RegistrationError):
    """Domain name already has a record."""

    pass


class DomainNotRegistered(RegistrationError):
    """Domain (or subdomain) has no record."""

    pass


class InvalidDomainName(RegistrationError):
    """Name does not satisfy the suffix/label policy."""

    pass


class IncorrectPayment(RegistrationError):
    """Attached payment differs from the quoted fee."""

    pass


class PriceUnavailable(RegistrationError):
    """Pricing service could not price the name."""

    pass


class InvalidParameter(RegistrationError):
    """Administrative value rejected."""

    pass


# Directory errors


class PermissionDenied(RegistrationError):
    """Caller does not hold the role the operation requires."""

    pass


InvalidCaller = PermissionDenied


class DomainNotExpired(RegistrationError):
    """Domain is still inside its registration or grace period."""

    pass


class RenewTimeExpired(RegistrationError):
    """Grace period is over; the domain can no longer be renewed."""

    pass


class InvalidContentKey(RegistrationError):
    """Unknown content category, or slot index out of range."""

    pass


# Ownership token errors


class TokenError(RegistrationError):
    """Base class for ownership token errors."""

    pass


class NotOwner(TokenError):
    pass


class NotApproved(TokenError):
    pass


class TokenExists(TokenError):
    pass


class TokenNotFound(TokenError):
    pass


class CannotInsert(TokenError):
    pass


class CannotFetchValue(TokenError):
    pass


class NotAllowed(TokenError):
    pass
