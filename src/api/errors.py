"""
Domain error to HTTP status mapping.

Every domain error surfaces with its class name as the detail, so
clients can branch on the exact failure kind.
"""

from fastapi import HTTPException, status

from src.domain.exceptions import (
    AlreadyRegistered,
    CommitmentNotFound,
    DomainNotExpired,
    DomainNotRegistered,
    IncorrectPayment,
    NotAllowed,
    NotApproved,
    NotOwner,
    PermissionDenied,
    RegistrationError,
    TokenExists,
    TokenNotFound,
    UnexpiredCommitmentExists,
)

_STATUS_BY_ERROR: list[tuple[type[RegistrationError], int]] = [
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (NotOwner, status.HTTP_403_FORBIDDEN),
    (NotApproved, status.HTTP_403_FORBIDDEN),
    (NotAllowed, status.HTTP_403_FORBIDDEN),
    (DomainNotRegistered, status.HTTP_404_NOT_FOUND),
    (CommitmentNotFound, status.HTTP_404_NOT_FOUND),
    (TokenNotFound, status.HTTP_404_NOT_FOUND),
    (AlreadyRegistered, status.HTTP_409_CONFLICT),
    (UnexpiredCommitmentExists, status.HTTP_409_CONFLICT),
    (DomainNotExpired, status.HTTP_409_CONFLICT),
    (TokenExists, status.HTTP_409_CONFLICT),
    (IncorrectPayment, status.HTTP_402_PAYMENT_REQUIRED),
]


def status_for(exc: RegistrationError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def to_http_exception(exc: RegistrationError) -> HTTPException:
    return HTTPException(status_code=status_for(exc), detail=type(exc).__name__)
