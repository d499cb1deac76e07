"""
API v1 domain lifecycle routes.

Renewal, unregistration, ownership changes, content records and
subdomain delegation for registered domains.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_directory, get_logical_time, get_operation_context
from src.api.errors import to_http_exception
from src.api.models import (
    ChangeOwnerRequest,
    ContentHashRequest,
    ContentResponse,
    ContentTextRequest,
    DomainRecordResponse,
    DomainStateResponse,
    ErrorResponse,
    RenewRequest,
    SubdomainManagerRequest,
    SubdomainManagerResponse,
    SubdomainRequest,
)
from src.domain.directory import DomainDirectory
from src.domain.exceptions import RegistrationError
from src.domain.models import OperationContext

router = APIRouter(prefix="/domains", tags=["v1"])

_forbidden = {"model": ErrorResponse, "description": "Caller lacks the required role"}
_not_found = {"model": ErrorResponse, "description": "Domain not registered"}


@router.get(
    "/{domain_name}",
    response_model=DomainRecordResponse,
    responses={404: _not_found},
    summary="Read a domain record",
)
async def read_record(
    domain_name: str,
    directory: DomainDirectory = Depends(get_directory),
) -> DomainRecordResponse:
    """Return a domain record without its secret."""
    try:
        record = directory.read_record(domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return DomainRecordResponse.from_record(record)


@router.get(
    "/{domain_name}/state",
    response_model=DomainStateResponse,
    summary="Lifecycle state of a name at the current time",
)
async def read_state(
    domain_name: str,
    now: int = Depends(get_logical_time),
    directory: DomainDirectory = Depends(get_directory),
) -> DomainStateResponse:
    """Return the lifecycle state of a name at the current time."""
    return DomainStateResponse(
        domain_name=domain_name.strip().lower(),
        state=directory.domain_state(domain_name, now),
    )


@router.post(
    "/{domain_name}/renew",
    response_model=DomainRecordResponse,
    responses={403: _forbidden, 404: _not_found, 422: {"model": ErrorResponse}},
    summary="Extend a domain from its current expiry",
)
async def renew_domain(
    domain_name: str,
    request_data: RenewRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> DomainRecordResponse:
    """
    Extend a domain from its current expiry.

    - **extra_duration**: Seconds added to the expiry

    Only the owner may renew, up to the end of the grace period.
    """
    try:
        record = directory.renew_domain(ctx, domain_name, request_data.extra_duration)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return DomainRecordResponse.from_record(record)


@router.delete(
    "/{domain_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: _forbidden, 404: _not_found, 409: {"model": ErrorResponse}},
    summary="Unregister a domain past its grace period",
)
async def unregister_domain(
    domain_name: str,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> None:
    """Manager only. Remove a domain once its grace period has passed."""
    try:
        directory.unregister_domain(ctx, domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None


@router.put(
    "/{domain_name}/owner",
    response_model=DomainRecordResponse,
    responses={403: _forbidden, 404: _not_found},
    summary="Hand a domain to a new owner",
)
async def change_owner(
    domain_name: str,
    request_data: ChangeOwnerRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> DomainRecordResponse:
    """
    Transfer a domain to a new owner.

    The content record is dropped unless keep_content is set. Any minted
    ownership token stays with its holder.
    """
    try:
        record = directory.change_domain_owner(
            ctx, domain_name, request_data.new_owner, request_data.keep_content
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return DomainRecordResponse.from_record(record)


# Content


@router.get(
    "/{domain_name}/content",
    response_model=ContentResponse,
    responses={404: _not_found},
    summary="Read a domain's content record",
)
async def read_content(
    domain_name: str,
    directory: DomainDirectory = Depends(get_directory),
) -> ContentResponse:
    """Return the content record of a domain."""
    try:
        content = directory.read_content(domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentResponse.from_content(content)


@router.put(
    "/{domain_name}/content",
    response_model=ContentResponse,
    responses={403: _forbidden, 404: _not_found, 422: {"model": ErrorResponse}},
    summary="Write one content entry",
    description="Without an index the first empty slot of the category is used.",
)
async def set_content_text(
    domain_name: str,
    request_data: ContentTextRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> ContentResponse:
    """Owner only. Write one content slot or the website field."""
    try:
        content = directory.set_content_text(
            ctx, domain_name, request_data.key, request_data.value, request_data.index
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentResponse.from_content(content)


@router.put(
    "/{domain_name}/content-hash",
    response_model=ContentResponse,
    responses={403: _forbidden, 404: _not_found},
    summary="Set the content hash",
)
async def set_content_hash(
    domain_name: str,
    request_data: ContentHashRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> ContentResponse:
    """Owner only."""
    try:
        content = directory.set_content_hash(ctx, domain_name, request_data.content_hash)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentResponse.from_content(content)


# Subdomains


@router.put(
    "/{domain_name}/subdomain",
    response_model=DomainRecordResponse,
    responses={403: _forbidden, 404: _not_found, 422: {"model": ErrorResponse}},
    summary="Attach a subdomain, replacing any previous one",
)
async def register_subdomain(
    domain_name: str,
    request_data: SubdomainRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> DomainRecordResponse:
    """Owner only. Delegate a single child name of the domain to its owner."""
    try:
        record = directory.register_subdomain(ctx, domain_name, request_data.subdomain)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return DomainRecordResponse.from_record(record)


@router.delete(
    "/{domain_name}/subdomain",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: _forbidden, 404: _not_found},
    summary="Detach the subdomain",
)
async def unregister_subdomain(
    domain_name: str,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> None:
    """Owner only. Drop the domain's delegated child and its content."""
    try:
        directory.unregister_subdomain(ctx, domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None


@router.put(
    "/{domain_name}/subdomain/manager",
    response_model=SubdomainManagerResponse,
    responses={403: _forbidden, 404: _not_found},
    summary="Delegate the subdomain to another account",
)
async def change_subdomain_manager(
    domain_name: str,
    request_data: SubdomainManagerRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> SubdomainManagerResponse:
    """Owner only. Hand the child name to another manager."""
    try:
        directory.change_subdomain_manager(ctx, domain_name, request_data.manager)
        subdomain = directory.read_record(domain_name).subdomain or ""
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return SubdomainManagerResponse(subdomain=subdomain, manager=request_data.manager)


@router.get(
    "/{subdomain}/subdomain-content",
    response_model=ContentResponse,
    responses={404: _not_found},
    summary="Read a subdomain's content record",
)
async def read_subdomain_content(
    subdomain: str,
    directory: DomainDirectory = Depends(get_directory),
) -> ContentResponse:
    """Return the content record of a delegated child name."""
    try:
        content = directory.read_subdomain_content(subdomain)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentResponse.from_content(content)


@router.put(
    "/{subdomain}/subdomain-content",
    response_model=ContentResponse,
    responses={403: _forbidden, 404: _not_found, 422: {"model": ErrorResponse}},
    summary="Write one subdomain content entry (subdomain manager only)",
)
async def set_subdomain_content_text(
    subdomain: str,
    request_data: ContentTextRequest,
    ctx: OperationContext = Depends(get_operation_context),
    directory: DomainDirectory = Depends(get_directory),
) -> ContentResponse:
    """Subdomain manager only."""
    try:
        content = directory.set_subdomain_content_text(
            ctx, subdomain, request_data.key, request_data.value, request_data.index
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentResponse.from_content(content)
