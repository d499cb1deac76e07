"""
API v1 registrar routes.

Defines REST endpoints for the commit-reveal registration flow, ownership
token minting and administrative tuning.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.pricing.oracle import PriceOracle
from src.api.dependencies import get_operation_context, get_price_oracle, get_registrar
from src.api.errors import to_http_exception
from src.api.models import (
    AvailabilityResponse,
    CommitmentHashResponse,
    CommitRequest,
    CommitResponse,
    DomainRecordResponse,
    ErrorResponse,
    GracePeriodRequest,
    ManagerRequest,
    MintRequest,
    MintResponse,
    PremiumNameRequest,
    PriceResponse,
    PricingRequest,
    PurgeResponse,
    RegisterRequest,
    RegistrarParametersRequest,
    RegistrarParametersResponse,
    RegistrationParameters,
)
from src.domain.exceptions import RegistrationError
from src.domain.models import OperationContext
from src.domain.registrar import Registrar

router = APIRouter(tags=["v1"])

_errors = {
    403: {"model": ErrorResponse, "description": "Caller lacks the required role"},
    404: {"model": ErrorResponse, "description": "Domain or commitment not found"},
    409: {"model": ErrorResponse, "description": "Conflicting state"},
    422: {"model": ErrorResponse, "description": "Rule violation or validation error"},
}


@router.post(
    "/commitments/compute",
    response_model=CommitmentHashResponse,
    responses={422: _errors[422]},
    summary="Compute a commitment hash",
    description="Deterministic hash of the registration parameters. "
    "Clients may compute it locally with the same canonical encoding instead.",
)
async def compute_commitment(
    request_data: RegistrationParameters,
    registrar: Registrar = Depends(get_registrar),
) -> CommitmentHashResponse:
    """
    Compute the commitment hash for a planned registration.

    Nothing is stored; submit the returned hash to POST /commitments.
    """
    try:
        commit_hash = registrar.make_commitment(
            request_data.domain_name,
            request_data.domain_owner,
            request_data.duration,
            bytes.fromhex(request_data.secret),
            request_data.resolver,
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return CommitmentHashResponse(commit_hash=commit_hash)


@router.post(
    "/commitments",
    response_model=CommitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: _errors[409]},
    summary="Submit a commitment",
)
async def submit_commitment(
    request_data: CommitRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> CommitResponse:
    """
    Publish a commitment hash.

    - **commit_hash**: 64 hex characters from POST /commitments/compute

    The caller must wait min_commit_age seconds before registering.
    """
    try:
        commitment = registrar.commit(ctx, request_data.commit_hash)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return CommitResponse(commit_hash=commitment.commit_hash, submitted_at=commitment.submitted_at)


@router.post(
    "/domains",
    response_model=DomainRecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        402: {"model": ErrorResponse, "description": "Payment differs from the price"},
        404: _errors[404],
        409: _errors[409],
        422: _errors[422],
    },
    summary="Register a domain",
    description="Reveal the parameters of an aged commitment and pay the exact price.",
)
async def register_domain(
    request_data: RegisterRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> DomainRecordResponse:
    """
    Register a domain by revealing a prior commitment.

    - **domain_name**: Name ending in the registry suffix
    - **domain_owner**: Account that will own the domain
    - **duration**: Registration length in seconds
    - **secret**: 32-byte hex secret used in the commitment
    - **resolver**: Resolver account
    - **payment**: Must equal the quoted price exactly

    Returns the new domain record on success.
    """
    try:
        record = registrar.register(
            ctx.with_payment(request_data.payment),
            request_data.domain_name,
            request_data.domain_owner,
            request_data.duration,
            bytes.fromhex(request_data.secret),
            request_data.resolver,
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return DomainRecordResponse.from_record(record)


@router.get(
    "/domains/{domain_name}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a name can be registered",
)
async def check_availability(
    domain_name: str,
    registrar: Registrar = Depends(get_registrar),
) -> AvailabilityResponse:
    """Report whether a name currently has no record."""
    return AvailabilityResponse(
        domain_name=domain_name.strip().lower(),
        available=registrar.check_domain_availability(domain_name),
    )


@router.get(
    "/domains/{domain_name}/price",
    response_model=PriceResponse,
    summary="Quote the registration price",
    description="price is null when the name cannot be priced for this duration.",
)
async def read_price(
    domain_name: str,
    duration: int,
    registrar: Registrar = Depends(get_registrar),
) -> PriceResponse:
    """Quote the registration fee for a name and duration."""
    return PriceResponse(
        domain_name=domain_name.strip().lower(),
        duration=duration,
        price=registrar.read_domain_price(domain_name, duration),
    )


@router.post(
    "/domains/{domain_name}/token",
    response_model=MintResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: _errors[403], 404: _errors[404], 409: _errors[409]},
    summary="Mint the ownership token for a domain",
)
async def mint_token(
    domain_name: str,
    request_data: MintRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> MintResponse:
    """Mint the ownership token for a domain the caller owns."""
    try:
        token_id = registrar.mint_nft(ctx, domain_name, request_data.domain_owner, request_data.token_uri)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return MintResponse(
        token_id=token_id,
        domain_name=domain_name.strip().lower(),
        domain_owner=request_data.domain_owner,
    )


# Administration


def _parameters(registrar: Registrar) -> RegistrarParametersResponse:
    return RegistrarParametersResponse(
        min_commit_age=registrar.min_commit_age,
        max_commit_age=registrar.max_commit_age,
        min_registration_duration=registrar.min_registration_duration,
        grace_period=registrar.directory.grace_period,
        manager=registrar.directory.manager,
    )


@router.get(
    "/admin/parameters",
    response_model=RegistrarParametersResponse,
    summary="Read the current tunables",
)
async def read_parameters(registrar: Registrar = Depends(get_registrar)) -> RegistrarParametersResponse:
    """Return the current registrar and directory tunables."""
    return _parameters(registrar)


@router.put(
    "/admin/parameters",
    response_model=RegistrarParametersResponse,
    responses={403: _errors[403], 422: _errors[422]},
    summary="Update commit ages and minimum registration duration",
)
async def update_parameters(
    request_data: RegistrarParametersRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> RegistrarParametersResponse:
    """Admin only. Apply any subset of the registrar tunables together."""
    try:
        registrar.update_parameters(
            ctx,
            min_commit_age=request_data.min_commit_age,
            max_commit_age=request_data.max_commit_age,
            min_registration_duration=request_data.min_registration_duration,
        )
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return _parameters(registrar)


@router.put(
    "/admin/grace-period",
    response_model=RegistrarParametersResponse,
    responses={403: _errors[403], 422: _errors[422]},
    summary="Set the grace period for every domain",
)
async def set_grace_period(
    request_data: GracePeriodRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> RegistrarParametersResponse:
    """Admin only."""
    try:
        registrar.directory.set_grace_period(ctx, request_data.grace_period)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return _parameters(registrar)


@router.put(
    "/admin/manager",
    response_model=RegistrarParametersResponse,
    responses={403: _errors[403]},
    summary="Change the account allowed to unregister expired domains",
)
async def change_manager(
    request_data: ManagerRequest,
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> RegistrarParametersResponse:
    """Admin only. Replace the account allowed to unregister expired domains."""
    try:
        registrar.directory.change_manager(ctx, request_data.manager)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return _parameters(registrar)


@router.post(
    "/admin/commitments/purge",
    response_model=PurgeResponse,
    responses={403: _errors[403]},
    summary="Delete expired commitments",
)
async def purge_commitments(
    ctx: OperationContext = Depends(get_operation_context),
    registrar: Registrar = Depends(get_registrar),
) -> PurgeResponse:
    """Admin only. Delete commitments past max_commit_age."""
    try:
        purged = registrar.purge_expired_commitments(ctx)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return PurgeResponse(purged=purged)


@router.put(
    "/admin/pricing",
    responses={403: _errors[403]},
    summary="Update the per-letter and per-year rates",
)
async def update_pricing(
    request_data: PricingRequest,
    ctx: OperationContext = Depends(get_operation_context),
    oracle: PriceOracle = Depends(get_price_oracle),
) -> dict[str, int]:
    """Price oracle owner only."""
    try:
        if request_data.price_per_letter is not None:
            oracle.set_price_per_letter(ctx.caller, request_data.price_per_letter)
        if request_data.price_per_year is not None:
            oracle.set_price_per_year(ctx.caller, request_data.price_per_year)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return {"price_per_letter": oracle.price_per_letter, "price_per_year": oracle.price_per_year}


@router.post(
    "/admin/premium-names",
    status_code=status.HTTP_201_CREATED,
    responses={403: _errors[403]},
    summary="Add a name to the premium list",
)
async def add_premium_name(
    request_data: PremiumNameRequest,
    ctx: OperationContext = Depends(get_operation_context),
    oracle: PriceOracle = Depends(get_price_oracle),
) -> dict[str, list[str]]:
    """Price oracle owner only."""
    try:
        oracle.add_premium_name(ctx.caller, request_data.domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return {"premium_names": oracle.premium_names}


@router.delete(
    "/admin/premium-names/{domain_name}",
    responses={403: _errors[403], 404: {"description": "Name not on the premium list"}},
    summary="Remove a name from the premium list",
)
async def remove_premium_name(
    domain_name: str,
    ctx: OperationContext = Depends(get_operation_context),
    oracle: PriceOracle = Depends(get_price_oracle),
) -> dict[str, list[str]]:
    """Price oracle owner only. Returns 404 if the name was not on the list."""
    try:
        removed = oracle.remove_premium_name(ctx.caller, domain_name.strip().lower())
    except RegistrationError as e:
        raise to_http_exception(e) from None
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not a premium name")
    return {"premium_names": oracle.premium_names}
