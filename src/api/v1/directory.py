"""
API v1 read proxy routes.

Role-free lookups forwarded through the Directory proxy.
"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_directory_proxy
from src.api.errors import to_http_exception
from src.api.models import ContentHashResponse, ErrorResponse, ExpiryResponse, OwnerResponse
from src.domain.exceptions import RegistrationError
from src.domain.proxy import Directory

router = APIRouter(prefix="/directory", tags=["v1"])

_not_found = {404: {"model": ErrorResponse, "description": "Domain not registered"}}


@router.get("/{domain_name}/owner", response_model=OwnerResponse, responses=_not_found)
async def read_owner(domain_name: str, proxy: Directory = Depends(get_directory_proxy)) -> OwnerResponse:
    """Forward an owner lookup to the directory."""
    try:
        owner = proxy.read_owner(domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return OwnerResponse(domain_name=domain_name.strip().lower(), domain_owner=owner)


@router.get("/{domain_name}/expiry", response_model=ExpiryResponse, responses=_not_found)
async def read_expiry(domain_name: str, proxy: Directory = Depends(get_directory_proxy)) -> ExpiryResponse:
    """Forward an expiry lookup to the directory."""
    try:
        expiry_time = proxy.read_expiry(domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ExpiryResponse(domain_name=domain_name.strip().lower(), expiry_time=expiry_time)


@router.get("/{domain_name}/content-hash", response_model=ContentHashResponse, responses=_not_found)
async def read_content_hash(
    domain_name: str, proxy: Directory = Depends(get_directory_proxy)
) -> ContentHashResponse:
    """Forward a content hash lookup to the directory."""
    try:
        content_hash = proxy.read_content_hash(domain_name)
    except RegistrationError as e:
        raise to_http_exception(e) from None
    return ContentHashResponse(domain_name=domain_name.strip().lower(), content_hash=content_hash)
