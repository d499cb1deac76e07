"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Secrets travel as 64 hex characters (32 bytes); amounts and times are integers.
"""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from src.domain.models import MAX_TIME, ContentCategory, ContentRecord, DomainRecord
from src.domain.ports import DomainState

Account = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1, max_length=128)]
DomainName = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1, max_length=253)]
Hex32 = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=r"^[0-9a-fA-F]{64}$")]


class RegistrationParameters(BaseModel):
    """Parameters bound by a commitment and revealed at registration."""

    domain_name: DomainName
    domain_owner: Account
    duration: int = Field(..., gt=0, le=MAX_TIME, description="Registration length in seconds")
    secret: Hex32 = Field(..., description="32-byte secret as hex")
    resolver: Account


class CommitmentHashResponse(BaseModel):
    commit_hash: str


class CommitRequest(BaseModel):
    commit_hash: Hex32


class CommitResponse(BaseModel):
    commit_hash: str
    submitted_at: int


class RegisterRequest(RegistrationParameters):
    """Request model for domain registration."""

    payment: int = Field(..., ge=0, description="Attached value; must equal the quoted price")


class DomainRecordResponse(BaseModel):
    """Public view of a domain record. The secret is never returned."""

    domain_name: str
    domain_owner: str
    duration: int
    resolver: str
    expiry_time: int
    subdomain: str | None = None

    @classmethod
    def from_record(cls, record: DomainRecord) -> "DomainRecordResponse":
        return cls(
            domain_name=record.domain_name,
            domain_owner=record.domain_owner,
            duration=record.duration,
            resolver=record.resolver,
            expiry_time=record.expiry_time,
            subdomain=record.subdomain,
        )


class AvailabilityResponse(BaseModel):
    domain_name: str
    available: bool


class PriceResponse(BaseModel):
    domain_name: str
    duration: int
    price: int | None


class DomainStateResponse(BaseModel):
    domain_name: str
    state: DomainState


class RenewRequest(BaseModel):
    extra_duration: int = Field(..., gt=0, le=MAX_TIME, description="Seconds added to the current expiry")


class ChangeOwnerRequest(BaseModel):
    new_owner: Account
    keep_content: bool = False


class ContentTextRequest(BaseModel):
    key: ContentCategory
    value: str = Field(..., max_length=1024)
    index: int | None = Field(default=None, ge=0)


class ContentHashRequest(BaseModel):
    content_hash: str = Field(..., max_length=256)


class ContentResponse(BaseModel):
    entries: dict[str, list[str]]
    website: str
    content_hash: str

    @classmethod
    def from_content(cls, content: ContentRecord) -> "ContentResponse":
        return cls(entries=content.entries, website=content.website, content_hash=content.content_hash)


class SubdomainRequest(BaseModel):
    subdomain: DomainName


class SubdomainManagerRequest(BaseModel):
    manager: Account


class SubdomainManagerResponse(BaseModel):
    subdomain: str
    manager: str


class MintRequest(BaseModel):
    domain_owner: Account
    token_uri: str = Field(..., max_length=2048)


class MintResponse(BaseModel):
    token_id: int
    domain_name: str
    domain_owner: str


class RegistrarParametersRequest(BaseModel):
    """Any subset of the registrar tunables, applied together."""

    min_commit_age: int | None = Field(default=None, ge=0, le=MAX_TIME)
    max_commit_age: int | None = Field(default=None, ge=0, le=MAX_TIME)
    min_registration_duration: int | None = Field(default=None, ge=0, le=MAX_TIME)


class RegistrarParametersResponse(BaseModel):
    min_commit_age: int
    max_commit_age: int
    min_registration_duration: int
    grace_period: int
    manager: str


class GracePeriodRequest(BaseModel):
    grace_period: int = Field(..., ge=0, le=MAX_TIME)


class ManagerRequest(BaseModel):
    manager: Account


class PricingRequest(BaseModel):
    price_per_letter: int | None = Field(default=None, ge=0)
    price_per_year: int | None = Field(default=None, ge=0)


class PremiumNameRequest(BaseModel):
    domain_name: DomainName


class PurgeResponse(BaseModel):
    purged: int


class OwnerResponse(BaseModel):
    domain_name: str
    domain_owner: str


class ExpiryResponse(BaseModel):
    domain_name: str
    expiry_time: int


class ContentHashResponse(BaseModel):
    domain_name: str
    content_hash: str


class ErrorResponse(BaseModel):
    """Standard error response model; detail is the error kind."""

    detail: str
