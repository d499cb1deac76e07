"""
FastAPI dependencies - Dependency injection factories.

This module wires the domain services to their adapters once per
application and provides Depends() factories for injecting them,
together with the per-request operation context, into routes.
"""

import time
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from src.adapters.events.console import ConsoleEventPublisher
from src.adapters.pricing.oracle import PriceOracle
from src.adapters.tokens.memory import InMemoryTokenLedger
from src.adapters.treasury.memory import InMemoryTreasury
from src.config.settings import Settings
from src.domain.directory import DomainDirectory
from src.domain.models import DirectoryConfig, OperationContext, RegistrarConfig
from src.domain.ports import RegistryStore
from src.domain.proxy import Directory
from src.domain.registrar import Registrar


@dataclass
class RegistryServices:
    """Everything the routes need, built once at startup and kept on app.state."""

    store: RegistryStore
    directory: DomainDirectory
    registrar: Registrar
    proxy: Directory
    pricing: PriceOracle
    tokens: InMemoryTokenLedger
    treasury: InMemoryTreasury
    events: ConsoleEventPublisher


def build_registry_services(store: RegistryStore, settings: Settings) -> RegistryServices:
    """
    Wire the registrar, directory and proxy over a store.

    The token ledger asks the directory whether a name is registered, so
    the directory is built first and handed to the ledger as a callback.
    """
    admin = settings.admin_account.strip().lower()
    events = ConsoleEventPublisher()

    directory = DomainDirectory(
        store=store,
        events=events,
        config=DirectoryConfig(
            admin=admin,
            manager=settings.manager_account.strip().lower(),
            tld_suffix=settings.tld_suffix,
            grace_period=settings.grace_period,
            content_slots=settings.content_slots,
        ),
    )
    pricing = PriceOracle(
        owner=admin,
        price_per_letter=settings.price_per_letter,
        price_per_year=settings.price_per_year,
        premium_names=[name.strip().lower() for name in settings.premium_names],
    )
    tokens = InMemoryTokenLedger(is_registered=lambda name: not directory.check_availability(name))
    treasury = InMemoryTreasury()

    registrar = Registrar(
        store=store,
        directory=directory,
        pricing=pricing,
        tokens=tokens,
        treasury=treasury,
        events=events,
        config=RegistrarConfig(
            admin=admin,
            resolver=settings.resolver_account.strip().lower(),
            tld_suffix=settings.tld_suffix,
            min_commit_age=settings.min_commit_age,
            max_commit_age=settings.max_commit_age,
            min_registration_duration=settings.min_registration_duration,
        ),
    )
    return RegistryServices(
        store=store,
        directory=directory,
        registrar=registrar,
        proxy=Directory(reader=directory),
        pricing=pricing,
        tokens=tokens,
        treasury=treasury,
        events=events,
    )


def get_services(request: Request) -> RegistryServices:
    """
    Get the wired services from app state.

    The services are created during app lifespan startup and stored in app.state.
    """
    return request.app.state.services


def get_registrar(services: RegistryServices = Depends(get_services)) -> Registrar:
    return services.registrar


def get_directory(services: RegistryServices = Depends(get_services)) -> DomainDirectory:
    return services.directory


def get_directory_proxy(services: RegistryServices = Depends(get_services)) -> Directory:
    return services.proxy


def get_price_oracle(services: RegistryServices = Depends(get_services)) -> PriceOracle:
    return services.pricing


# Caller identity header for OpenAPI documentation
account_header = APIKeyHeader(name="X-Account", auto_error=False)


def get_caller(account: str | None = Depends(account_header)) -> str:
    """
    Extract and normalize the calling account from the X-Account header.

    Returns:
        Account identifier, stripped and lowercased for consistency

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    if account is None or not account.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Account header",
        )
    return account.strip().lower()


def get_logical_time() -> int:
    """Current time in whole seconds. Overridden in tests to drive the clock."""
    return int(time.time())


def get_operation_context(
    caller: str = Depends(get_caller),
    now: int = Depends(get_logical_time),
) -> OperationContext:
    """Build a fresh context for one operation; payment is attached by the route."""
    return OperationContext(caller=caller, now=now)
