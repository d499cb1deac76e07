"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory registry store and wired services
- The service graph over that store
- A registered domain ready for lifecycle tests
"""

import pytest

from src.adapters.events.console import ConsoleEventPublisher
from src.adapters.pricing.oracle import PriceOracle
from src.adapters.repository.memory import InMemoryRegistryStore
from src.adapters.tokens.memory import InMemoryTokenLedger
from src.adapters.treasury.memory import InMemoryTreasury
from src.domain.directory import DomainDirectory
from src.domain.models import DirectoryConfig, DomainRecord, RegistrarConfig
from src.domain.registrar import Registrar
from tests.support import ADMIN, MANAGER, RESOLVER, commit_and_register


@pytest.fixture
def store() -> InMemoryRegistryStore:
    return InMemoryRegistryStore()


@pytest.fixture
def events() -> ConsoleEventPublisher:
    return ConsoleEventPublisher()


@pytest.fixture
def directory(store: InMemoryRegistryStore, events: ConsoleEventPublisher) -> DomainDirectory:
    return DomainDirectory(
        store=store,
        events=events,
        config=DirectoryConfig(admin=ADMIN, manager=MANAGER),
    )


@pytest.fixture
def oracle() -> PriceOracle:
    return PriceOracle(owner=ADMIN)


@pytest.fixture
def treasury() -> InMemoryTreasury:
    return InMemoryTreasury()


@pytest.fixture
def ledger(directory: DomainDirectory) -> InMemoryTokenLedger:
    return InMemoryTokenLedger(is_registered=lambda name: not directory.check_availability(name))


@pytest.fixture
def registrar(
    store: InMemoryRegistryStore,
    directory: DomainDirectory,
    oracle: PriceOracle,
    ledger: InMemoryTokenLedger,
    treasury: InMemoryTreasury,
    events: ConsoleEventPublisher,
) -> Registrar:
    return Registrar(
        store=store,
        directory=directory,
        pricing=oracle,
        tokens=ledger,
        treasury=treasury,
        events=events,
        config=RegistrarConfig(admin=ADMIN, resolver=RESOLVER),
    )


@pytest.fixture
def alice_domain(registrar: Registrar) -> DomainRecord:
    """alice.vne registered to ALICE for one year."""
    return commit_and_register(registrar)
