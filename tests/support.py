"""
Shared constants and helpers for the test suites.

Accounts are fixed hex identifiers; times are logical seconds.
"""

from src.domain.models import DomainRecord, OperationContext
from src.domain.registrar import Registrar

ADMIN = "0x" + "11" * 20
MANAGER = "0x" + "22" * 20
RESOLVER = "0x" + "33" * 20
ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
MALLORY = "0x" + "ee" * 20

SECRET = bytes(range(32))
T0 = 1_700_000_000
DAY = 86_400
YEAR = 365 * DAY


def ctx(caller: str, now: int = T0, payment: int = 0) -> OperationContext:
    """Build a context for one operation."""
    return OperationContext(caller=caller, now=now, payment=payment)


def commit_and_register(
    registrar: Registrar,
    domain_name: str = "alice.vne",
    owner: str = ALICE,
    duration: int = YEAR,
    secret: bytes = SECRET,
    committed_at: int = T0,
) -> DomainRecord:
    """Run the full commit-reveal flow, registering at committed_at + min_commit_age."""
    commit_hash = registrar.make_commitment(domain_name, owner, duration, secret, RESOLVER)
    registrar.commit(ctx(owner, now=committed_at), commit_hash)
    now = committed_at + registrar.min_commit_age
    price = registrar.read_domain_price(domain_name, duration)
    return registrar.register(ctx(owner, now=now, payment=price), domain_name, owner, duration, secret, RESOLVER)
