"""
In-memory ownership token ledger - Implements OwnershipTokenService protocol.

A non-fungible token per domain, identified by an integer id, with
single-token approvals and operator (approve-for-all) approvals.

The ledger asks the registry whether a domain is registered before
minting; that callback is injected at construction, which closes the
registry -> ledger -> registry dependency cycle without either side
importing the other.
"""

import logging
import threading
from collections.abc import Callable

from src.domain.exceptions import (
    CannotFetchValue,
    CannotInsert,
    DomainNotRegistered,
    NotAllowed,
    NotApproved,
    NotOwner,
    TokenExists,
    TokenNotFound,
)

logger = logging.getLogger(__name__)

ZERO_ACCOUNT = "0x" + "00" * 20


class InMemoryTokenLedger:
    """
    Implements OwnershipTokenService protocol with process-local tables.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Callers are passed explicitly; nothing is read from ambient state.
    """

    def __init__(self, is_registered: Callable[[str], bool]) -> None:
        """
        Args:
            is_registered: Returns True when a domain name has a record
        """
        self._is_registered = is_registered
        self._lock = threading.RLock()
        self._token_owner: dict[int, str] = {}
        self._token_approvals: dict[int, str] = {}
        self._owned_tokens_count: dict[str, int] = {}
        self._operator_approvals: set[tuple[str, str]] = set()
        self._token_uri: dict[int, str] = {}
        self._token_domain: dict[int, str] = {}

    # Reads

    def balance_of(self, owner: str) -> int:
        with self._lock:
            return self._owned_tokens_count.get(owner, 0)

    def owner_of(self, token_id: int) -> str | None:
        with self._lock:
            return self._token_owner.get(token_id)

    def get_approved(self, token_id: int) -> str | None:
        with self._lock:
            return self._token_approvals.get(token_id)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        with self._lock:
            return (owner, operator) in self._operator_approvals

    def token_uri(self, token_id: int) -> str | None:
        with self._lock:
            return self._token_uri.get(token_id)

    def domain_of(self, token_id: int) -> str | None:
        with self._lock:
            return self._token_domain.get(token_id)

    def token_of(self, domain_name: str) -> int | None:
        with self._lock:
            for token_id, name in self._token_domain.items():
                if name == domain_name:
                    return token_id
            return None

    # Mint / burn

    def mint(self, token_id: int, domain_name: str, owner: str, uri: str) -> None:
        if not self._is_registered(domain_name):
            raise DomainNotRegistered(domain_name)

        with self._lock:
            self._add_token_to(owner, token_id)
            self._token_uri[token_id] = uri
            self._token_domain[token_id] = domain_name
        logger.info("[TOKEN] Minted %d for %s to %s", token_id, domain_name, owner)

    def burn(self, caller: str, token_id: int) -> None:
        with self._lock:
            owner = self._token_owner.get(token_id)
            if owner is None:
                raise TokenNotFound(token_id)
            if owner != caller:
                raise NotOwner(token_id)
            self._decrement(caller)
            del self._token_owner[token_id]
            self._token_uri.pop(token_id, None)
            self._token_domain.pop(token_id, None)
            self._token_approvals.pop(token_id, None)
        logger.info("[TOKEN] Burned %d", token_id)

    # Transfers

    def transfer(self, caller: str, destination: str, token_id: int) -> None:
        self.transfer_from(caller, caller, destination, token_id)

    def transfer_from(self, caller: str, source: str, destination: str, token_id: int) -> None:
        with self._lock:
            owner = self._token_owner.get(token_id)
            if owner is None:
                raise TokenNotFound(token_id)
            if not self._approved_or_owner(caller, token_id, owner):
                raise NotApproved(token_id)
            if owner != source:
                raise NotOwner(token_id)

            self._token_approvals.pop(token_id, None)
            self._remove_token_from(source, token_id)
            self._add_token_to(destination, token_id)
        logger.info("[TOKEN] Transferred %d from %s to %s", token_id, source, destination)

    # Approvals

    def approve(self, caller: str, to: str, token_id: int) -> None:
        with self._lock:
            owner = self._token_owner.get(token_id)
            if owner is None:
                raise TokenNotFound(token_id)
            if not (owner == caller or (owner, caller) in self._operator_approvals):
                raise NotAllowed(token_id)
            if to == ZERO_ACCOUNT:
                raise NotAllowed(token_id)
            if token_id in self._token_approvals:
                raise CannotInsert(token_id)
            self._token_approvals[token_id] = to

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        if operator == caller:
            raise NotAllowed(operator)
        with self._lock:
            if approved:
                self._operator_approvals.add((caller, operator))
            else:
                self._operator_approvals.discard((caller, operator))

    # Helpers

    def _approved_or_owner(self, caller: str, token_id: int, owner: str) -> bool:
        return caller != ZERO_ACCOUNT and (
            caller == owner
            or self._token_approvals.get(token_id) == caller
            or (owner, caller) in self._operator_approvals
        )

    def _add_token_to(self, to: str, token_id: int) -> None:
        if token_id in self._token_owner:
            raise TokenExists(token_id)
        if to == ZERO_ACCOUNT:
            raise NotAllowed(to)
        self._owned_tokens_count[to] = self._owned_tokens_count.get(to, 0) + 1
        self._token_owner[token_id] = to

    def _remove_token_from(self, source: str, token_id: int) -> None:
        if token_id not in self._token_owner:
            raise TokenNotFound(token_id)
        self._decrement(source)
        del self._token_owner[token_id]

    def _decrement(self, owner: str) -> None:
        count = self._owned_tokens_count.get(owner)
        if not count:
            raise CannotFetchValue(owner)
        self._owned_tokens_count[owner] = count - 1
