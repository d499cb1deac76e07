"""
In-memory repository adapter - Implements RegistryStore protocol.

Used for tests and the single-process "memory" storage backend.

Atomicity: an RLock serializes operations (one operation runs to
completion before the next starts), and the outermost atomic() block
snapshots every table on entry and restores the snapshot if the block
raises. Records are copied on the way in and out so that a caller
mutating a returned record never changes stored state.
"""

import copy
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace

from src.domain.models import Commitment, ContentRecord, DomainRecord
from src.domain.ports import ContentScope

logger = logging.getLogger(__name__)


@dataclass
class _Tables:
    commitments: dict[str, Commitment] = field(default_factory=dict)
    domains: dict[str, DomainRecord] = field(default_factory=dict)
    content: dict[tuple[str, str], ContentRecord] = field(default_factory=dict)
    subdomain_managers: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, str] = field(default_factory=dict)


class InMemoryRegistryStore:
    """
    Implements RegistryStore protocol with process-local dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables = _Tables()
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = copy.deepcopy(self._tables) if self._depth == 0 else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._tables = snapshot
                    logger.debug("Rolled back in-memory transaction")
                raise
            finally:
                self._depth -= 1

    # Commitments

    def get_commitment(self, commit_hash: str) -> Commitment | None:
        with self._lock:
            return self._tables.commitments.get(commit_hash)

    def put_commitment(self, commitment: Commitment) -> None:
        with self._lock:
            self._tables.commitments[commitment.commit_hash] = commitment

    def delete_commitments_before(self, cutoff: int) -> int:
        with self._lock:
            expired = [h for h, c in self._tables.commitments.items() if c.submitted_at < cutoff]
            for commit_hash in expired:
                del self._tables.commitments[commit_hash]
            return len(expired)

    # Domains

    def get_domain(self, domain_name: str) -> DomainRecord | None:
        with self._lock:
            record = self._tables.domains.get(domain_name)
            return None if record is None else replace(record)

    def insert_domain(self, record: DomainRecord) -> bool:
        with self._lock:
            if record.domain_name in self._tables.domains:
                return False
            self._tables.domains[record.domain_name] = replace(record)
            return True

    def update_domain(self, record: DomainRecord) -> None:
        with self._lock:
            self._tables.domains[record.domain_name] = replace(record)

    def delete_domain(self, domain_name: str) -> None:
        with self._lock:
            self._tables.domains.pop(domain_name, None)

    # Content

    def get_content(self, scope: ContentScope, name: str) -> ContentRecord | None:
        with self._lock:
            content = self._tables.content.get((scope.value, name))
            return None if content is None else copy.deepcopy(content)

    def put_content(self, scope: ContentScope, name: str, content: ContentRecord) -> None:
        with self._lock:
            self._tables.content[(scope.value, name)] = copy.deepcopy(content)

    def delete_content(self, scope: ContentScope, name: str) -> None:
        with self._lock:
            self._tables.content.pop((scope.value, name), None)

    # Subdomain delegation

    def get_subdomain_manager(self, subdomain: str) -> str | None:
        with self._lock:
            return self._tables.subdomain_managers.get(subdomain)

    def set_subdomain_manager(self, subdomain: str, manager: str) -> None:
        with self._lock:
            self._tables.subdomain_managers[subdomain] = manager

    def delete_subdomain_manager(self, subdomain: str) -> None:
        with self._lock:
            self._tables.subdomain_managers.pop(subdomain, None)

    # Parameters

    def read_parameter(self, key: str) -> str | None:
        with self._lock:
            return self._tables.parameters.get(key)

    def write_parameter(self, key: str, value: str) -> None:
        with self._lock:
            self._tables.parameters[key] = value

    def ping(self) -> None:
        """Health check; the in-memory store is always reachable."""
        return None
