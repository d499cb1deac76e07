"""
Commit store - time-windowed commitment bookkeeping for commit-reveal.

Commitment Lifecycle
====================

    (absent) --commit--> PENDING    submitted_at = now
    PENDING  ---------->  USABLE    now >= submitted_at + min_commit_age
    USABLE   ---------->  EXPIRED   now >= submitted_at + max_commit_age
    EXPIRED  --commit--> PENDING    overwritten in place (lazy purge)

A commitment is only usable inside [min_commit_age, max_commit_age).
Consumed commitments are retained until they expire so that replaying a
successful registration reports AlreadyRegistered rather than a missing
commitment; purge_expired() bounds storage growth.
"""

import logging

from .exceptions import (
    CommitmentNotFound,
    CommitmentTooNew,
    CommitmentTooOld,
    UnexpiredCommitmentExists,
)
from .models import Commitment
from .ports import RegistryStore

logger = logging.getLogger(__name__)


class CommitStore:
    """Commitment table with the commit-reveal timing rules."""

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def commit(self, commit_hash: str, now: int, max_commit_age: int) -> Commitment:
        """
        Record a commitment first seen at now.

        Raises:
            UnexpiredCommitmentExists: If the same hash is still inside its window
        """
        with self._store.atomic():
            existing = self._store.get_commitment(commit_hash)
            if existing is not None:
                if existing.submitted_at + max_commit_age >= now:
                    raise UnexpiredCommitmentExists(commit_hash)
                logger.info("Replacing expired commitment %s", commit_hash)

            commitment = Commitment(commit_hash=commit_hash, submitted_at=now)
            self._store.put_commitment(commitment)
        return commitment

    def consume(
        self, commit_hash: str, now: int, min_commit_age: int, max_commit_age: int
    ) -> Commitment:
        """
        Check that a commitment exists and is inside its usable window.

        Raises:
            CommitmentNotFound: If no commitment matches
            CommitmentTooNew: If now < submitted_at + min_commit_age
            CommitmentTooOld: If now >= submitted_at + max_commit_age
        """
        commitment = self._store.get_commitment(commit_hash)
        if commitment is None:
            raise CommitmentNotFound(commit_hash)
        if commitment.submitted_at + min_commit_age > now:
            raise CommitmentTooNew(commit_hash)
        if commitment.submitted_at + max_commit_age <= now:
            raise CommitmentTooOld(commit_hash)
        return commitment

    def get(self, commit_hash: str) -> Commitment | None:
        return self._store.get_commitment(commit_hash)

    def purge_expired(self, now: int, max_commit_age: int) -> int:
        """Delete commitments that can no longer be consumed or block a re-commit."""
        with self._store.atomic():
            purged = self._store.delete_commitments_before(now - max_commit_age)
        if purged:
            logger.info("Purged %d expired commitment(s)", purged)
        return purged
