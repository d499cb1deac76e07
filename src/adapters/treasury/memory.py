"""
In-memory treasury adapter - Implements Treasury protocol.

Keeps running balances per account and logs each credit.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class InMemoryTreasury:
    """
    Implements Treasury protocol via a process-local balance table.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._lock = threading.Lock()

    def credit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("credit amount must not be negative")
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount
        logger.info("[TREASURY] Credited %d to %s", amount, account)

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)
