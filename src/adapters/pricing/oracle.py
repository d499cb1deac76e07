"""
Price oracle adapter - Implements PricingService protocol.

Fee formula:
    price = len(name) * price_per_letter + duration * price_per_year // SECONDS_PER_YEAR

multiplied by PREMIUM_MULTIPLIER for names on the premium list (matched
after normalization). A price that cannot be represented as a 128-bit
balance, or a non-positive duration, cannot be priced and yields None.
"""

import logging
import threading
from collections.abc import Iterable

from src.domain.exceptions import PermissionDenied
from src.domain.names import normalize_name

logger = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365 * 24 * 60 * 60
PREMIUM_MULTIPLIER = 10
MAX_BALANCE = 2**128 - 1


class PriceOracle:
    """
    Implements PricingService protocol with owner-tunable rates.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        owner: str,
        price_per_letter: int = 10**18,
        price_per_year: int = 20 * 10**18,
        premium_names: Iterable[str] = (),
    ) -> None:
        self._owner = owner
        self._price_per_letter = price_per_letter
        self._price_per_year = price_per_year
        self._premium_names = [normalize_name(n) for n in premium_names]
        self._lock = threading.Lock()

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def price_per_letter(self) -> int:
        return self._price_per_letter

    @property
    def price_per_year(self) -> int:
        return self._price_per_year

    @property
    def premium_names(self) -> list[str]:
        with self._lock:
            return list(self._premium_names)

    def calculate_price(self, name: str, duration: int) -> int | None:
        if duration <= 0:
            return None

        with self._lock:
            price = len(name) * self._price_per_letter
            price += duration * self._price_per_year // SECONDS_PER_YEAR
            if normalize_name(name) in self._premium_names:
                price *= PREMIUM_MULTIPLIER

        if price > MAX_BALANCE:
            logger.warning("Price for %s overflows the balance range", name)
            return None
        return price

    def set_price_per_letter(self, caller: str, price_per_letter: int) -> None:
        self._require_owner(caller)
        with self._lock:
            self._price_per_letter = price_per_letter

    def set_price_per_year(self, caller: str, price_per_year: int) -> None:
        self._require_owner(caller)
        with self._lock:
            self._price_per_year = price_per_year

    def add_premium_name(self, caller: str, premium_name: str) -> None:
        self._require_owner(caller)
        with self._lock:
            self._premium_names.append(normalize_name(premium_name))

    def remove_premium_name(self, caller: str, premium_name: str) -> bool:
        """Returns False if the name was not on the premium list."""
        self._require_owner(caller)
        premium_name = normalize_name(premium_name)
        with self._lock:
            if premium_name not in self._premium_names:
                return False
            self._premium_names.remove(premium_name)
            return True

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise PermissionDenied(f"{caller} does not own the price oracle")
