"""
Console event publisher adapter - Implements EventPublisher protocol.

This module provides a console-based implementation of the domain's
event port, logging every published event for operators and demos.
"""

import logging

from src.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class ConsoleEventPublisher:
    """
    Implements EventPublisher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    In production, this would be replaced with a message-bus adapter.
    """

    def publish(self, event: DomainEvent) -> None:
        """
        Log a domain event at INFO level.

        Args:
            event: Event emitted after its operation committed
        """
        logger.info("[EVENT] %s %s", event.name, event.payload())
