"""Collects non-fatal problems found while translating a catalog."""

import logging

logger = logging.getLogger(__name__)


class Diagnostics:
    """Ordered list of notices that end up in the document description."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def add(self, message: str) -> None:
        """Record a notice and log it as a warning."""
        logger.warning(message)
        self.messages.append(message)

    def __iter__(self):
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
