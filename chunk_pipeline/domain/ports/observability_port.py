"""
Port (interface) for structured observability events.
Infrastructure adapters (e.g. LoggingEventEmitter) must implement this interface.

The chunking and filtering code never logs directly; it reports named events
with key/value fields to whichever emitter was injected.
"""

from abc import ABC, abstractmethod
from typing import Any


class IEventEmitter(ABC):
    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        """Record one event, e.g. emit("chunk.read", file="a.mp4", index=3)."""
        ...


class NullEventEmitter(IEventEmitter):
    """Default emitter: drops every event."""

    def emit(self, event: str, **fields: Any) -> None:
        return None
