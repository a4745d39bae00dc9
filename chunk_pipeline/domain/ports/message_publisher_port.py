"""
Port (interface) for message-topic publishers.
Infrastructure adapters (e.g. SNSMessagePublisher) must implement this interface.
"""

from abc import ABC, abstractmethod


class IMessagePublisher(ABC):
    @abstractmethod
    def publish(self, topic_id: str, message: str) -> str:
        """Deliver one message to *topic_id* and return the broker's message id."""
        ...
