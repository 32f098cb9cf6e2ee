from __future__ import annotations
from typing import Protocol, runtime_checkable


@runtime_checkable
class CommandPublisher(Protocol):
    """Outbound side of the message transport."""

    @property
    def connected(self) -> bool:
        ...

    def publish(self, topic: str, payload: bytes) -> None:
        """Hand off without waiting for delivery."""
        ...
