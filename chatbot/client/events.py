"""Publish/subscribe hooks between the repository, controller and any UI."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class Publisher(Generic[T]):
    """Synchronous fan-out of values to subscribers."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._subscribers: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        """Deliver ``value`` to every subscriber.

        A failing subscriber is logged and does not stop delivery to the rest.
        """
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber failed", publisher=self._name)

    def __len__(self) -> int:
        return len(self._subscribers)


ChatListChange = Literal["loaded", "created", "renamed", "deleted", "updated", "cleared"]


@dataclass(frozen=True)
class ChatListEvent:
    """Something changed in the chat list (sidebar refresh)."""

    kind: ChatListChange
    chat_id: str | None = None
