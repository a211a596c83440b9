"""Cooperative cancellation and the character-by-character reply replay."""

import asyncio
from collections.abc import AsyncIterator

import structlog

from chatbot.core.exceptions import RequestCancelled

logger = structlog.get_logger()


class CancellationToken:
    """One-shot stop signal shared by a request and its emission loop."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until ``cancel()`` is called."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled


class StreamingSimulator:
    """Replays a complete response one character at a time.

    The provider returns the whole reply at once; the simulator only reveals
    it progressively so a ``stop()`` can keep a partial prefix.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay

    async def replay(
        self, content: str, token: CancellationToken
    ) -> AsyncIterator[str]:
        """Yield the growing prefix of ``content`` after each character.

        The token is checked before every character; once it fires the
        generator stops without yielding the next prefix.
        """
        prefix = ""
        for char in content:
            if token.cancelled:
                logger.debug("Emission stopped", revealed=len(prefix), total=len(content))
                return
            prefix += char
            yield prefix
            # Always yield to the loop so stop() can run between characters.
            await asyncio.sleep(self.delay)
