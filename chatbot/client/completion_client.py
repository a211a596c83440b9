"""Completion requests that can be abandoned by a cancellation token."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog

from chatbot.client.streaming import CancellationToken
from chatbot.core.exceptions import RequestCancelled
from chatbot.services.completion_service import ChatTurn, CompletionResult

logger = structlog.get_logger()

Completer = Callable[[Sequence[ChatTurn]], Awaitable[CompletionResult]]


def _discard_result(task: asyncio.Task) -> None:
    # Retrieve the outcome so an abandoned failure is not reported as unhandled.
    if not task.cancelled():
        task.exception()


class CompletionClient:
    """Wraps any ``complete(history)`` callable with cancellation.

    The callable is usually ``BackendClient.complete`` (backend proxy) or
    ``CompletionService.complete`` (direct provider access).
    """

    def __init__(self, completer: Completer) -> None:
        self._completer = completer

    async def complete(
        self,
        history: Sequence[ChatTurn],
        token: CancellationToken | None = None,
    ) -> CompletionResult:
        """Send one completion request and wait for the whole reply.

        Raises:
            RequestCancelled: the token fired before the reply arrived; the
                in-flight call is cancelled and its result dropped.
            ProviderError: the provider rejected the request.
        """
        if token is None:
            return await self._completer(history)
        token.raise_if_cancelled()

        request = asyncio.ensure_future(self._completer(history))
        stop = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {request, stop}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            stop.cancel()

        if request in done:
            return request.result()

        logger.info("Completion request aborted")
        request.cancel()
        request.add_done_callback(_discard_result)
        raise RequestCancelled
