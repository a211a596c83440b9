"""Send/receive/emit state machine for one conversation view."""

from dataclasses import dataclass
from enum import StrEnum

import structlog

from chatbot.client.completion_client import CompletionClient
from chatbot.client.conversation_repository import (
    ConversationRepository,
    title_from_message,
)
from chatbot.client.events import Publisher
from chatbot.client.models import Message
from chatbot.client.session_store import SessionStore
from chatbot.client.streaming import CancellationToken, StreamingSimulator
from chatbot.core.exceptions import AppException, ChatBusyError, RequestCancelled

logger = structlog.get_logger()

ERROR_REPLY = "Sorry, I encountered an error: {message}"


class ChatState(StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    RECEIVING = "receiving"
    EMITTING = "emitting"
    SETTLED = "settled"
    CANCELLED = "cancelled"
    ERRORED = "errored"


BUSY_STATES = frozenset({ChatState.SENDING, ChatState.RECEIVING, ChatState.EMITTING})


@dataclass(frozen=True)
class SendOutcome:
    """How a ``send()`` ended and what it committed to the transcript."""

    state: ChatState
    user_message: Message
    assistant_message: Message | None = None


class ChatController:
    """Drives one request at a time from user input to committed reply.

    ``state_changed`` publishes every transition; ``progress`` publishes the
    revealed prefix while a reply is being emitted.
    """

    def __init__(
        self,
        conversations: ConversationRepository,
        completion: CompletionClient,
        session: SessionStore,
        simulator: StreamingSimulator | None = None,
    ) -> None:
        self._conversations = conversations
        self._completion = completion
        self._session = session
        self._simulator = simulator or StreamingSimulator()
        self._state = ChatState.IDLE
        self._token: CancellationToken | None = None
        self.in_progress = ""
        self.state_changed: Publisher[ChatState] = Publisher("chat_state")
        self.progress: Publisher[str] = Publisher("emission")

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state in BUSY_STATES

    def _set_state(self, state: ChatState) -> None:
        self._state = state
        self.state_changed.publish(state)

    def stop(self) -> bool:
        """Request cancellation of the reply in flight, if any."""
        if self._token is None or not self.is_busy:
            return False
        logger.info("Stop requested", state=str(self._state))
        self._token.cancel()
        return True

    async def send(self, text: str) -> SendOutcome | None:
        """Send a user message and commit the assistant's reply.

        Returns ``None`` for blank input.

        Raises:
            ChatBusyError: a reply is already in progress.
        """
        if self.is_busy:
            raise ChatBusyError
        content = text.strip()
        if not content:
            return None

        token = CancellationToken()
        self._token = token
        self._set_state(ChatState.SENDING)
        try:
            outcome = await self._run(content, token)
            self._set_state(outcome.state)
            return outcome
        finally:
            self._token = None
            self.in_progress = ""
            self._set_state(ChatState.IDLE)

    async def _run(self, content: str, token: CancellationToken) -> SendOutcome:
        user = self._session.user
        user_id = user.user_id if user else None
        chat_id: str | None = None
        if user_id is not None and self._session.is_persisting:
            chat_id = self._conversations.active_chat_id
            if chat_id is None:
                chat = await self._conversations.create_chat(
                    user_id, title_from_message(content)
                )
                self._session.set_active_chat(chat.id)
                chat_id = chat.id

        user_message = await self._conversations.append_message(
            user_id, chat_id, "user", content
        )
        history = list(self._conversations.messages)

        try:
            result = await self._completion.complete(history, token)
        except RequestCancelled:
            logger.info("Request cancelled before reply", chat_id=chat_id)
            return SendOutcome(ChatState.CANCELLED, user_message)
        except Exception as exc:
            message = exc.message if isinstance(exc, AppException) else str(exc)
            logger.warning("Completion failed", chat_id=chat_id, error=message)
            reply = await self._conversations.append_message(
                user_id, chat_id, "assistant", ERROR_REPLY.format(message=message)
            )
            return SendOutcome(ChatState.ERRORED, user_message, reply)

        self._set_state(ChatState.RECEIVING)
        self._set_state(ChatState.EMITTING)
        async for prefix in self._simulator.replay(result.content, token):
            self.in_progress = prefix
            self.progress.publish(prefix)

        committed = self.in_progress
        self.in_progress = ""
        finished = len(committed) == len(result.content)
        if not committed:
            state = ChatState.CANCELLED if token.cancelled else ChatState.SETTLED
            return SendOutcome(state, user_message)

        reply = await self._conversations.append_message(
            user_id, chat_id, "assistant", committed
        )
        if finished:
            return SendOutcome(ChatState.SETTLED, user_message, reply)
        logger.info(
            "Partial reply kept",
            chat_id=chat_id,
            revealed=len(committed),
            total=len(result.content),
        )
        return SendOutcome(ChatState.CANCELLED, user_message, reply)
