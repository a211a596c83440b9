"""Client-side conversation state backed by the persistence API."""

import structlog

from chatbot.client.backend_client import BackendClient
from chatbot.client.events import ChatListEvent, Publisher
from chatbot.client.models import Chat, Message, Role, display_timestamp
from chatbot.client.session_store import SessionStore
from chatbot.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
)
from chatbot.models.base import new_id, utcnow
from chatbot.models.chat import DEFAULT_CHAT_TITLE

logger = structlog.get_logger()

TITLE_MAX_LENGTH = 50


def title_from_message(text: str) -> str:
    """Derive a chat title from the first message of a conversation."""
    title = " ".join(text.split())
    if len(title) > TITLE_MAX_LENGTH:
        title = title[: TITLE_MAX_LENGTH - 3].rstrip() + "..."
    return title or DEFAULT_CHAT_TITLE


class ConversationRepository:
    """Chats and the active transcript, mirrored to the backend.

    Local state always changes first; backend writes that fail are logged and
    never rolled back. Guest sessions stay entirely in memory.
    """

    def __init__(self, backend: BackendClient, session: SessionStore) -> None:
        self._backend = backend
        self._session = session
        self.chats: list[Chat] = []
        self.messages: list[Message] = []
        self.chat_list_changed: Publisher[ChatListEvent] = Publisher("chat_list")
        self.transcript_changed: Publisher[list[Message]] = Publisher("transcript")

    @property
    def active_chat_id(self) -> str | None:
        return self._session.active_chat_id

    def _publish_transcript(self) -> None:
        self.transcript_changed.publish(list(self.messages))

    def _replace_chat(self, chat: Chat) -> None:
        self.chats = [chat if c.id == chat.id else c for c in self.chats]

    def _sort_chats(self) -> None:
        self.chats.sort(key=lambda c: (c.updated_at, c.created_at), reverse=True)

    # --- Chats ---

    async def list_chats(self, user_id: str | None) -> list[Chat]:
        """Load the user's chats, most recently updated first.

        Raises:
            AuthorizationError: no user is signed in or the backend refused.
        """
        if not user_id:
            raise AuthorizationError(message="Sign in to see your chats")
        try:
            chats = await self._backend.list_chats(user_id)
        except (AuthenticationError, AuthorizationError) as exc:
            raise AuthorizationError(message=exc.message) from exc
        except AppException as exc:
            logger.warning("Failed to load chats", user_id=user_id, error=exc.message)
            return []

        self.chats = sorted(
            chats, key=lambda c: (c.updated_at, c.created_at), reverse=True
        )
        self.chat_list_changed.publish(ChatListEvent("loaded"))
        return list(self.chats)

    async def create_chat(self, user_id: str, title: str | None = None) -> Chat:
        """Create a chat locally, then on the backend.

        If the backend write fails the local chat is kept under its
        client-generated id.
        """
        now = utcnow()
        chat = Chat(
            id=new_id(),
            user_id=user_id,
            title=(title or "").strip() or DEFAULT_CHAT_TITLE,
            created_at=now,
            updated_at=now,
        )
        try:
            chat = await self._backend.create_chat(user_id, chat.title)
        except AppException as exc:
            logger.warning("Failed to persist chat", user_id=user_id, error=exc.message)

        self.chats.insert(0, chat)
        self.chat_list_changed.publish(ChatListEvent("created", chat.id))
        return chat

    async def rename_chat(self, chat_id: str, new_title: str) -> None:
        """Rename a chat; blank titles are ignored."""
        title = new_title.strip()
        if not title:
            return
        for chat in self.chats:
            if chat.id == chat_id:
                self._replace_chat(chat.model_copy(update={"title": title}))
                break
        try:
            await self._backend.rename_chat(chat_id, title)
        except AppException as exc:
            logger.warning("Failed to rename chat", chat_id=chat_id, error=exc.message)
        self.chat_list_changed.publish(ChatListEvent("renamed", chat_id))

    async def delete_chat(self, chat_id: str) -> None:
        """Delete a chat and its messages; deleting the active chat clears it."""
        self.chats = [c for c in self.chats if c.id != chat_id]
        try:
            await self._backend.delete_chat(chat_id)
        except AppException as exc:
            logger.warning("Failed to delete chat", chat_id=chat_id, error=exc.message)

        if self.active_chat_id == chat_id:
            self._session.set_active_chat(None)
            self.messages = []
            self._publish_transcript()
        self.chat_list_changed.publish(ChatListEvent("deleted", chat_id))

    # --- Messages ---

    async def append_message(
        self,
        user_id: str | None,
        chat_id: str | None,
        role: Role,
        content: str,
        display_time: str | None = None,
    ) -> Message:
        """Add a message to the transcript and persist it when it has a chat.

        Guest messages (no chat id) are kept in memory only.
        """
        message = Message(
            user_id=user_id,
            chat_id=chat_id,
            role=role,
            content=content,
            timestamp=display_time or display_timestamp(),
        )
        self.messages.append(message)
        self._publish_transcript()

        if chat_id is None or user_id is None:
            return message

        try:
            await self._backend.create_message(
                user_id=user_id,
                chat_id=chat_id,
                role=role,
                content=content,
                timestamp=message.timestamp,
            )
        except AppException as exc:
            logger.warning(
                "Failed to persist message",
                chat_id=chat_id,
                role=role,
                error=exc.message,
            )
        else:
            self._touch_chat(chat_id, message)
        return message

    def _touch_chat(self, chat_id: str, message: Message) -> None:
        for chat in self.chats:
            if chat.id == chat_id:
                self._replace_chat(chat.model_copy(update={"updated_at": message.created_at}))
                self._sort_chats()
                self.chat_list_changed.publish(ChatListEvent("updated", chat_id))
                return

    async def list_messages(
        self, user_id: str, chat_id: str | None = None
    ) -> list[Message]:
        """Fetch one chat's messages in ascending order; ``[]`` without a chat."""
        if chat_id is None:
            return []
        try:
            return await self._backend.list_messages(user_id, chat_id)
        except AppException as exc:
            logger.warning("Failed to load messages", chat_id=chat_id, error=exc.message)
            return []

    # --- Active chat ---

    async def open_chat(self, user_id: str, chat_id: str) -> list[Message]:
        """Make ``chat_id`` the active chat and load its transcript."""
        self._session.set_active_chat(chat_id)
        self.messages = await self.list_messages(user_id, chat_id)
        self._publish_transcript()
        return list(self.messages)

    def start_new_chat(self) -> None:
        """Leave the active chat; the next message starts a new one."""
        self._session.set_active_chat(None)
        self.messages = []
        self._publish_transcript()

    def reset(self) -> None:
        """Forget all local chats and messages (logout, guest switch)."""
        self.chats = []
        self.messages = []
        self._publish_transcript()
        self.chat_list_changed.publish(ChatListEvent("cleared"))
