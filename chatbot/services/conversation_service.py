"""Service layer for chats and their messages."""

import structlog

from chatbot.core.exceptions import AuthorizationError, ChatNotFoundError
from chatbot.models.chat import Chat
from chatbot.repositories.chat_repo import ChatRepository
from chatbot.schemas.chat_schema import (
    ChatResponse,
    CreateChatRequest,
    CreateMessageRequest,
    MessageResponse,
)

logger = structlog.get_logger()

# Path segments older clients send when no chat is selected.
_MISSING_CHAT_IDS = {"", "undefined", "null"}


class ConversationService:
    """Chat and message operations scoped to the authenticated user."""

    def __init__(self, chat_repo: ChatRepository, user_id: str) -> None:
        self._chat_repo = chat_repo
        self._user_id = user_id

    def _ensure_self(self, user_id: str) -> None:
        if user_id != self._user_id:
            raise AuthorizationError(message="Not authorized to access this user")

    async def _get_owned_chat(self, chat_id: str) -> Chat:
        chat = await self._chat_repo.find_chat_by_id(chat_id)
        if chat is None:
            raise ChatNotFoundError
        if chat.user_id != self._user_id:
            raise AuthorizationError(message="Not authorized to access this chat")
        return chat

    async def list_chats(self, user_id: str) -> list[ChatResponse]:
        """Return the user's chats, newest-updated first."""
        self._ensure_self(user_id)
        chats = await self._chat_repo.find_chats_by_user(user_id)
        return [ChatResponse.from_chat(chat) for chat in chats]

    async def create_chat(self, request: CreateChatRequest) -> ChatResponse:
        """Create a chat; the title defaults to "New Chat"."""
        self._ensure_self(request.user_id)
        title = request.title.strip() if request.title else None
        chat = await self._chat_repo.create_chat(request.user_id, title=title)
        logger.info("Chat created", chat_id=chat.id, user_id=chat.user_id)
        return ChatResponse.from_chat(chat)

    async def rename_chat(self, chat_id: str, title: str) -> ChatResponse:
        """Rename a chat; blank titles leave it unchanged."""
        chat = await self._get_owned_chat(chat_id)
        new_title = title.strip()
        if new_title:
            await self._chat_repo.update_chat_title(chat.id, new_title)
            chat.title = new_title
            logger.info("Chat renamed", chat_id=chat.id)
        return ChatResponse.from_chat(chat)

    async def delete_chat(self, chat_id: str) -> None:
        """Delete a chat and every message that belongs to it."""
        chat = await self._get_owned_chat(chat_id)
        await self._chat_repo.delete_chat(chat.id)
        logger.info("Chat deleted", chat_id=chat.id, user_id=chat.user_id)

    async def append_message(self, request: CreateMessageRequest) -> MessageResponse:
        """Persist a message and bump its chat's updated_at."""
        self._ensure_self(request.user_id)
        chat_id = request.chat_id
        if chat_id in _MISSING_CHAT_IDS:
            chat_id = None
        if chat_id is not None:
            await self._get_owned_chat(chat_id)

        message = await self._chat_repo.create_message(
            user_id=request.user_id,
            chat_id=chat_id,
            role=request.role,
            content=request.content,
            timestamp=request.timestamp,
        )
        if chat_id is not None:
            await self._chat_repo.touch_chat(chat_id, message.created_at)

        logger.debug(
            "Message saved",
            message_id=message.id,
            chat_id=chat_id,
            role=message.role,
        )
        return MessageResponse.from_message(message)

    async def list_messages(
        self, user_id: str, chat_id: str | None = None
    ) -> list[MessageResponse]:
        """Return a chat's messages in ascending creation order.

        Without a chat id the result is empty; messages of different chats
        are never mixed.
        """
        self._ensure_self(user_id)
        if chat_id is None or chat_id in _MISSING_CHAT_IDS:
            return []
        messages = await self._chat_repo.find_messages(user_id, chat_id)
        return [MessageResponse.from_message(m) for m in messages]
