"""Chat repository for chat and message database operations."""

from datetime import datetime

from sqlalchemy import and_, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.models.base import utcnow
from chatbot.models.chat import DEFAULT_CHAT_TITLE, Chat
from chatbot.models.message import Message

MESSAGE_PAGE_SIZE = 100


class ChatRepository:
    """Encapsulates chat and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Chats ---

    async def find_chat_by_id(self, chat_id: str) -> Chat | None:
        """Find a chat by its identifier."""
        return await self._session.get(Chat, chat_id)

    async def find_chats_by_user(self, user_id: str) -> list[Chat]:
        """Return the user's chats, most recently updated first."""
        result = await self._session.execute(
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(Chat.updated_at.desc(), Chat.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_chat(self, user_id: str, title: str | None = None) -> Chat:
        """Create a new chat with identical created/updated timestamps."""
        now = utcnow()
        chat = Chat(
            user_id=user_id,
            title=title or DEFAULT_CHAT_TITLE,
            created_at=now,
            updated_at=now,
        )
        self._session.add(chat)
        await self._session.flush()
        return chat

    async def update_chat_title(self, chat_id: str, title: str) -> None:
        """Rename a chat."""
        await self._session.execute(
            update(Chat).where(Chat.id == chat_id).values(title=title)
        )

    async def touch_chat(self, chat_id: str, when: datetime | None = None) -> None:
        """Bump a chat's updated_at."""
        await self._session.execute(
            update(Chat)
            .where(Chat.id == chat_id)
            .values(updated_at=when or utcnow())
        )

    async def delete_chat(self, chat_id: str) -> None:
        """Hard-delete a chat together with all of its messages."""
        await self._session.execute(delete(Message).where(Message.chat_id == chat_id))
        await self._session.execute(delete(Chat).where(Chat.id == chat_id))

    # --- Messages ---

    async def create_message(
        self,
        user_id: str,
        chat_id: str | None,
        role: str,
        content: str,
        timestamp: str | None = None,
    ) -> Message:
        """Persist a single message; the display timestamp defaults to now."""
        created_at = utcnow()
        message = Message(
            user_id=user_id,
            chat_id=chat_id,
            role=role,
            content=content,
            timestamp=timestamp or created_at.isoformat(),
            created_at=created_at,
        )
        self._session.add(message)
        await self._session.flush()
        return message

    async def find_messages(
        self,
        user_id: str,
        chat_id: str,
        limit: int = MESSAGE_PAGE_SIZE,
    ) -> list[Message]:
        """Return the latest ``limit`` messages of a chat in ascending order.

        The page is fetched newest-first and reversed so that long chats show
        their most recent turns.
        """
        result = await self._session.execute(
            select(Message)
            .where(and_(Message.user_id == user_id, Message.chat_id == chat_id))
            .order_by(Message.created_at.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

