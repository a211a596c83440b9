"""Chat and message API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_serializer

from chatbot.models.base import as_utc
from chatbot.models.chat import Chat
from chatbot.models.message import Message
from chatbot.schemas.base_schema import CamelModel

Role = Literal["user", "assistant"]


class CreateChatRequest(CamelModel):
    """Request to create a chat for a user."""

    user_id: str = Field(..., min_length=1)
    title: str | None = Field(default=None, max_length=255)


class RenameChatRequest(CamelModel):
    """Request to rename a chat; blank titles are ignored."""

    title: str = Field(default="", max_length=255)


class CreateMessageRequest(CamelModel):
    """Request to persist a single message."""

    user_id: str = Field(..., min_length=1)
    chat_id: str | None = None
    role: Role
    content: str
    timestamp: str | None = Field(default=None, max_length=64)


class ChatResponse(CamelModel):
    """Single chat."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _utc(self, value: datetime) -> str:
        return as_utc(value).isoformat()

    @classmethod
    def from_chat(cls, chat: Chat) -> "ChatResponse":
        return cls(
            id=chat.id,
            user_id=chat.user_id,
            title=chat.title,
            created_at=chat.created_at,
            updated_at=chat.updated_at,
        )


class MessageResponse(CamelModel):
    """Single message within a chat."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    chat_id: str | None = None
    role: str
    content: str
    timestamp: str
    created_at: datetime

    @field_serializer("created_at")
    def _utc(self, value: datetime) -> str:
        return as_utc(value).isoformat()

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            user_id=message.user_id,
            chat_id=message.chat_id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            created_at=message.created_at,
        )
