"""Client-side view of users, chats and messages."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from chatbot.models.base import new_id, utcnow
from chatbot.schemas.base_schema import CamelModel

Role = Literal["user", "assistant"]


def display_timestamp(when: datetime | None = None) -> str:
    """Human-readable, locale-formatted time shown next to a message."""
    return (when or datetime.now()).strftime("%X")


class UserIdentity(CamelModel):
    """The signed-in user as remembered by the client."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    email: str
    access_token: str | None = None


class Chat(CamelModel):
    """A conversation in the sidebar."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Message(CamelModel):
    """One turn of the transcript.

    Guest messages never reach the backend and keep their locally generated id.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    user_id: str | None = None
    chat_id: str | None = None
    role: Role
    content: str
    timestamp: str = Field(default_factory=display_timestamp)
    created_at: datetime = Field(default_factory=utcnow)
