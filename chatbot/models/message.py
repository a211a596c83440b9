"""Chat message database model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chatbot.core.database import Base
from chatbot.models.base import new_id, utcnow


class Message(Base):
    """Single immutable turn of a chat."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_user_id_chat_id_created_at", "user_id", "chat_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    # Nullable for messages written before chats existed.
    chat_id: Mapped[str | None] = mapped_column(
        ForeignKey("chats.id"), nullable=True, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
