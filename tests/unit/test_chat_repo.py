"""Unit tests for ChatRepository."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.models.base import as_utc
from chatbot.models.chat import DEFAULT_CHAT_TITLE
from chatbot.repositories.chat_repo import ChatRepository

USER = "user-1"


@pytest.fixture
def chat_repo(db_session: AsyncSession) -> ChatRepository:
    """Create a ChatRepository backed by the test DB session."""
    return ChatRepository(db_session)


class TestChats:
    async def test_create_chat_defaults(self, chat_repo: ChatRepository) -> None:
        chat = await chat_repo.create_chat(USER)
        assert chat.title == DEFAULT_CHAT_TITLE
        assert chat.created_at == chat.updated_at
        assert len(chat.id) == 36

    async def test_create_chat_with_title(self, chat_repo: ChatRepository) -> None:
        chat = await chat_repo.create_chat(USER, title="Trip plans")
        assert chat.title == "Trip plans"

    async def test_chats_ordered_by_updated_at_desc(
        self, chat_repo: ChatRepository
    ) -> None:
        old = await chat_repo.create_chat(USER, title="old")
        new = await chat_repo.create_chat(USER, title="new")
        await chat_repo.touch_chat(old.id, datetime.now(UTC) + timedelta(minutes=5))

        chats = await chat_repo.find_chats_by_user(USER)
        assert [c.id for c in chats] == [old.id, new.id]

    async def test_chats_scoped_to_user(self, chat_repo: ChatRepository) -> None:
        await chat_repo.create_chat(USER)
        await chat_repo.create_chat("someone-else")
        chats = await chat_repo.find_chats_by_user(USER)
        assert len(chats) == 1

    async def test_update_title(
        self, chat_repo: ChatRepository, db_session: AsyncSession
    ) -> None:
        chat = await chat_repo.create_chat(USER)
        await chat_repo.update_chat_title(chat.id, "Renamed")
        await db_session.refresh(chat)
        assert chat.title == "Renamed"

    async def test_touch_chat_advances_updated_at(
        self, chat_repo: ChatRepository, db_session: AsyncSession
    ) -> None:
        chat = await chat_repo.create_chat(USER)
        before = as_utc(chat.updated_at)
        later = before + timedelta(seconds=30)
        await chat_repo.touch_chat(chat.id, later)
        await db_session.refresh(chat)
        assert as_utc(chat.updated_at) == later

    async def test_delete_chat_cascades_messages(
        self, chat_repo: ChatRepository
    ) -> None:
        chat = await chat_repo.create_chat(USER)
        await chat_repo.create_message(USER, chat.id, "user", "Hi")
        await chat_repo.create_message(USER, chat.id, "assistant", "Hello")

        await chat_repo.delete_chat(chat.id)

        assert await chat_repo.find_chat_by_id(chat.id) is None
        assert await chat_repo.find_messages(USER, chat.id) == []


class TestMessages:
    async def test_create_message_default_timestamp(
        self, chat_repo: ChatRepository
    ) -> None:
        chat = await chat_repo.create_chat(USER)
        message = await chat_repo.create_message(USER, chat.id, "user", "Hi")
        assert message.timestamp
        assert message.chat_id == chat.id

    async def test_create_message_keeps_display_timestamp(
        self, chat_repo: ChatRepository
    ) -> None:
        message = await chat_repo.create_message(
            USER, None, "user", "Hi", timestamp="10:42:01 AM"
        )
        assert message.timestamp == "10:42:01 AM"
        assert message.chat_id is None

    async def test_messages_ascending(self, chat_repo: ChatRepository) -> None:
        chat = await chat_repo.create_chat(USER)
        for i in range(5):
            await chat_repo.create_message(USER, chat.id, "user", f"m{i}")

        messages = await chat_repo.find_messages(USER, chat.id)
        assert [m.content for m in messages] == ["m0", "m1", "m2", "m3", "m4"]
        created = [m.created_at for m in messages]
        assert created == sorted(created)

    async def test_messages_page_keeps_latest(self, chat_repo: ChatRepository) -> None:
        chat = await chat_repo.create_chat(USER)
        for i in range(5):
            await chat_repo.create_message(USER, chat.id, "user", f"m{i}")

        messages = await chat_repo.find_messages(USER, chat.id, limit=2)
        assert [m.content for m in messages] == ["m3", "m4"]

    async def test_messages_never_mix_chats(self, chat_repo: ChatRepository) -> None:
        first = await chat_repo.create_chat(USER)
        second = await chat_repo.create_chat(USER)
        await chat_repo.create_message(USER, first.id, "user", "one")
        await chat_repo.create_message(USER, second.id, "user", "two")

        messages = await chat_repo.find_messages(USER, first.id)
        assert [m.content for m in messages] == ["one"]
        others = await chat_repo.find_messages(USER, second.id)
        assert [m.content for m in others] == ["two"]
