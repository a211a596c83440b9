"""Transcript search highlighting and sidebar filtering."""

from collections.abc import Callable, Sequence

from chatbot.client.events import Publisher
from chatbot.client.models import Chat, Message


def highlight(messages: Sequence[Message], query: str) -> set[int]:
    """Indices of messages whose content contains ``query``, ignoring case.

    A blank query highlights nothing.
    """
    needle = query.strip().casefold()
    if not needle:
        return set()
    return {i for i, message in enumerate(messages) if needle in message.content.casefold()}


def filter_chats(chats: Sequence[Chat], query: str) -> list[Chat]:
    """Chats whose title contains ``query``; a blank query keeps them all."""
    needle = query.strip().casefold()
    if not needle:
        return list(chats)
    return [chat for chat in chats if needle in chat.title.casefold()]


class SearchOverlay:
    """Keeps the highlighted indices current for a live transcript."""

    def __init__(self, transcript_changed: Publisher[list[Message]]) -> None:
        self._messages: list[Message] = []
        self._query = ""
        self.matches: set[int] = set()
        self.matches_changed: Publisher[set[int]] = Publisher("search")
        self._unsubscribe: Callable[[], None] = transcript_changed.subscribe(
            self._on_transcript
        )

    @property
    def query(self) -> str:
        return self._query

    def set_query(self, query: str) -> set[int]:
        self._query = query
        return self._recompute()

    def close(self) -> None:
        self._unsubscribe()

    def _on_transcript(self, messages: list[Message]) -> None:
        self._messages = messages
        self._recompute()

    def _recompute(self) -> set[int]:
        self.matches = highlight(self._messages, self._query)
        self.matches_changed.publish(set(self.matches))
        return self.matches
