"""Completion service: one provider call per request, whole response only."""

import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from chatbot.core.exceptions import ProviderError
from chatbot.schemas.completion_schema import CompletionUsage

logger = structlog.get_logger()

EMPTY_RESPONSE = "No response received"

# Applied in order; lossy and one-way.
MARKDOWN_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"(?<!\w)__(.+?)__(?!\w)"), r"\1"),
    (re.compile(r"(?<!\w)_(.+?)_(?!\w)"), r"\1"),
    (re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE), ""),
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"\n\s*\n"), "\n"),
]


def clean_content(text: str) -> str:
    """Strip markdown emphasis, headings and code markup from a response."""
    for pattern, replacement in MARKDOWN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text.strip()


class ChatTurn(Protocol):
    """Anything carrying a role and content (schemas, client messages)."""

    role: str
    content: str


@dataclass(frozen=True)
class CompletionResult:
    """Cleaned provider response."""

    content: str
    id: str = field(default_factory=lambda: f"chatcmpl-{uuid.uuid4().hex}")
    usage: CompletionUsage = field(default_factory=CompletionUsage)


def _status_of(exc: Exception) -> int | None:
    """Best-effort HTTP status from provider SDK / httpx exceptions."""
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class CompletionService:
    """Sends the conversation history to the configured chat model."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def complete(
        self,
        history: Sequence[ChatTurn],
        max_tokens: int | None = None,
    ) -> CompletionResult:
        """Invoke the provider once and return the cleaned content.

        Raises:
            ProviderError: the provider failed; categorised by HTTP status.
        """
        messages = self._build_langchain_messages(history)
        runnable: Any = self._llm
        if max_tokens is not None:
            runnable = self._llm.bind(max_tokens=max_tokens)

        logger.info(
            "Sending completion request",
            message_count=len(messages),
            last_message=(history[-1].content[:30] if history else None),
        )
        try:
            response = await runnable.ainvoke(messages)
        except ProviderError:
            raise
        except Exception as exc:
            status = _status_of(exc)
            logger.warning(
                "Completion provider error",
                status_code=status,
                error=str(exc),
            )
            raise ProviderError(status_code=status, detail=str(exc)) from exc

        content = clean_content(str(response.content)) or EMPTY_RESPONSE
        logger.info("Completion received", length=len(content))
        return CompletionResult(
            content=content,
            id=getattr(response, "id", None) or f"chatcmpl-{uuid.uuid4().hex}",
            usage=self._usage_of(response),
        )

    @staticmethod
    def _build_langchain_messages(history: Sequence[ChatTurn]) -> list[BaseMessage]:
        """Convert role/content turns into LangChain message objects."""
        messages: list[BaseMessage] = []
        for turn in history:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            elif turn.role == "assistant":
                messages.append(AIMessage(content=turn.content))
            elif turn.role == "system":
                messages.append(SystemMessage(content=turn.content))
        return messages

    @staticmethod
    def _usage_of(response: Any) -> CompletionUsage:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return CompletionUsage()
        return CompletionUsage(
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
        )
