"""OpenAI-style completion proxy schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CompletionMessage(BaseModel):
    """One turn of the history sent to the provider."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """Completion proxy request."""

    messages: list[CompletionMessage] = Field(..., min_length=1)
    max_tokens: int | None = Field(default=None, ge=1, le=32000)


class CompletionChoice(BaseModel):
    """Single choice of a completion."""

    model_config = ConfigDict(frozen=True)

    message: CompletionMessage


class CompletionUsage(BaseModel):
    """Token accounting reported by the provider (zeros when absent)."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionResponse(BaseModel):
    """Completion proxy response."""

    model_config = ConfigDict(frozen=True)

    id: str
    choices: list[CompletionChoice]
    usage: CompletionUsage = Field(default_factory=CompletionUsage)
