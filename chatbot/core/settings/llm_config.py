"""LLM provider configuration."""

from typing import Literal

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """LLM provider settings."""

    provider: Literal["openai", "anthropic"]
    openai_api_key: SecretStr
    openai_model: str
    openai_base_url: str | None
    anthropic_api_key: SecretStr
    anthropic_model: str
    max_tokens: int
    temperature: float
