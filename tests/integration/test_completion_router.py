"""Integration tests for the /api/chat completion proxy."""

from collections.abc import Generator
from unittest.mock import MagicMock

import httpx
import pytest
from httpx import AsyncClient
from langchain_core.messages import AIMessage

from chatbot.dependencies import get_completion_service
from chatbot.main import app
from chatbot.services.completion_service import CompletionService

HISTORY = {"messages": [{"role": "user", "content": "Hi"}]}


@pytest.fixture(autouse=True)
def override_completion(mock_llm: MagicMock) -> Generator[None, None, None]:
    app.dependency_overrides[get_completion_service] = lambda: CompletionService(mock_llm)
    yield
    app.dependency_overrides.pop(get_completion_service, None)


def _provider_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    return httpx.HTTPStatusError(
        "failed", request=request, response=httpx.Response(status, request=request)
    )


class TestCompletionProxy:
    async def test_returns_cleaned_choice(
        self, authed_client: AsyncClient, mock_llm: MagicMock
    ) -> None:
        mock_llm.ainvoke.return_value = AIMessage(content="**Hi there!**")
        resp = await authed_client.post("/api/chat", json=HISTORY)

        assert resp.status_code == 200
        body = resp.json()
        assert body["choices"][0]["message"] == {
            "role": "assistant",
            "content": "Hi there!",
        }
        assert body["id"]
        assert "usage" in body

    async def test_empty_history_rejected(self, authed_client: AsyncClient) -> None:
        resp = await authed_client.post("/api/chat", json={"messages": []})
        assert resp.status_code == 422

    async def test_provider_status_forwarded(
        self, authed_client: AsyncClient, mock_llm: MagicMock
    ) -> None:
        mock_llm.ainvoke.side_effect = _provider_error(401)
        resp = await authed_client.post("/api/chat", json=HISTORY)

        assert resp.status_code == 401
        body = resp.json()
        assert body["code"] == "INVALID_API_KEY"
        assert body["message"] == "Invalid API key. Please check your API key."

    async def test_requires_token(self, async_client: AsyncClient) -> None:
        resp = await async_client.post("/api/chat", json=HISTORY)
        assert resp.status_code == 401
