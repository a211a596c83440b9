"""HTTP client for the persistence backend and its completion proxy."""

from collections.abc import Sequence
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from chatbot.client.models import Chat, Message, UserIdentity
from chatbot.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ChatNotFoundError,
    PersistenceError,
    ProviderError,
)
from chatbot.schemas.completion_schema import CompletionResponse
from chatbot.services.completion_service import ChatTurn, CompletionResult

logger = structlog.get_logger()

DEFAULT_TIMEOUT = httpx.Timeout(10.0, read=None)

# 401 codes issued by the auth middleware, as opposed to the provider's own 401.
TOKEN_ERROR_CODES = frozenset(
    {"MISSING_TOKEN", "INVALID_TOKEN", "TOKEN_EXPIRED", "TOKEN_BLACKLISTED"}
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BackendClient:
    """Thin async wrapper around the backend's JSON API.

    Every failure is raised as an ``AppException`` subclass so callers can
    decide what to swallow.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        access_token: str | None = None,
    ) -> None:
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=DEFAULT_TIMEOUT
        )
        self._access_token = access_token

    def set_access_token(self, token: str | None) -> None:
        """Attach (or drop) the bearer token used for protected routes."""
        self._access_token = token

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Auth ---

    async def register(self, username: str, email: str, password: str) -> UserIdentity:
        data = await self._request(
            "POST",
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return self._parse(UserIdentity, data)

    async def login(self, email: str, password: str) -> UserIdentity:
        data = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        user = self._parse(UserIdentity, data)
        self.set_access_token(user.access_token)
        return user

    async def logout(self) -> None:
        try:
            await self._request("POST", "/api/auth/logout")
        finally:
            self.set_access_token(None)

    # --- Chats ---

    async def list_chats(self, user_id: str) -> list[Chat]:
        data = await self._request("GET", f"/api/messages/chats/{user_id}")
        return self._parse_list(Chat, data)

    async def create_chat(self, user_id: str, title: str | None = None) -> Chat:
        data = await self._request(
            "POST", "/api/messages/chats", json={"userId": user_id, "title": title}
        )
        return self._parse(Chat, data)

    async def rename_chat(self, chat_id: str, title: str) -> Chat:
        data = await self._request(
            "PUT", f"/api/messages/chats/{chat_id}", json={"title": title}
        )
        return self._parse(Chat, data)

    async def delete_chat(self, chat_id: str) -> None:
        await self._request("DELETE", f"/api/messages/chats/{chat_id}")

    # --- Messages ---

    async def create_message(
        self,
        user_id: str,
        chat_id: str | None,
        role: str,
        content: str,
        timestamp: str | None = None,
    ) -> Message:
        data = await self._request(
            "POST",
            "/api/messages",
            json={
                "userId": user_id,
                "chatId": chat_id,
                "role": role,
                "content": content,
                "timestamp": timestamp,
            },
        )
        return self._parse(Message, data)

    async def list_messages(
        self, user_id: str, chat_id: str | None = None
    ) -> list[Message]:
        path = f"/api/messages/{user_id}"
        if chat_id:
            path = f"{path}/{chat_id}"
        data = await self._request("GET", path)
        return self._parse_list(Message, data)

    # --- Completion proxy ---

    async def complete(self, history: Sequence[ChatTurn]) -> CompletionResult:
        """Ask the backend's completion proxy for a reply."""
        payload = {
            "messages": [{"role": t.role, "content": t.content} for t in history]
        }
        try:
            response = await self._http.post(
                "/api/chat", json=payload, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            raise ProviderError(detail=str(exc)) from exc

        if response.is_error:
            body = self._json(response)
            code = body.get("code")
            if response.status_code == 401 and code in TOKEN_ERROR_CODES:
                raise AuthenticationError(
                    message=str(body.get("message", "Authentication failed")), code=code
                )
            raise ProviderError(
                status_code=response.status_code,
                detail=str(body.get("message", response.text)),
            )
        try:
            completion = CompletionResponse.model_validate(response.json())
        except ValueError as exc:
            raise ProviderError(detail=f"Malformed completion response: {exc}") from exc
        return CompletionResult(
            content=completion.choices[0].message.content,
            id=completion.id,
            usage=completion.usage,
        )

    # --- Internals ---

    def _headers(self) -> dict[str, str]:
        if self._access_token:
            return {"Authorization": f"Bearer {self._access_token}"}
        return {}

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Malformed backend payload", model=model.__name__, error=str(exc))
            raise PersistenceError(message="Malformed backend response") from exc

    @classmethod
    def _parse_list(cls, model: type[ModelT], data: Any) -> list[ModelT]:
        if not isinstance(data, list):
            logger.warning("Malformed backend payload", model=model.__name__, error="not a list")
            raise PersistenceError(message="Malformed backend response")
        return [cls._parse(model, item) for item in data]

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> Any:
        """Send a request and return the decoded JSON body (``None`` when empty)."""
        try:
            response = await self._http.request(
                method, path, json=json, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend unreachable", method=method, path=path, error=str(exc))
            raise PersistenceError(message=f"Backend unreachable: {exc}") from exc

        if not response.is_error:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise PersistenceError(message="Malformed backend response") from exc

        body = self._json(response)
        message = str(body.get("message", response.reason_phrase))
        code = str(body.get("code", "HTTP_ERROR"))
        status = response.status_code

        if status == 401:
            raise AuthenticationError(message=message, code=code)
        if status == 403:
            raise AuthorizationError(message=message)
        if status == 404 and code == "CHAT_NOT_FOUND":
            raise ChatNotFoundError
        if status >= 500:
            raise PersistenceError(message=message)
        raise AppException(message=message, code=code, status_code=status)
