"""Global dependencies for the application."""

from functools import lru_cache

from fastapi import Depends, Request
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.core.config import settings
from chatbot.core.database import get_async_session
from chatbot.core.exceptions import AuthenticationError
from chatbot.core.redis import get_redis
from chatbot.repositories.chat_repo import ChatRepository
from chatbot.repositories.user_repo import UserRepository
from chatbot.services.auth_service import AuthService
from chatbot.services.completion_service import CompletionService
from chatbot.services.conversation_service import ConversationService
from chatbot.services.token_service import TokenService


@lru_cache
def get_llm() -> BaseChatModel:
    """Get the chat model for the configured provider (non-streaming)."""
    llm_config = settings.llm
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
                base_url=llm_config.openai_base_url,
                max_tokens=llm_config.max_tokens,
                temperature=llm_config.temperature,
                max_retries=0,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
                max_tokens=llm_config.max_tokens,
                temperature=llm_config.temperature,
                max_retries=0,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


def get_completion_service() -> CompletionService:
    """Get CompletionService bound to the configured chat model."""
    return CompletionService(get_llm())


# --- Auth dependencies ---


class CurrentUser(BaseModel):
    """Authenticated user extracted from request state."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str


def get_token_service() -> TokenService:
    """Get TokenService backed by the active Redis client."""
    return TokenService(get_redis())


def get_user_repository(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    """Get UserRepository bound to the current session."""
    return UserRepository(session)


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
    session: AsyncSession = Depends(get_async_session),
) -> AuthService:
    """Get AuthService with all dependencies."""
    return AuthService(
        user_repo=user_repo,
        token_service=token_service,
        session=session,
    )


def get_current_user(request: Request) -> CurrentUser:
    """Extract the authenticated user from middleware-populated state."""
    state = getattr(request, "state", None)
    user_id = getattr(state, "user_id", None) if state else None
    if user_id is None:
        raise AuthenticationError(message="Not authenticated")
    return CurrentUser(id=state.user_id, email=state.email)


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationService:
    """Get ConversationService for the authenticated user."""
    return ConversationService(chat_repo=chat_repo, user_id=current_user.id)
