"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-32b")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from langchain_core.language_models import BaseChatModel  # noqa: E402
from langchain_core.messages import AIMessage  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chatbot.core.database import Base  # noqa: E402
from chatbot.models.chat import Chat  # noqa: E402, F401
from chatbot.models.message import Message  # noqa: E402, F401
from chatbot.models.user import User  # noqa: E402, F401
from chatbot.services.token_service import TokenService  # noqa: E402

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client read by the middleware and get_redis()."""
    monkeypatch.setattr("chatbot.core.redis.redis_client", fake_redis)


# --- Token helpers ---


@pytest.fixture
def token_service(fake_redis: fakeredis.aioredis.FakeRedis) -> TokenService:
    """Create a TokenService backed by fake Redis."""
    return TokenService(fake_redis)


def make_auth_headers(
    fake_redis: fakeredis.aioredis.FakeRedis,
    user_id: str = "user-1",
    email: str = "test@test.com",
) -> dict[str, str]:
    """Generate Authorization headers with a valid access token."""
    ts = TokenService(fake_redis)
    token = ts.create_access_token(user_id=user_id, email=email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> Callable[..., dict[str, str]]:
    """Factory for auth headers of arbitrary users."""

    def factory(user_id: str = "user-1", email: str = "test@test.com") -> dict[str, str]:
        return make_auth_headers(fake_redis, user_id=user_id, email=email)

    return factory


# --- App override & client fixtures ---


def _get_app():  # type: ignore[no-untyped-def]
    """Import app lazily and apply overrides."""
    from chatbot.core.database import get_async_session as original_dep
    from chatbot.main import app

    app.dependency_overrides[original_dep] = override_get_async_session
    return app


@pytest.fixture
async def async_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for async tests."""
    application = _get_app()
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def authed_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client authenticated as ``user-1``."""
    application = _get_app()
    headers = make_auth_headers(fake_redis)
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    ) as ac:
        yield ac


# --- DB session for tests ---


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session


# --- Mock LLM ---


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock chat model returning a fixed reply."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(return_value=AIMessage(content="Test response"))
    return mock
