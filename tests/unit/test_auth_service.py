"""Tests for AuthService."""

import fakeredis.aioredis
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.core.exceptions import (
    AccountLockedError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
)
from chatbot.repositories.user_repo import UserRepository
from chatbot.schemas.auth_schema import LoginRequest, RegisterRequest
from chatbot.services.auth_service import AuthService
from chatbot.services.token_service import MAX_LOGIN_ATTEMPTS, TokenService


@pytest.fixture
def auth_service(
    db_session: AsyncSession,
    fake_redis: fakeredis.aioredis.FakeRedis,
) -> AuthService:
    repo = UserRepository(db_session)
    ts = TokenService(fake_redis)
    return AuthService(user_repo=repo, token_service=ts, session=db_session)


async def _register(auth_service: AuthService, email: str = "a@x.com") -> str:
    user = await auth_service.register(
        RegisterRequest(username="alice", email=email, password="pw")
    )
    return user.user_id


class TestRegister:
    async def test_register_success(self, auth_service: AuthService) -> None:
        user = await auth_service.register(
            RegisterRequest(username="alice", email="A@X.com", password="pw")
        )
        assert user.email == "a@x.com"
        assert user.username == "alice"
        assert user.user_id

    async def test_register_duplicate_email(self, auth_service: AuthService) -> None:
        await _register(auth_service)
        with pytest.raises(UserAlreadyExistsError):
            await _register(auth_service)


class TestLogin:
    async def test_login_returns_stable_user_id(self, auth_service: AuthService) -> None:
        user_id = await _register(auth_service)
        first = await auth_service.login(LoginRequest(email="a@x.com", password="pw"))
        second = await auth_service.login(LoginRequest(email="a@x.com", password="pw"))
        assert first.user_id == user_id == second.user_id
        assert first.access_token
        assert first.token_type == "bearer"

    async def test_login_wrong_password(self, auth_service: AuthService) -> None:
        await _register(auth_service)
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(LoginRequest(email="a@x.com", password="nope"))

    async def test_login_unknown_email(self, auth_service: AuthService) -> None:
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(LoginRequest(email="who@x.com", password="pw"))

    async def test_lockout_after_failures(self, auth_service: AuthService) -> None:
        await _register(auth_service)
        for _ in range(MAX_LOGIN_ATTEMPTS):
            with pytest.raises(InvalidCredentialsError):
                await auth_service.login(LoginRequest(email="a@x.com", password="bad"))
        with pytest.raises(AccountLockedError):
            await auth_service.login(LoginRequest(email="a@x.com", password="pw"))

    async def test_success_resets_attempts(
        self, auth_service: AuthService, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await _register(auth_service)
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(LoginRequest(email="a@x.com", password="bad"))
        await auth_service.login(LoginRequest(email="a@x.com", password="pw"))
        assert await TokenService(fake_redis).get_login_attempts("a@x.com") == 0


class TestLogout:
    async def test_logout_blacklists_token(
        self, auth_service: AuthService, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await _register(auth_service)
        login = await auth_service.login(LoginRequest(email="a@x.com", password="pw"))
        ts = TokenService(fake_redis)
        payload = ts.decode_token(login.access_token)

        result = await auth_service.logout(payload)

        assert result.message == "Successfully logged out"
        assert await ts.is_blacklisted(payload.jti) is True
