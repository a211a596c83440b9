"""Tests for TokenService."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from chatbot.core.config import settings
from chatbot.core.exceptions import InvalidTokenError, TokenExpiredError
from chatbot.services.token_service import (
    LOGIN_LOCKOUT_SECONDS,
    TokenService,
    blacklist_key,
    login_attempts_key,
)


def _encode(payload: dict) -> str:
    return jwt.encode(
        payload,
        settings.auth.secret_key.get_secret_value(),
        algorithm=settings.auth.algorithm,
    )


class TestAccessTokens:
    def test_round_trip(self, token_service: TokenService) -> None:
        token = token_service.create_access_token("user-1", "a@x.com")
        payload = token_service.decode_token(token)
        assert payload.sub == "user-1"
        assert payload.email == "a@x.com"
        assert payload.type == "access"
        assert payload.jti

    def test_unique_jti(self, token_service: TokenService) -> None:
        first = token_service.decode_token(token_service.create_access_token("u", "e@x.com"))
        second = token_service.decode_token(token_service.create_access_token("u", "e@x.com"))
        assert first.jti != second.jti

    def test_expired(self, token_service: TokenService) -> None:
        past = datetime.now(UTC) - timedelta(minutes=1)
        token = _encode(
            {"sub": "u", "email": "e", "type": "access", "jti": "j", "exp": past}
        )
        with pytest.raises(TokenExpiredError):
            token_service.decode_token(token)

    def test_garbage(self, token_service: TokenService) -> None:
        with pytest.raises(InvalidTokenError):
            token_service.decode_token("not.a.jwt")

    def test_missing_claims(self, token_service: TokenService) -> None:
        future = datetime.now(UTC) + timedelta(minutes=5)
        token = _encode({"sub": "u", "exp": future})
        with pytest.raises(InvalidTokenError):
            token_service.decode_token(token)


class TestBlacklist:
    async def test_blacklist_until_expiry(self, token_service: TokenService, fake_redis) -> None:  # type: ignore[no-untyped-def]
        exp = int(datetime.now(UTC).timestamp()) + 60
        await token_service.blacklist_token("jti-1", exp)
        assert await token_service.is_blacklisted("jti-1") is True
        assert 0 < await fake_redis.ttl(blacklist_key("jti-1")) <= 60

    async def test_expired_token_not_stored(self, token_service: TokenService) -> None:
        exp = int(datetime.now(UTC).timestamp()) - 1
        await token_service.blacklist_token("jti-2", exp)
        assert await token_service.is_blacklisted("jti-2") is False


class TestLoginAttempts:
    async def test_counts_and_resets(self, token_service: TokenService, fake_redis) -> None:  # type: ignore[no-untyped-def]
        assert await token_service.record_failed_login("a@x.com") == 1
        assert await token_service.record_failed_login("a@x.com") == 2
        assert await token_service.get_login_attempts("a@x.com") == 2
        assert 0 < await fake_redis.ttl(login_attempts_key("a@x.com")) <= LOGIN_LOCKOUT_SECONDS

        await token_service.reset_login_attempts("a@x.com")
        assert await token_service.get_login_attempts("a@x.com") == 0
