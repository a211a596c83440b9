"""JWT access tokens, Redis-backed revocation and login throttling."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import redis.asyncio as redis

from chatbot.core.config import settings
from chatbot.core.exceptions import InvalidTokenError, TokenExpiredError
from chatbot.schemas.auth_schema import TokenPayload

MAX_LOGIN_ATTEMPTS = 5
LOGIN_LOCKOUT_SECONDS = 300


def blacklist_key(jti: str) -> str:
    """Redis key marking a revoked token."""
    return settings.redis.key("token_blacklist", jti)


def login_attempts_key(email: str) -> str:
    """Redis key counting failed logins for an email."""
    return settings.redis.key("login_attempts", email)


class TokenService:
    """Manage JWT access tokens and Redis-backed bookkeeping."""

    def __init__(self, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._secret = settings.auth.secret_key.get_secret_value()
        self._algorithm = settings.auth.algorithm

    @property
    def access_token_ttl(self) -> int:
        """Access token lifetime in seconds."""
        return settings.auth.access_token_expire_minutes * 60

    def create_access_token(self, user_id: str, email: str) -> str:
        """Create a signed JWT access token."""
        now = datetime.now(UTC)
        payload = {
            "sub": user_id,
            "email": email,
            "type": "access",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + timedelta(seconds=self.access_token_ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT access token."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError from e

        try:
            return TokenPayload(
                sub=payload["sub"],
                email=payload["email"],
                type=payload["type"],
                jti=payload["jti"],
                exp=payload["exp"],
            )
        except KeyError as e:
            raise InvalidTokenError from e

    # --- Blacklist ---

    async def blacklist_token(self, jti: str, exp: int) -> None:
        """Add a token to the blacklist until it expires."""
        ttl = exp - int(datetime.now(UTC).timestamp())
        if ttl > 0:
            await self._redis.setex(blacklist_key(jti), ttl, "1")

    async def is_blacklisted(self, jti: str) -> bool:
        """Check if a token is blacklisted."""
        return await self._redis.get(blacklist_key(jti)) is not None

    # --- Login attempts ---

    async def record_failed_login(self, email: str) -> int:
        """Record a failed login attempt, return total count."""
        key = login_attempts_key(email)
        count = await self._redis.incr(key)
        if count == 1:
            await self._redis.expire(key, LOGIN_LOCKOUT_SECONDS)
        return int(count)

    async def reset_login_attempts(self, email: str) -> None:
        """Clear failed login attempts after successful login."""
        await self._redis.delete(login_attempts_key(email))

    async def get_login_attempts(self, email: str) -> int:
        """Get current failed login attempt count."""
        result = await self._redis.get(login_attempts_key(email))
        return int(result) if result else 0
