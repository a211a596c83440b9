"""Authentication business logic."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.core.exceptions import (
    AccountLockedError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
)
from chatbot.core.security import DUMMY_HASH, hash_password, verify_password
from chatbot.repositories.user_repo import UserRepository
from chatbot.schemas.auth_schema import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenPayload,
    UserResponse,
)
from chatbot.services.token_service import MAX_LOGIN_ATTEMPTS, TokenService

logger = structlog.get_logger()


class AuthService:
    """Orchestrates registration, login and logout."""

    def __init__(
        self,
        user_repo: UserRepository,
        token_service: TokenService,
        session: AsyncSession,
    ) -> None:
        self._user_repo = user_repo
        self._token_service = token_service
        self._session = session

    async def register(self, request: RegisterRequest) -> UserResponse:
        """Register a new user with a salted password hash."""
        if await self._user_repo.exists_by_email(request.email):
            raise UserAlreadyExistsError

        hashed = await hash_password(request.password)
        user = await self._user_repo.create(
            email=request.email,
            hashed_password=hashed,
            username=request.username,
        )
        await self._session.commit()

        logger.info("User registered", email=user.email, user_id=user.id)
        return UserResponse.from_user(user)

    async def login(self, request: LoginRequest) -> LoginResponse:
        """Authenticate a user and issue an access token."""
        attempts = await self._token_service.get_login_attempts(request.email)
        if attempts >= MAX_LOGIN_ATTEMPTS:
            raise AccountLockedError

        user = await self._user_repo.find_by_email(request.email)

        if user is None:
            await verify_password(request.password, DUMMY_HASH)
            await self._token_service.record_failed_login(request.email)
            raise InvalidCredentialsError

        if not await verify_password(request.password, user.hashed_password):
            await self._token_service.record_failed_login(request.email)
            raise InvalidCredentialsError

        await self._token_service.reset_login_attempts(request.email)
        logger.info("User logged in", email=user.email, user_id=user.id)

        return LoginResponse(
            user_id=user.id,
            username=user.username,
            email=user.email,
            access_token=self._token_service.create_access_token(user.id, user.email),
            expires_in=self._token_service.access_token_ttl,
        )

    async def logout(self, access_payload: TokenPayload) -> MessageResponse:
        """Revoke the access token used for this request."""
        await self._token_service.blacklist_token(
            access_payload.jti, access_payload.exp
        )
        logger.info("User logged out", user_id=access_payload.sub)
        return MessageResponse(message="Successfully logged out")
