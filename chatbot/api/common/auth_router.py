"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from chatbot.core.config import settings
from chatbot.core.rate_limit import limiter
from chatbot.dependencies import CurrentUser, get_auth_service, get_current_user
from chatbot.schemas.auth_schema import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    TokenPayload,
    UserResponse,
)
from chatbot.schemas.response_schema import ApiResponse, success_response
from chatbot.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(lambda: settings.auth.register_rate_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """Register a new user."""
    return await auth_service.register(body)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(lambda: settings.auth.login_rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    auth_service: AuthServiceDep,
) -> LoginResponse:
    """Authenticate and receive an access token."""
    return await auth_service.login(body)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    request: Request,
    auth_service: AuthServiceDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Revoke the current access token."""
    access_payload = TokenPayload(
        sub=current_user.id,
        email=current_user.email,
        type="access",
        jti=request.state.jti,
        exp=request.state.exp,
    )
    result = await auth_service.logout(access_payload)
    return success_response(result)
