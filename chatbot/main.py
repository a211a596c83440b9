"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from chatbot.api.common.auth_router import router as auth_router
from chatbot.api.common.completion_router import router as completion_router
from chatbot.api.common.message_router import router as message_router
from chatbot.core.config import settings
from chatbot.core.database import Base, engine
from chatbot.core.exceptions import (
    AppException,
    app_exception_handler,
    error_body,
    validation_exception_handler,
)
from chatbot.core.middleware import AuthMiddleware
from chatbot.core.rate_limit import limiter
from chatbot.core.redis import close_redis, init_redis
from chatbot.models import chat, message, user  # noqa: F401
from chatbot.schemas.response_schema import ApiResponse, success_response

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        llm_provider=settings.llm.provider,
    )
    await init_redis()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")
    yield
    await close_redis()
    await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Chat backend: accounts, chat history and a completion proxy",
    version=settings.app.version,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content=error_body(429, "Rate limit exceeded", "RATE_LIMIT_EXCEEDED"),
    )


# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(AuthMiddleware)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.app.is_development else settings.server.cors_origins_list,
    allow_credentials=not settings.app.is_development,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": settings.app.version,
            "endpoints": {
                "auth": "/api/auth/login, /api/auth/register",
                "messages": "/api/messages",
                "chat": "POST /api/chat",
            },
        }
    )


# Register routers
app.include_router(auth_router)
app.include_router(message_router)
app.include_router(completion_router)
