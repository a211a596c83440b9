"""Application exception classes and handlers."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_ERROR",
    ) -> None:
        super().__init__(message=message, code=code, status_code=401)


class TokenExpiredError(AuthenticationError):
    """Token has expired."""

    def __init__(self) -> None:
        super().__init__(message="Token has expired", code="TOKEN_EXPIRED")


class InvalidTokenError(AuthenticationError):
    """Token is invalid."""

    def __init__(self) -> None:
        super().__init__(message="Invalid token", code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""

    def __init__(self) -> None:
        super().__init__(message="Invalid credentials", code="INVALID_CREDENTIALS")


# --- Authorization (403) ---


class AuthorizationError(AppException):
    """The caller may not act on behalf of this user or resource."""

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


# --- Validation (400) ---


class UserAlreadyExistsError(AppException):
    """User with this email already exists."""

    def __init__(self) -> None:
        super().__init__(
            message="User already exists",
            code="USER_ALREADY_EXISTS",
            status_code=400,
        )


# --- Not Found (404) ---


class ChatNotFoundError(AppException):
    """Chat not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Chat not found",
            code="CHAT_NOT_FOUND",
            status_code=404,
        )


# --- Conflict (409) ---


class ChatBusyError(AppException):
    """A reply is already being generated for this conversation."""

    def __init__(self) -> None:
        super().__init__(
            message="A response is already in progress",
            code="CHAT_BUSY",
            status_code=409,
        )


# --- Rate Limit (429) ---


class AccountLockedError(AppException):
    """Too many failed login attempts."""

    def __init__(self) -> None:
        super().__init__(
            message="Too many failed login attempts. Please try again later.",
            code="ACCOUNT_LOCKED",
            status_code=429,
        )


# --- Completion provider ---

PROVIDER_ERRORS: dict[int, tuple[str, str]] = {
    401: ("INVALID_API_KEY", "Invalid API key. Please check your API key."),
    429: ("RATE_LIMITED", "Rate limit exceeded. Please try again later."),
    400: ("BAD_REQUEST", "Invalid request. Please check your request parameters."),
}
GENERIC_PROVIDER_ERROR = "An error occurred while processing your request"


class ProviderError(AppException):
    """The completion provider answered with a non-success status."""

    def __init__(self, status_code: int | None = None, detail: str = "") -> None:
        code, message = PROVIDER_ERRORS.get(
            status_code or 0, ("PROVIDER_ERROR", GENERIC_PROVIDER_ERROR)
        )
        self.provider_status = status_code
        self.detail = detail
        super().__init__(
            message=message,
            code=code,
            status_code=status_code or 500,
        )


# --- Persistence (503) ---


class PersistenceError(AppException):
    """The persistence backend could not be reached or refused the write."""

    def __init__(self, message: str = "Persistence backend unavailable") -> None:
        super().__init__(message=message, code="PERSISTENCE_ERROR", status_code=503)


# --- Cancellation (not an error) ---


class RequestCancelled(Exception):
    """The user stopped the request before it settled."""


# --- Exception Handlers ---


def error_body(status: int, message: str, code: str) -> dict:
    """Build the JSON body shared by every error response."""
    return {"status": status, "message": message, "code": code}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures in the common error shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(
        status_code=422,
        content=error_body(422, message, "VALIDATION_ERROR"),
    )
