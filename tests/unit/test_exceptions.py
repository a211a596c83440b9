"""Tests for custom exception classes."""

from chatbot.core.exceptions import (
    AccountLockedError,
    AppException,
    AuthenticationError,
    AuthorizationError,
    ChatBusyError,
    ChatNotFoundError,
    InvalidCredentialsError,
    InvalidTokenError,
    PersistenceError,
    ProviderError,
    RequestCancelled,
    TokenExpiredError,
    UserAlreadyExistsError,
)


class TestExceptions:
    """Verify exception status codes and messages."""

    def test_app_exception_defaults(self) -> None:
        exc = AppException(message="err", code="ERR")
        assert exc.status_code == 400
        assert exc.code == "ERR"

    def test_authentication_error(self) -> None:
        exc = AuthenticationError()
        assert exc.status_code == 401

    def test_token_expired_error(self) -> None:
        exc = TokenExpiredError()
        assert exc.status_code == 401
        assert exc.code == "TOKEN_EXPIRED"

    def test_invalid_token_error(self) -> None:
        assert InvalidTokenError().status_code == 401

    def test_invalid_credentials_error(self) -> None:
        exc = InvalidCredentialsError()
        assert exc.status_code == 401
        assert isinstance(exc, AuthenticationError)

    def test_authorization_error(self) -> None:
        assert AuthorizationError().status_code == 403

    def test_user_already_exists_error(self) -> None:
        exc = UserAlreadyExistsError()
        assert exc.status_code == 400
        assert exc.code == "USER_ALREADY_EXISTS"

    def test_chat_not_found_error(self) -> None:
        exc = ChatNotFoundError()
        assert exc.status_code == 404
        assert exc.code == "CHAT_NOT_FOUND"

    def test_chat_busy_error(self) -> None:
        assert ChatBusyError().status_code == 409

    def test_account_locked_error(self) -> None:
        assert AccountLockedError().status_code == 429

    def test_persistence_error(self) -> None:
        exc = PersistenceError()
        assert exc.status_code == 503
        assert exc.code == "PERSISTENCE_ERROR"

    def test_request_cancelled_is_not_app_exception(self) -> None:
        assert not issubclass(RequestCancelled, AppException)


class TestProviderError:
    """Provider failures are categorised by HTTP status."""

    def test_invalid_api_key(self) -> None:
        exc = ProviderError(status_code=401)
        assert exc.status_code == 401
        assert exc.message == "Invalid API key. Please check your API key."

    def test_rate_limited(self) -> None:
        exc = ProviderError(status_code=429)
        assert exc.message == "Rate limit exceeded. Please try again later."

    def test_bad_request(self) -> None:
        exc = ProviderError(status_code=400)
        assert exc.message == "Invalid request. Please check your request parameters."

    def test_other_status_is_generic(self) -> None:
        exc = ProviderError(status_code=502, detail="upstream down")
        assert exc.status_code == 502
        assert exc.code == "PROVIDER_ERROR"
        assert exc.message == "An error occurred while processing your request"
        assert exc.detail == "upstream down"

    def test_no_status(self) -> None:
        exc = ProviderError()
        assert exc.provider_status is None
        assert exc.status_code == 500
