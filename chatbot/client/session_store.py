"""Durable client session: signed-in user, guest flag and active chat."""

from pathlib import Path

import structlog
from pydantic import ConfigDict, ValidationError

from chatbot.client.models import UserIdentity
from chatbot.schemas.base_schema import CamelModel

logger = structlog.get_logger()


class SessionState(CamelModel):
    """Serialised as ``{"user": ..., "guestMode": ..., "currentChatId": ...}``."""

    model_config = ConfigDict(frozen=True)

    user: UserIdentity | None = None
    guest_mode: bool = False
    current_chat_id: str | None = None


class SessionStore:
    """Holds at most one user identity; survives restarts when given a path.

    Lifecycle: ``load()`` on start-up, setters save immediately, ``clear()``
    on logout.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> UserIdentity | None:
        return self._state.user

    @property
    def guest_mode(self) -> bool:
        return self._state.guest_mode

    @property
    def active_chat_id(self) -> str | None:
        return self._state.current_chat_id

    @property
    def is_persisting(self) -> bool:
        """True when messages should be written to the backend."""
        return self._state.user is not None and not self._state.guest_mode

    def load(self) -> SessionState:
        """Read the stored state; unreadable files start a fresh session."""
        if self._path is None or not self._path.exists():
            self._state = SessionState()
            return self._state
        try:
            self._state = SessionState.model_validate_json(self._path.read_text())
        except (OSError, ValidationError):
            logger.warning("Discarding unreadable session state", path=str(self._path))
            self._state = SessionState()
        return self._state

    def save(self) -> None:
        """Write the current state to disk (no-op for in-memory stores)."""
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._state.model_dump_json(by_alias=True))

    def clear(self) -> None:
        """Forget the user, guest flag and active chat unconditionally."""
        self._state = SessionState()
        if self._path is not None and self._path.exists():
            self._path.unlink()
        logger.info("Session cleared")

    def sign_in(self, user: UserIdentity) -> None:
        self._update(user=user, guest_mode=False, current_chat_id=None)

    def enter_guest_mode(self) -> None:
        self._update(user=None, guest_mode=True, current_chat_id=None)

    def set_active_chat(self, chat_id: str | None) -> None:
        self._update(current_chat_id=chat_id)

    def _update(self, **changes: object) -> None:
        self._state = self._state.model_copy(update=changes)
        self.save()
