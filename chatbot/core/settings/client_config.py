"""Chat client configuration."""

from pathlib import Path

from pydantic import BaseModel


class ClientConfig(BaseModel, frozen=True):
    """Settings for the chat client (console or embedding UI)."""

    backend_url: str
    state_path: Path
    emission_delay: float
    share_base_url: str
