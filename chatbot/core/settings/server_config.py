"""Server configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Server settings."""

    host: str
    port: int
    cors_origins: str

    @property
    def cors_origins_list(self) -> list[str]:
        """Allowed CORS origins as a list ("*" allows all)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
