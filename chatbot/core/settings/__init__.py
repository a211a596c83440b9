"""Domain-specific configuration models."""

from chatbot.core.settings.app_config import AppConfig
from chatbot.core.settings.auth_config import AuthConfig
from chatbot.core.settings.client_config import ClientConfig
from chatbot.core.settings.database_config import DatabaseConfig
from chatbot.core.settings.llm_config import LLMConfig
from chatbot.core.settings.redis_config import RedisConfig
from chatbot.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "ClientConfig",
    "DatabaseConfig",
    "LLMConfig",
    "RedisConfig",
    "ServerConfig",
]
