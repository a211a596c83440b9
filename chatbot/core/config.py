"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatbot.core.settings import (
    AppConfig,
    AuthConfig,
    ClientConfig,
    DatabaseConfig,
    LLMConfig,
    RedisConfig,
    ServerConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.provider).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI-compatible (OpenAI, Groq, ...)
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key for the OpenAI-compatible provider",
    )
    openai_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Model name for the OpenAI-compatible provider",
    )
    openai_base_url: str | None = Field(
        default="https://api.groq.com/openai/v1",
        description="Base URL of the OpenAI-compatible endpoint",
    )

    # Anthropic
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Anthropic model name",
    )

    # Completion parameters
    max_tokens: int = Field(
        default=1000,
        ge=1,
        le=32000,
        description="Maximum tokens per completion",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )

    # App
    app_name: str = Field(
        default="chatbot",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Server port",
    )
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # JWT Auth
    jwt_secret_key: SecretStr = Field(
        description="JWT secret key for token signing",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    jwt_access_token_expire_minutes: int = Field(
        default=60 * 24,
        ge=1,
        le=60 * 24 * 30,
        description="Access token expiration in minutes",
    )
    login_rate_limit: str = Field(
        default="5/minute",
        description="Login endpoint rate limit",
    )
    register_rate_limit: str = Field(
        default="3/minute",
        description="Register endpoint rate limit",
    )
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable slowapi rate limiting on auth endpoints",
    )

    # Database
    database_url: SecretStr = Field(
        default=SecretStr("sqlite+aiosqlite:///./chatbot.db"),
        description="Async database URL (sqlite+aiosqlite://..., mysql+aiomysql://...)",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_key_prefix: str = Field(
        default="chatbot",
        description="Prefix for all Redis keys",
    )

    # Client
    backend_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the persistence backend used by the client",
    )
    client_state_path: Path = Field(
        default=Path("~/.chatbot/state.json"),
        description="File holding the client's durable session state",
    )
    emission_delay: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Seconds between revealed characters (0 = as fast as possible)",
    )
    share_base_url: str = Field(
        default="http://localhost:5173/",
        description="Base URL used when building shareable conversation links",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        return LLMConfig(
            provider=self.llm_provider,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            openai_base_url=self.openai_base_url,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version=self.app_version,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_origins=self.cors_origins,
        )

    @cached_property
    def auth(self) -> AuthConfig:
        """JWT authentication configuration."""
        return AuthConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            access_token_expire_minutes=self.jwt_access_token_expire_minutes,
            login_rate_limit=self.login_rate_limit,
            register_rate_limit=self.register_rate_limit,
            rate_limit_enabled=self.rate_limit_enabled,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(url=self.redis_url, key_prefix=self.redis_key_prefix)

    @cached_property
    def client(self) -> ClientConfig:
        """Chat client configuration."""
        return ClientConfig(
            backend_url=self.backend_url,
            state_path=self.client_state_path.expanduser(),
            emission_delay=self.emission_delay,
            share_base_url=self.share_base_url,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
