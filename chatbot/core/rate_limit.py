"""Shared slowapi limiter for the auth endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from chatbot.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.auth.rate_limit_enabled,
)
