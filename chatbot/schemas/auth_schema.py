"""Authentication request/response schemas."""

from pydantic import ConfigDict, EmailStr, Field, field_validator

from chatbot.models.user import User
from chatbot.schemas.base_schema import CamelModel


class RegisterRequest(CamelModel):
    """User registration request."""

    username: str = Field(min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=1, max_length=128, description="Password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v


class LoginRequest(CamelModel):
    """User login request."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=1, description="User password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class UserResponse(CamelModel):
    """Public user representation."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(user_id=user.id, username=user.username, email=user.email)


class LoginResponse(UserResponse):
    """Login response: the user identity plus a bearer access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token TTL in seconds")


class MessageResponse(CamelModel):
    """Simple message response."""

    model_config = ConfigDict(frozen=True)

    message: str


class TokenPayload(CamelModel):
    """Decoded JWT payload."""

    model_config = ConfigDict(frozen=True)

    sub: str
    email: str
    type: str
    jti: str
    exp: int
