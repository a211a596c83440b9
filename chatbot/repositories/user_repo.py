"""User repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot.models.user import User


class UserRepository:
    """Encapsulates user-related database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: str) -> User | None:
        """Find a user by email address."""
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> User | None:
        """Find a user by identifier."""
        return await self._session.get(User, user_id)

    async def create(self, email: str, hashed_password: str, username: str) -> User:
        """Create a new user record."""
        user = User(email=email, hashed_password=hashed_password, username=username)
        self._session.add(user)
        await self._session.flush()
        return user

    async def exists_by_email(self, email: str) -> bool:
        """Check if a user with this email exists."""
        result = await self._session.execute(select(User.id).where(User.email == email))
        return result.scalar_one_or_none() is not None
