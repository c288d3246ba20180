"""
User repositories.

Data access layer for User and AuthSession models.
"""

from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from volt.shared.repository import BaseRepository
from .models import User, AuthSession


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email (case-insensitive).

        Args:
            email: Login email

        Returns:
            User if found, None otherwise
        """
        return await self.get_by(email=email.strip().lower())

    async def exists(self, email: str, username: str) -> bool:
        """Check whether the email or the username is already taken."""
        result = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.username == username))
        )
        return result.first() is not None


class AuthSessionRepository(BaseRepository[AuthSession]):
    """Repository for bearer token sessions."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AuthSession)

    async def get_by_token_hash(self, token_hash: str) -> AuthSession | None:
        return await self.get_by(token_hash=token_hash)

    async def revoke(self, session: AuthSession) -> AuthSession:
        return await self.update(session, revoked=True)

    async def purge_expired(self, now: datetime) -> int:
        """Delete expired sessions. Returns number removed."""
        result = await self.db.execute(
            select(AuthSession).where(AuthSession.expires_at <= now)
        )
        expired = list(result.scalars().all())
        for session in expired:
            await self.db.delete(session)
        await self.db.flush()
        return len(expired)
