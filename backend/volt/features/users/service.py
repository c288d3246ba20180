"""
Auth service.

Signup, login, token resolution and logout. Routes pass the session in;
nothing here holds credentials between requests.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from volt.config import settings
from .models import User, AuthSession
from .repository import UserRepository, AuthSessionRepository
from .security import generate_token, hash_password, hash_token, verify_password

logger = logging.getLogger(__name__)


class AuthError(ValueError):
    """Credentials rejected."""


class DuplicateUserError(ValueError):
    """Email or username already registered."""


@dataclass
class IssuedToken:
    user: User
    token: str
    expires_at: datetime


class AuthService:
    """Account and bearer token operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.sessions = AuthSessionRepository(db)

    async def signup(self, email: str, username: str, password: str) -> IssuedToken:
        """
        Register a user and log them in.

        Raises:
            DuplicateUserError: If email or username is taken
        """
        if await self.users.exists(email, username):
            raise DuplicateUserError("Email or username already exists")

        user = await self.users.create(
            email=email,
            username=username,
            password_hash=hash_password(password),
        )
        issued = await self._issue(user)
        await self.db.commit()
        logger.info(f"User signed up: {user.id}")
        return issued

    async def login(self, email: str, password: str) -> IssuedToken:
        """
        Verify credentials and issue a token.

        Raises:
            AuthError: On unknown email or wrong password (same message)
        """
        user = await self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password")

        await self.sessions.purge_expired(datetime.utcnow())
        issued = await self._issue(user)
        await self.db.commit()
        logger.info(f"User logged in: {user.id}")
        return issued

    async def resolve(self, token: str) -> User | None:
        """Return the user behind an active token, None otherwise."""
        session = await self.sessions.get_by_token_hash(hash_token(token))
        if not session or not session.is_active(datetime.utcnow()):
            return None
        return session.user

    async def logout(self, token: str) -> None:
        """Revoke a token. Unknown tokens are ignored."""
        session = await self.sessions.get_by_token_hash(hash_token(token))
        if session and not session.revoked:
            await self.sessions.revoke(session)
            await self.db.commit()
            logger.info(f"User logged out: {session.user_id}")

    async def _issue(self, user: User) -> IssuedToken:
        token = generate_token()
        expires_at = datetime.utcnow() + timedelta(hours=settings.session_ttl_hours)
        await self.sessions.create(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=expires_at,
        )
        return IssuedToken(user=user, token=token, expires_at=expires_at)
