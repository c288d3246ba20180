"""
Shared route dependencies.

Credentials are resolved per request from the Authorization header.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from volt.db.session import get_async_db
from volt.features.users import AuthService, User
from volt.shared.errors import unauthorized


async def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the token from `Authorization: Bearer <token>`."""
    if not authorization:
        raise unauthorized()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise unauthorized("Invalid authorization header")
    return token.strip()


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    """Authenticated user, or 401."""
    user = await AuthService(db).resolve(token)
    if not user:
        raise unauthorized("Invalid or expired token")
    return user
