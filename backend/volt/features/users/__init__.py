"""
Users and authentication module.

Usage:
    from volt.features.users import User, AuthService

Components:
- User, AuthSession: SQLAlchemy models
- AuthService: signup / login / token resolution / logout
- UserRepository, AuthSessionRepository: data access
"""

from .models import User, AuthSession
from .repository import UserRepository, AuthSessionRepository
from .schemas import LoginRequest, SignupRequest, UserResponse, AuthResponse
from .service import AuthService, AuthError, DuplicateUserError, IssuedToken

__all__ = [
    # Models
    "User",
    "AuthSession",
    # Repositories
    "UserRepository",
    "AuthSessionRepository",
    # Schemas
    "LoginRequest",
    "SignupRequest",
    "UserResponse",
    "AuthResponse",
    # Service
    "AuthService",
    "AuthError",
    "DuplicateUserError",
    "IssuedToken",
]
