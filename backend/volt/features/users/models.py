"""
User-related models.

Models:
- User: Application user with email/password auth
- AuthSession: Issued bearer token (stored hashed) with expiry
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from volt.db.base import Base


class User(Base):
    """
    Application user.

    Owns tracks and synthesis jobs.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(30), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sessions = relationship(
        "AuthSession",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.id} ({self.username})>"


class AuthSession(Base):
    """
    Bearer token issued at login/signup.

    Only the SHA-256 of the token is stored; the token itself is returned
    to the client once.
    """

    __tablename__ = "auth_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, index=True, nullable=False)

    expires_at = Column(DateTime, nullable=False)
    revoked = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="sessions", lazy="joined")

    def __repr__(self):
        return f"<AuthSession {self.id} user={self.user_id} revoked={self.revoked}>"

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now
