"""
Identity Store Models
Accounts and access-token sessions. Authorization data lives on Profile, not here.
"""

import uuid
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from flask_login import UserMixin
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, ForeignKey, JSON, Uuid
from werkzeug.security import generate_password_hash, check_password_hash

from .base import Base, utcnow

if TYPE_CHECKING:
    from .profile import Profile


class User(UserMixin, Base):
    """
    Identity-store account.
    Creating one provisions its Profile (see models.triggers).
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)

    # Registration metadata, e.g. {"full_name": "..."}
    user_metadata: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    last_sign_in_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    profile: Mapped[Optional["Profile"]] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    sessions: Mapped[list["AuthSession"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f'<User {self.email}>'

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self) -> str:
        return (self.user_metadata or {}).get("full_name") or ""

    def to_dict(self):
        return {
            'id': str(self.id),
            'email': self.email,
            'user_metadata': dict(self.user_metadata or {}),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_sign_in_at': self.last_sign_in_at.isoformat() if self.last_sign_in_at else None,
        }


class AuthSession(Base):
    """Opaque access token issued at sign-in."""
    __tablename__ = "auth_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    access_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped["User"] = relationship(back_populates="sessions")

    def __repr__(self):
        return f'<AuthSession user_id={self.user_id} expires_at={self.expires_at}>'

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= utcnow()
