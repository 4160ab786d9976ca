"""
Profile Model
Authorization record attached 1:1 to an identity-store account.
"""

import uuid
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, ForeignKey

from .base import Base, utcnow
from .enums import UserRole, user_role_enum

if TYPE_CHECKING:
    from .user import User


class Profile(Base):
    """
    The sole source of truth for role checks.
    Rows are created by the provisioning hook when an account registers; the role
    decided there is never revisited.
    """
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[UserRole] = mapped_column(user_role_enum, nullable=False, default=UserRole.COLLABORATOR)
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    user: Mapped["User"] = relationship(back_populates="profile")

    def __repr__(self):
        return f'<Profile {self.id} ({self.role.value})>'

    @property
    def is_ceo(self) -> bool:
        return self.role == UserRole.CEO

    def to_dict(self):
        return {
            'id': str(self.id),
            'role': self.role.value,
            'full_name': self.full_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
