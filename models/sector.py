"""
Sector Model - organizational departments that own tasks.
"""

import uuid
from typing import TYPE_CHECKING
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, Uuid

from .base import Base, utcnow

if TYPE_CHECKING:
    from .task import Task


DEFAULT_SECTOR_NAMES = ("Coordination", "HR")


class Sector(Base):
    __tablename__ = "sectors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    # The ORM never touches child rows on delete; tasks.sector_id is ON DELETE RESTRICT
    # and the database refuses to drop a sector that still has tasks.
    tasks: Mapped[list["Task"]] = relationship(back_populates="sector", passive_deletes="all")

    def __repr__(self):
        return f'<Sector {self.name}>'

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
