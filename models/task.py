"""
Task Model for Sector Task Tracking
Tasks are created and closed by the CEO; every status transition is recorded in TaskHistory.
"""

import uuid
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, DateTime, Text, ForeignKey, Index, Uuid

from .base import Base, utcnow
from .enums import (
    TaskType,
    TaskUrgency,
    TaskStatus,
    task_type_enum,
    task_urgency_enum,
    task_status_enum,
)

if TYPE_CHECKING:
    from .sector import Sector


class Task(Base):
    """
    A unit of work owned by a sector.

    updated_at is maintained by the write-path hook in models.triggers; callers never set it.
    """
    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Task content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Classification
    type: Mapped[TaskType] = mapped_column(task_type_enum, nullable=False)
    urgency: Mapped[TaskUrgency] = mapped_column(task_urgency_enum, nullable=False, default=TaskUrgency.NOT_URGENT)

    # Lifecycle; active_history keeps the pre-write value available to the audit hook
    status: Mapped[TaskStatus] = mapped_column(
        task_status_enum, nullable=False, default=TaskStatus.PENDING, active_history=True
    )
    ceo_observation: Mapped[Optional[str]] = mapped_column(Text)

    sector_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sectors.id", ondelete="RESTRICT"), nullable=False
    )
    sector: Mapped["Sector"] = relationship(back_populates="tasks")

    deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_tasks_sector_deadline', 'sector_id', 'deadline'),
        Index('ix_tasks_status', 'status'),
    )

    def __repr__(self):
        return f'<Task {self.id}: {self.title}>'

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Pending tasks whose deadline has passed."""
        if self.status != TaskStatus.PENDING:
            return False
        return self.deadline < (now or utcnow())

    def to_dict(self, include_sector=False):
        data = {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'type': self.type.value,
            'sector_id': str(self.sector_id),
            'deadline': self.deadline.isoformat() if self.deadline else None,
            'urgency': self.urgency.value,
            'status': self.status.value,
            'ceo_observation': self.ceo_observation,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_sector:
            data['sector'] = self.sector.to_dict() if self.sector else None
        return data


class TaskHistory(Base):
    """
    Append-only record of one status transition.
    Written only by the audit hook; removed only by the task's ON DELETE CASCADE.
    """
    __tablename__ = "task_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_status: Mapped[Optional[TaskStatus]] = mapped_column(task_status_enum, nullable=True)
    new_status: Mapped[TaskStatus] = mapped_column(task_status_enum, nullable=False)
    observation: Mapped[Optional[str]] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        old = self.old_status.value if self.old_status else None
        return f'<TaskHistory task_id={self.task_id} {old} -> {self.new_status.value}>'

    def to_dict(self):
        return {
            'id': str(self.id),
            'task_id': str(self.task_id),
            'old_status': self.old_status.value if self.old_status else None,
            'new_status': self.new_status.value,
            'observation': self.observation,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
