from .base import Base, db, utcnow
from .enums import TaskType, TaskUrgency, TaskStatus, UserRole
from .user import User, AuthSession
from .profile import Profile
from .sector import Sector, DEFAULT_SECTOR_NAMES
from .task import Task, TaskHistory

# Registers the write-path hooks on the mapped classes above.
from . import triggers  # noqa: E402,F401

__all__ = [
    "Base",
    "db",
    "utcnow",
    "TaskType",
    "TaskUrgency",
    "TaskStatus",
    "UserRole",
    "User",
    "AuthSession",
    "Profile",
    "Sector",
    "DEFAULT_SECTOR_NAMES",
    "Task",
    "TaskHistory",
]
