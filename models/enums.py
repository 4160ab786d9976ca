"""
Enumerations persisted as named database enum types.
"""

import enum

from sqlalchemy import Enum as SAEnum


class TaskType(str, enum.Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    TEMPORARY = "temporary"


class TaskUrgency(str, enum.Enum):
    NOT_URGENT = "not_urgent"
    RELATIVELY_URGENT = "relatively_urgent"
    URGENT = "urgent"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    NOT_DELIVERED = "not_delivered"


class UserRole(str, enum.Enum):
    CEO = "ceo"
    COLLABORATOR = "collaborator"


def _values(enum_cls):
    return [member.value for member in enum_cls]


# Shared column types: one named type per enum, reused by every column that stores it.
task_type_enum = SAEnum(TaskType, name="task_type", values_callable=_values)
task_urgency_enum = SAEnum(TaskUrgency, name="task_urgency", values_callable=_values)
task_status_enum = SAEnum(TaskStatus, name="task_status", values_callable=_values)
user_role_enum = SAEnum(UserRole, name="user_role", values_callable=_values)
