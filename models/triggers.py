"""
Write-path hooks.

These run inside the ORM flush, on the same connection and transaction as the
write they observe, so the stamped timestamp and the audit row commit (or roll
back) together with the change that caused them.
"""

import logging
import sqlite3

from flask import current_app, has_app_context
from sqlalchemy import event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm.base import NO_VALUE

from services.errors import ImmutableRecordError

from .base import utcnow
from .enums import TaskStatus, UserRole
from .profile import Profile
from .task import Task, TaskHistory
from .user import User

logger = logging.getLogger(__name__)

DEFAULT_CEO_EMAIL = "ceo@company.com"


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE RESTRICT/CASCADE unless asked to enforce them."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Task, "before_update")
def stamp_task_updated_at(mapper, connection, target):
    """Advance updated_at on every task update, never moving it backwards."""
    now = utcnow()
    previous = inspect(target).attrs.updated_at.loaded_value
    if previous is not NO_VALUE and previous is not None and previous > now:
        now = previous
    target.updated_at = now


@event.listens_for(Task, "after_update")
def log_task_status_change(mapper, connection, target):
    """Append one history row when the status value changed."""
    history = inspect(target).attrs.status.history
    if not history.has_changes():
        return

    old_status = next((TaskStatus(s) for s in history.deleted if s is not None), None)
    new_status = TaskStatus(target.status)
    if old_status == new_status:
        return

    connection.execute(
        TaskHistory.__table__.insert().values(
            task_id=target.id,
            old_status=old_status,
            new_status=new_status,
            observation=target.ceo_observation,
            updated_at=utcnow(),
        )
    )
    logger.info(
        f"Task {target.id} status {old_status.value if old_status else None} -> {new_status.value}"
    )


def reserved_ceo_email() -> str:
    if has_app_context():
        return (current_app.config.get("CEO_EMAIL") or DEFAULT_CEO_EMAIL).strip().lower()
    return DEFAULT_CEO_EMAIL


@event.listens_for(User, "after_insert")
def provision_profile(mapper, connection, target):
    """Create the account's profile; the role is fixed here, once."""
    role = UserRole.CEO if target.email == reserved_ceo_email() else UserRole.COLLABORATOR
    connection.execute(
        Profile.__table__.insert().values(
            id=target.id,
            full_name=target.full_name,
            role=role,
            created_at=utcnow(),
        )
    )
    logger.info(f"Provisioned {role.value} profile for account {target.id}")


@event.listens_for(TaskHistory, "before_update")
def _refuse_history_update(mapper, connection, target):
    raise ImmutableRecordError("Task history records cannot be modified")


@event.listens_for(TaskHistory, "before_delete")
def _refuse_history_delete(mapper, connection, target):
    raise ImmutableRecordError("Task history records cannot be deleted")
