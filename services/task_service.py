"""
Data service for sectors, tasks, task history and profiles.

Every operation takes the acting identity first, checks the policy rules, and
runs as a single transaction. Failures roll the session back and surface as a
StoreError subclass; nothing is reported as success unless it committed.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import joinedload
from sqlalchemy.orm.attributes import flag_modified

from models import db, Sector, Task, TaskHistory, Profile, TaskType, TaskUrgency, TaskStatus
from services.errors import (
    StoreError,
    ValidationFailed,
    NotFound,
    IntegrityViolation,
    StoreUnavailable,
)
from services.policy import Action, authorize

logger = logging.getLogger(__name__)


@contextmanager
def _write_unit(description: str):
    """Commit on success; roll back and translate database errors otherwise."""
    try:
        yield
        db.session.commit()
    except StoreError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"{description} refused by constraint: {e.orig}")
        raise IntegrityViolation(detail=str(e.orig)) from e
    except OperationalError as e:
        db.session.rollback()
        logger.error(f"{description} failed, store unavailable: {e}")
        raise StoreUnavailable() from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"{description} failed: {e}")
        raise StoreError(detail=str(e)) from e


def _read(statement, description: str):
    try:
        return db.session.execute(statement)
    except OperationalError as e:
        db.session.rollback()
        logger.error(f"{description} failed, store unavailable: {e}")
        raise StoreUnavailable() from e


# ---- input coercion ----

def _as_uuid(value, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if value is None or value == "":
        raise ValidationFailed(f"{field} is required")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationFailed(f"{field} is not a valid identifier")


def _as_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationFailed(f"{field} must be one of: {allowed}")


def parse_deadline(value) -> datetime:
    """Accept a datetime or ISO-8601 string; aware values are normalised to naive UTC."""
    if value is None or value == "":
        raise ValidationFailed("deadline is required")
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationFailed("deadline must be an ISO-8601 date/time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _required_text(value, field: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationFailed(f"{field} must be text")
    text = (value or "").strip()
    if not text:
        raise ValidationFailed(f"{field} is required")
    return text


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ---- sectors ----

def list_sectors(uid) -> List[Sector]:
    authorize(uid, "sectors", Action.SELECT)
    stmt = select(Sector).order_by(Sector.name)
    return list(_read(stmt, "list sectors").scalars().all())


def get_sector(uid, sector_id) -> Sector:
    authorize(uid, "sectors", Action.SELECT)
    sector = db.session.get(Sector, _as_uuid(sector_id, "sector_id"))
    if sector is None:
        raise NotFound("Sector not found")
    return sector


def count_sector_tasks(uid, sector_id) -> int:
    """Number of tasks referencing the sector, shown before a delete is confirmed."""
    sector = get_sector(uid, sector_id)
    authorize(uid, "tasks", Action.SELECT)
    stmt = select(func.count(Task.id)).where(Task.sector_id == sector.id)
    return int(_read(stmt, "count sector tasks").scalar_one())


def create_sector(uid, name) -> Sector:
    authorize(uid, "sectors", Action.INSERT)
    with _write_unit("create sector"):
        sector = Sector(name=_required_text(name, "name"))
        db.session.add(sector)
    logger.info(f"Sector created: {sector.name} ({sector.id})")
    return sector


def update_sector(uid, sector_id, name) -> Sector:
    authorize(uid, "sectors", Action.UPDATE)
    with _write_unit("update sector"):
        sector = db.session.get(Sector, _as_uuid(sector_id, "sector_id"))
        if sector is None:
            raise NotFound("Sector not found")
        sector.name = _required_text(name, "name")
    return sector


def delete_sector(uid, sector_id) -> None:
    """Delete a sector; the restrict foreign key refuses it while tasks reference it."""
    authorize(uid, "sectors", Action.DELETE)
    with _write_unit("delete sector"):
        sector = db.session.get(Sector, _as_uuid(sector_id, "sector_id"))
        if sector is None:
            raise NotFound("Sector not found")
        db.session.delete(sector)
        db.session.flush()
    logger.info(f"Sector deleted: {sector_id}")


# ---- tasks ----

def list_tasks(uid, sector_id=None, status=None) -> List[Task]:
    authorize(uid, "tasks", Action.SELECT)
    stmt = select(Task).options(joinedload(Task.sector)).order_by(Task.deadline)
    if sector_id:
        stmt = stmt.where(Task.sector_id == _as_uuid(sector_id, "sector_id"))
    if status:
        stmt = stmt.where(Task.status == _as_enum(TaskStatus, status, "status"))
    return list(_read(stmt, "list tasks").scalars().all())


def get_task(uid, task_id) -> Task:
    authorize(uid, "tasks", Action.SELECT)
    stmt = select(Task).options(joinedload(Task.sector)).where(Task.id == _as_uuid(task_id, "task_id"))
    task = _read(stmt, "get task").scalar_one_or_none()
    if task is None:
        raise NotFound("Task not found")
    return task


def create_task(uid, title, type, sector_id, deadline, description=None,
                urgency=TaskUrgency.NOT_URGENT) -> Task:
    """Create a pending task with no observation."""
    authorize(uid, "tasks", Action.INSERT)
    task = Task(
        title=_required_text(title, "title"),
        description=_optional_text(description),
        type=_as_enum(TaskType, type, "type"),
        sector_id=_as_uuid(sector_id, "sector_id"),
        deadline=parse_deadline(deadline),
        urgency=_as_enum(TaskUrgency, urgency or TaskUrgency.NOT_URGENT, "urgency"),
        status=TaskStatus.PENDING,
        ceo_observation=None,
    )
    with _write_unit("create task"):
        if db.session.get(Sector, task.sector_id) is None:
            raise ValidationFailed("sector_id does not reference an existing sector")
        db.session.add(task)
    logger.info(f"Task created: {task.title} ({task.id})")
    return task


def update_task_status(uid, task_id, status, observation=None) -> Task:
    """Set status and CEO observation; the audit hook records the transition."""
    authorize(uid, "tasks", Action.UPDATE)
    new_status = _as_enum(TaskStatus, status, "status")
    with _write_unit("update task status"):
        task = db.session.get(Task, _as_uuid(task_id, "task_id"))
        if task is None:
            raise NotFound("Task not found")
        task.status = new_status
        task.ceo_observation = _optional_text(observation)
        # Mark dirty even when nothing changed: every update advances updated_at.
        flag_modified(task, "ceo_observation")
    return task


def delete_task(uid, task_id) -> None:
    authorize(uid, "tasks", Action.DELETE)
    with _write_unit("delete task"):
        task = db.session.get(Task, _as_uuid(task_id, "task_id"))
        if task is None:
            raise NotFound("Task not found")
        db.session.delete(task)
    logger.info(f"Task deleted: {task_id}")


def list_task_history(uid, task_id) -> List[TaskHistory]:
    authorize(uid, "task_history", Action.SELECT)
    stmt = (
        select(TaskHistory)
        .where(TaskHistory.task_id == _as_uuid(task_id, "task_id"))
        .order_by(TaskHistory.updated_at)
    )
    return list(_read(stmt, "list task history").scalars().all())


# ---- profiles ----

def fetch_profile(uid, profile_id) -> Profile:
    profile_id = _as_uuid(profile_id, "profile_id")
    authorize(uid, "profiles", Action.SELECT, row_id=profile_id)
    profile = db.session.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def update_profile(uid, profile_id, full_name) -> Profile:
    """Only the display name is editable; the role stays as provisioned."""
    profile_id = _as_uuid(profile_id, "profile_id")
    authorize(uid, "profiles", Action.UPDATE, row_id=profile_id)
    with _write_unit("update profile"):
        profile = db.session.get(Profile, profile_id)
        if profile is None:
            raise NotFound("Profile not found")
        profile.full_name = _optional_text(full_name) or ""
    return profile
