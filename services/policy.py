"""
Row-level authorization rules.

Every rule is evaluated against the acting identity (the account id, or None when
anonymous) and reads the caller's Profile for role checks. Actions without a rule
are denied.
"""

import enum
import logging
import uuid
from typing import Callable, Dict, Optional

from models import db, Profile, UserRole
from services.errors import PermissionDenied

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


Rule = Callable[[Optional[uuid.UUID], Optional[uuid.UUID]], bool]


def anyone(uid, row_id):
    return True


def ceo_only(uid, row_id):
    if uid is None:
        return False
    profile = db.session.get(Profile, uid)
    return profile is not None and profile.role == UserRole.CEO


def own_row(uid, row_id):
    return uid is not None and row_id is not None and uid == row_id


POLICIES: Dict[str, Dict[Action, Rule]] = {
    "sectors": {
        Action.SELECT: anyone,
        Action.INSERT: ceo_only,
        Action.UPDATE: ceo_only,
        Action.DELETE: ceo_only,
    },
    "tasks": {
        Action.SELECT: anyone,
        Action.INSERT: ceo_only,
        Action.UPDATE: ceo_only,
        Action.DELETE: ceo_only,
    },
    # No UPDATE/DELETE rule: the ledger is append-only.
    "task_history": {
        Action.SELECT: anyone,
        Action.INSERT: ceo_only,
    },
    "profiles": {
        Action.SELECT: own_row,
        Action.INSERT: own_row,
        Action.UPDATE: own_row,
    },
}


def is_permitted(uid: Optional[uuid.UUID], table: str, action: Action,
                 row_id: Optional[uuid.UUID] = None) -> bool:
    rule = POLICIES.get(table, {}).get(Action(action))
    if rule is None:
        return False
    return rule(uid, row_id)


def authorize(uid: Optional[uuid.UUID], table: str, action: Action,
              row_id: Optional[uuid.UUID] = None) -> None:
    """Raise PermissionDenied unless a rule grants the action."""
    if not is_permitted(uid, table, action, row_id):
        action = Action(action)
        logger.warning(f"Policy denied {action.value} on {table} for uid={uid} row={row_id}")
        raise PermissionDenied(
            f"Not allowed to {action.value} {table}",
            detail={'table': table, 'action': action.value},
        )
