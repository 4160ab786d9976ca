"""
Declarative base and Flask-SQLAlchemy handle shared by every model.
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase


class _DeclarativeBase(DeclarativeBase):
    pass


db = SQLAlchemy(model_class=_DeclarativeBase)

# Models inherit from db.Model so they pick up Flask-SQLAlchemy's query property.
Base = db.Model


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
