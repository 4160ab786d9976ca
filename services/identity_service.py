"""
Identity Store Service
Accounts, password checks and access-token sessions.

Registering an account provisions its Profile through the write-path hook in
models.triggers; this service never touches profiles directly.
"""

import logging
import re
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, User, AuthSession, utcnow
from services.errors import AuthError, StoreError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 3600


@dataclass(frozen=True)
class SessionUser:
    """Detached view of an account, safe to hold outside a database session."""
    id: uuid.UUID
    email: str
    user_metadata: dict = field(default_factory=dict)

    @classmethod
    def from_model(cls, user: User) -> "SessionUser":
        return cls(id=user.id, email=user.email, user_metadata=dict(user.user_metadata or {}))


@dataclass(frozen=True)
class Session:
    access_token: str
    expires_at: datetime
    user: SessionUser

    def to_dict(self):
        return {
            'access_token': self.access_token,
            'expires_at': self.expires_at.isoformat(),
            'user': {
                'id': str(self.user.id),
                'email': self.user.email,
                'user_metadata': dict(self.user.user_metadata),
            },
        }


def is_valid_email(email):
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def is_valid_password(password):
    """Validate password strength."""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if not re.search(r'[A-Za-z]', password):
        return False, "Password must contain at least one letter"
    if not re.search(r'[0-9]', password):
        return False, "Password must contain at least one number"
    return True, "Valid password"


def _session_ttl() -> timedelta:
    seconds = DEFAULT_SESSION_TTL_SECONDS
    if has_app_context():
        seconds = int(current_app.config.get("SESSION_TTL_SECONDS", seconds))
    return timedelta(seconds=seconds)


class IdentityService:
    """Server-side account and session management backed by the users/auth_sessions tables."""

    def create_account(self, email: str, password: str, full_name: Optional[str] = None) -> User:
        email = (email or "").strip().lower()
        password = password or ""

        if not email:
            raise AuthError("Email is required", status_code=400)
        if not is_valid_email(email):
            raise AuthError("Please enter a valid email address", status_code=400)
        valid, message = is_valid_password(password)
        if not valid:
            raise AuthError(message, status_code=400)

        existing = db.session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing:
            raise AuthError("An account with this email already exists", status_code=409)

        user = User(email=email, user_metadata={'full_name': (full_name or "").strip()})
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.warning(f"Registration refused for {email}: {e.orig}")
            raise AuthError("An account with this email already exists", status_code=409) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Registration failed for {email}: {e}")
            raise StoreError("Registration failed. Please try again.") from e

        logger.info(f"Account created: {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthError("Please enter both email and password", status_code=400)

        user = db.session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None or not user.check_password(password):
            logger.warning(f"Login failed for: {email}")
            raise AuthError("Invalid email or password")
        return user

    def create_session(self, email: str, password: str) -> Session:
        user = self.authenticate(email, password)
        record = AuthSession(
            access_token=secrets.token_urlsafe(48),
            user_id=user.id,
            expires_at=utcnow() + _session_ttl(),
        )
        try:
            user.last_sign_in_at = utcnow()
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Session creation failed for {user.id}: {e}")
            raise StoreError("Sign-in failed. Please try again.") from e

        logger.info(f"Session issued for account {user.id}")
        return Session(record.access_token, record.expires_at, SessionUser.from_model(user))

    def _find_session(self, access_token: str) -> Optional[AuthSession]:
        if not access_token:
            return None
        return db.session.execute(
            select(AuthSession).where(AuthSession.access_token == access_token)
        ).scalar_one_or_none()

    def resolve_session(self, access_token: str) -> Optional[Session]:
        """The live session for a token, or None when unknown or expired."""
        record = self._find_session(access_token)
        if record is None or record.is_expired:
            return None
        return Session(record.access_token, record.expires_at, SessionUser.from_model(record.user))

    def get_user(self, access_token: str) -> Optional[User]:
        record = self._find_session(access_token)
        if record is None or record.is_expired:
            return None
        return record.user

    def refresh_session(self, access_token: str) -> Session:
        """Rotate the token and extend the expiry."""
        record = self._find_session(access_token)
        if record is None or record.is_expired:
            raise AuthError("Session is invalid or has expired")
        try:
            record.access_token = secrets.token_urlsafe(48)
            record.expires_at = utcnow() + _session_ttl()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Session refresh failed: {e}")
            raise StoreError("Session refresh failed") from e
        return Session(record.access_token, record.expires_at, SessionUser.from_model(record.user))

    def revoke_session(self, access_token: str) -> None:
        """Delete the session; unknown tokens are ignored."""
        try:
            db.session.execute(delete(AuthSession).where(AuthSession.access_token == access_token))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Session revocation failed: {e}")
            raise StoreError("Sign-out failed") from e

    def delete_account(self, user_id) -> None:
        """Remove an account; its profile and sessions go with it by cascade."""
        user = db.session.get(User, user_id)
        if user is None:
            return
        try:
            db.session.delete(user)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Account deletion failed for {user_id}: {e}")
            raise StoreError("Account deletion failed") from e
        logger.info(f"Account deleted: {user_id}")


_identity_service: Optional[IdentityService] = None


def get_identity_service() -> IdentityService:
    global _identity_service
    if _identity_service is None:
        _identity_service = IdentityService()
    return _identity_service
