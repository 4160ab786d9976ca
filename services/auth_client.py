"""
Client-side auth handle.

Holds the locally stored session (the "credential") and notifies observers
whenever it changes: sign-in, sign-out and token refresh.

Usually owned by a SessionBridge (services.session_bridge), which subscribes to
it and keeps the matching profile; see that module for wiring.
"""

import enum
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from services.errors import StoreError
from services.identity_service import IdentityService, Session

logger = logging.getLogger(__name__)


class AuthEvent(str, enum.Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class AuthOutcome:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "AuthOutcome":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "AuthOutcome":
        return cls(success=False, error=error)


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


class Subscription:
    """Deregistration handle returned by AuthClient.on_auth_state_change."""

    def __init__(self, client: "AuthClient", key: int):
        self._client = client
        self._key = key
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._client._remove_listener(self._key)


class AuthClient:
    def __init__(self, identity: IdentityService, session: Optional[Session] = None):
        self._identity = identity
        self._session = session
        self._listeners: Dict[int, AuthListener] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # ---- observers ----

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        with self._lock:
            key = next(self._ids)
            self._listeners[key] = callback
        return Subscription(self, key)

    def _remove_listener(self, key: int) -> None:
        with self._lock:
            self._listeners.pop(key, None)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _notify(self, event: AuthEvent, session: Optional[Session]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception(f"Auth listener failed handling {event.value}")

    # ---- session ----

    def get_session(self) -> Optional[Session]:
        """The locally held session; it is not re-validated against the store."""
        return self._session

    def _set_session(self, session: Optional[Session], event: AuthEvent) -> None:
        self._session = session
        self._notify(event, session)

    def sign_up(self, email: str, password: str, full_name: str) -> AuthOutcome:
        """Create the account, then sign it in."""
        try:
            self._identity.create_account(email, password, full_name)
        except StoreError as e:
            logger.warning(f"Sign-up failed for {email}: {e.message}")
            return AuthOutcome.failed(e.message)
        return self.sign_in_with_password(email, password)

    def sign_in_with_password(self, email: str, password: str) -> AuthOutcome:
        try:
            session = self._identity.create_session(email, password)
        except StoreError as e:
            return AuthOutcome.failed(e.message)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return AuthOutcome.ok()

    def sign_out(self) -> AuthOutcome:
        session = self._session
        if session is not None:
            try:
                self._identity.revoke_session(session.access_token)
            except StoreError as e:
                return AuthOutcome.failed(e.message)
        self._set_session(None, AuthEvent.SIGNED_OUT)
        return AuthOutcome.ok()

    def refresh_session(self) -> AuthOutcome:
        session = self._session
        if session is None:
            return AuthOutcome.failed("No active session")
        try:
            refreshed = self._identity.refresh_session(session.access_token)
        except StoreError as e:
            return AuthOutcome.failed(e.message)
        self._set_session(refreshed, AuthEvent.TOKEN_REFRESHED)
        return AuthOutcome.ok()
