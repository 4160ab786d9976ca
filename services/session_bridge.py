"""
Session/Profile Bridge

Reconciles the auth client's session with the authoritative Profile row for the
lifetime of the application and exposes the result (user, session, profile,
loading, is_ceo) to the presentation layer.

Startup is strict: a session whose profile cannot be fetched is treated as
invalid and signed out. Session-change events are lenient: a failed profile
re-fetch leaves the profile empty without signing out.

The profile is held as a detached SessionProfile snapshot, so the bridge outlives
the database session the row was read in.

Usage, inside an application context:

    from services import task_service
    from services.auth_client import AuthClient
    from services.identity_service import get_identity_service
    from services.session_bridge import init_session_bridge, shutdown_session_bridge

    bridge = init_session_bridge(AuthClient(get_identity_service()), task_service.fetch_profile)
    bridge.sign_in("ceo@company.com", password)
    if bridge.is_ceo:
        ...
    shutdown_session_bridge()
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from models import Profile, UserRole
from services.auth_client import AuthClient, AuthEvent, AuthOutcome, Subscription
from services.identity_service import Session, SessionUser

logger = logging.getLogger(__name__)

# fetch_profile(uid, profile_id) -> Profile; raises when missing or refused
ProfileFetcher = Callable[[object, object], Optional[Profile]]


@dataclass(frozen=True)
class SessionProfile:
    """Detached copy of a Profile row, safe to hold after its database session ends."""
    id: uuid.UUID
    role: UserRole
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, profile: Profile) -> "SessionProfile":
        return cls(
            id=profile.id,
            role=UserRole(profile.role),
            full_name=profile.full_name,
            created_at=profile.created_at,
        )

    @property
    def is_ceo(self) -> bool:
        return self.role == UserRole.CEO

    def to_dict(self):
        return {
            'id': str(self.id),
            'role': self.role.value,
            'full_name': self.full_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class SessionBridge:
    def __init__(self, auth: AuthClient, fetch_profile: ProfileFetcher):
        self._auth = auth
        self._fetch_profile = fetch_profile
        self._lock = threading.RLock()
        self._subscription: Optional[Subscription] = None

        self.user: Optional[SessionUser] = None
        self.session: Optional[Session] = None
        self.profile: Optional[SessionProfile] = None
        self.loading = True

    @property
    def is_ceo(self) -> bool:
        return self.profile is not None and self.profile.is_ceo

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # ---- lifecycle ----

    def start(self) -> "SessionBridge":
        """Subscribe to session changes, then run the startup session check."""
        with self._lock:
            if self._subscription is None:
                self._subscription = self._auth.on_auth_state_change(self._on_auth_state_change)
            self.loading = True
            try:
                self._check_session()
            except Exception:
                logger.exception("Error checking session")
                self.profile = None
            finally:
                self.loading = False
        return self

    def _load_profile(self, uid) -> Optional[SessionProfile]:
        profile = self._fetch_profile(uid, uid)
        return SessionProfile.from_model(profile) if profile is not None else None

    def _check_session(self) -> None:
        session = self._auth.get_session()
        self.session = session
        self.user = session.user if session else None

        if session is None:
            self.profile = None
            return

        try:
            profile = self._load_profile(session.user.id)
        except Exception as e:
            logger.warning(f"Profile fetch failed for session user {session.user.id}: {e}")
            profile = None

        if profile is None:
            # A session without a backing profile is stale; clear it locally and remotely.
            logger.warning(f"Session for {session.user.id} has no profile; signing out")
            outcome = self._auth.sign_out()
            if not outcome.success:
                logger.error(f"Forced sign-out failed: {outcome.error}")
            self.session = None
            self.user = None
            self.profile = None
        else:
            self.profile = profile

    def _on_auth_state_change(self, event: AuthEvent, session: Optional[Session]) -> None:
        with self._lock:
            self.session = session
            self.user = session.user if session else None

            if self.user is None:
                self.profile = None
                return

            try:
                self.profile = self._load_profile(self.user.id)
            except Exception as e:
                logger.warning(f"Profile refresh after {event.value} failed: {e}")
                self.profile = None

    def teardown(self) -> None:
        """Cancel the session-change subscription; later calls do nothing."""
        with self._lock:
            if self._subscription is not None:
                self._subscription.unsubscribe()
                self._subscription = None

    # ---- operations ----

    def register(self, email: str, password: str, full_name: str) -> AuthOutcome:
        outcome = self._auth.sign_up(email, password, full_name)
        if not outcome.success:
            logger.warning(f"Registration failed: {outcome.error}")
        return outcome

    def sign_in(self, email: str, password: str) -> AuthOutcome:
        outcome = self._auth.sign_in_with_password(email, password)
        if not outcome.success:
            logger.warning(f"Sign-in failed: {outcome.error}")
        return outcome

    def sign_out(self) -> AuthOutcome:
        outcome = self._auth.sign_out()
        if not outcome.success:
            logger.warning(f"Sign-out failed: {outcome.error}")
        return outcome

    def to_dict(self):
        return {
            'user': {'id': str(self.user.id), 'email': self.user.email} if self.user else None,
            'profile': self.profile.to_dict() if self.profile else None,
            'loading': self.loading,
            'is_ceo': self.is_ceo,
        }


_bridge: Optional[SessionBridge] = None
_bridge_lock = threading.Lock()


def init_session_bridge(auth: AuthClient, fetch_profile: ProfileFetcher) -> SessionBridge:
    """Create and start the process-wide bridge, replacing any previous one."""
    global _bridge
    with _bridge_lock:
        if _bridge is not None:
            _bridge.teardown()
        _bridge = SessionBridge(auth, fetch_profile).start()
        return _bridge


def get_session_bridge() -> SessionBridge:
    if _bridge is None:
        raise RuntimeError("Session bridge not initialised; call init_session_bridge() first")
    return _bridge


def shutdown_session_bridge() -> None:
    global _bridge
    with _bridge_lock:
        if _bridge is not None:
            _bridge.teardown()
            _bridge = None
