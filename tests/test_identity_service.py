"""
Identity store: accounts and access-token sessions.
"""
from datetime import timedelta

import pytest

from models import db, AuthSession, Profile, User, utcnow
from services.errors import AuthError
from services.identity_service import is_valid_password


class TestAccounts:

    def test_create_account_stores_hash_and_metadata(self, identity):
        user = identity.create_account(' New@Company.com ', 'Password123', 'New Person')
        assert user.email == 'new@company.com'
        assert user.password_hash != 'Password123'
        assert user.check_password('Password123')
        assert user.user_metadata == {'full_name': 'New Person'}

    def test_duplicate_email_conflicts(self, identity, collaborator_user):
        with pytest.raises(AuthError) as exc_info:
            identity.create_account('collab@company.com', 'Password123', 'Again')
        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize('email, password', [
        ('', 'Password123'),
        ('not-an-email', 'Password123'),
        ('ok@company.com', 'short1'),
        ('ok@company.com', 'nodigitshere'),
    ])
    def test_invalid_input_rejected(self, identity, email, password):
        with pytest.raises(AuthError) as exc_info:
            identity.create_account(email, password, 'Someone')
        assert exc_info.value.status_code == 400

    def test_password_rules(self):
        assert is_valid_password('Password123') == (True, 'Valid password')
        assert is_valid_password('12345678')[0] is False

    def test_authenticate_wrong_password(self, identity, collaborator_user):
        with pytest.raises(AuthError) as exc_info:
            identity.authenticate('collab@company.com', 'WrongPass1')
        assert exc_info.value.status_code == 401

    def test_delete_account_cascades(self, identity, collaborator_user):
        session = identity.create_session('collab@company.com', 'Password123')
        user_id = collaborator_user.id

        identity.delete_account(user_id)

        assert db.session.get(User, user_id) is None
        assert db.session.get(Profile, user_id) is None
        assert identity.resolve_session(session.access_token) is None


class TestSessions:

    def test_create_and_resolve_session(self, identity, collaborator_user):
        session = identity.create_session('collab@company.com', 'Password123')

        resolved = identity.resolve_session(session.access_token)
        assert resolved is not None
        assert resolved.user.id == collaborator_user.id
        assert resolved.user.email == 'collab@company.com'
        assert db.session.get(User, collaborator_user.id).last_sign_in_at is not None

    def test_unknown_token_resolves_to_none(self, identity):
        assert identity.resolve_session('no-such-token') is None
        assert identity.get_user('no-such-token') is None

    def test_expired_session_is_rejected(self, identity, collaborator_user):
        session = identity.create_session('collab@company.com', 'Password123')
        record = db.session.query(AuthSession).filter_by(access_token=session.access_token).one()
        record.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

        assert identity.resolve_session(session.access_token) is None
        with pytest.raises(AuthError):
            identity.refresh_session(session.access_token)

    def test_ttl_follows_configuration(self, app, identity, collaborator_user):
        app.config['SESSION_TTL_SECONDS'] = 60
        session = identity.create_session('collab@company.com', 'Password123')
        assert session.expires_at <= utcnow() + timedelta(seconds=60)

    def test_refresh_rotates_token(self, identity, collaborator_user):
        session = identity.create_session('collab@company.com', 'Password123')
        refreshed = identity.refresh_session(session.access_token)

        assert refreshed.access_token != session.access_token
        assert identity.resolve_session(session.access_token) is None
        assert identity.resolve_session(refreshed.access_token) is not None

    def test_revoke_session(self, identity, collaborator_user):
        session = identity.create_session('collab@company.com', 'Password123')
        identity.revoke_session(session.access_token)
        assert identity.resolve_session(session.access_token) is None

    def test_revoke_unknown_token_is_ignored(self, identity):
        identity.revoke_session('no-such-token')

    def test_session_serialisation(self, identity, collaborator_user):
        data = identity.create_session('collab@company.com', 'Password123').to_dict()
        assert set(data) == {'access_token', 'expires_at', 'user'}
        assert data['user']['user_metadata'] == {'full_name': 'Carla Collaborator'}
