"""
Row-level policy rules.
"""
import uuid

import pytest

from services.errors import PermissionDenied
from services.policy import Action, POLICIES, authorize, is_permitted


class TestPolicyTable:

    @pytest.mark.parametrize('table', ['sectors', 'tasks', 'task_history'])
    def test_reads_are_open(self, app, table):
        assert is_permitted(None, table, Action.SELECT)

    @pytest.mark.parametrize('table', ['sectors', 'tasks'])
    @pytest.mark.parametrize('action', [Action.INSERT, Action.UPDATE, Action.DELETE])
    def test_writes_require_ceo(self, ceo_user, collaborator_user, table, action):
        assert is_permitted(ceo_user.id, table, action)
        assert not is_permitted(collaborator_user.id, table, action)
        assert not is_permitted(None, table, action)

    def test_history_is_append_only(self, ceo_user):
        assert is_permitted(ceo_user.id, 'task_history', Action.INSERT)
        assert not is_permitted(ceo_user.id, 'task_history', Action.UPDATE)
        assert not is_permitted(ceo_user.id, 'task_history', Action.DELETE)

    def test_profiles_are_private(self, ceo_user, collaborator_user):
        assert is_permitted(collaborator_user.id, 'profiles', Action.SELECT, collaborator_user.id)
        assert is_permitted(collaborator_user.id, 'profiles', Action.UPDATE, collaborator_user.id)
        assert not is_permitted(ceo_user.id, 'profiles', Action.SELECT, collaborator_user.id)
        assert not is_permitted(None, 'profiles', Action.SELECT, collaborator_user.id)

    def test_profiles_cannot_be_deleted_by_owner(self, collaborator_user):
        assert Action.DELETE not in POLICIES['profiles']
        assert not is_permitted(collaborator_user.id, 'profiles', Action.DELETE, collaborator_user.id)

    def test_unknown_table_is_denied(self, ceo_user):
        assert not is_permitted(ceo_user.id, 'users', Action.SELECT)

    def test_account_without_profile_is_not_ceo(self, app):
        assert not is_permitted(uuid.uuid4(), 'tasks', Action.INSERT)

    def test_actions_accept_plain_strings(self, ceo_user):
        assert is_permitted(ceo_user.id, 'tasks', 'insert')


class TestAuthorize:

    def test_denial_raises_with_detail(self, collaborator_user):
        with pytest.raises(PermissionDenied) as exc_info:
            authorize(collaborator_user.id, 'tasks', Action.DELETE)

        error = exc_info.value
        assert error.status_code == 403
        assert error.detail == {'table': 'tasks', 'action': 'delete'}

    def test_grant_returns_quietly(self, ceo_user):
        assert authorize(ceo_user.id, 'tasks', Action.DELETE) is None
