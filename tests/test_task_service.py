"""
Data service: sectors, tasks, history and profiles under the policy rules.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from models import db, Sector, Task, TaskStatus, TaskType, TaskUrgency, UserRole, utcnow
from services import task_service
from services.errors import (
    IntegrityViolation,
    NotFound,
    PermissionDenied,
    StoreUnavailable,
    ValidationFailed,
)


class TestSectors:

    def test_list_sectors_ordered_by_name(self, ceo_user):
        for name in ('HR', 'Coordination', 'Finance'):
            task_service.create_sector(ceo_user.id, name)

        names = [s.name for s in task_service.list_sectors(None)]
        assert names == ['Coordination', 'Finance', 'HR']

    def test_rename_sector(self, ceo_user, sector):
        renamed = task_service.update_sector(ceo_user.id, sector.id, '  Operations ')
        assert renamed.name == 'Operations'

    def test_blank_name_rejected(self, ceo_user):
        with pytest.raises(ValidationFailed):
            task_service.create_sector(ceo_user.id, '   ')

    def test_collaborator_cannot_create_sector(self, collaborator_user):
        with pytest.raises(PermissionDenied):
            task_service.create_sector(collaborator_user.id, 'Finance')
        assert task_service.list_sectors(collaborator_user.id) == []

    def test_delete_empty_sector(self, ceo_user, sector):
        task_service.delete_sector(ceo_user.id, sector.id)
        assert db.session.get(Sector, sector.id) is None

    def test_delete_sector_with_tasks_is_refused(self, ceo_user, sector, task):
        assert task_service.count_sector_tasks(ceo_user.id, sector.id) == 1

        with pytest.raises(IntegrityViolation) as exc_info:
            task_service.delete_sector(ceo_user.id, sector.id)
        assert exc_info.value.status_code == 409

        assert db.session.get(Sector, sector.id) is not None
        assert db.session.get(Task, task.id) is not None

    def test_missing_sector(self, ceo_user):
        with pytest.raises(NotFound):
            task_service.get_sector(ceo_user.id, '00000000-0000-0000-0000-000000000000')

    def test_malformed_sector_id(self, ceo_user):
        with pytest.raises(ValidationFailed):
            task_service.get_sector(ceo_user.id, 'not-a-uuid')


class TestTasks:

    def test_create_task_round_trip(self, ceo_user, sector):
        deadline = datetime(2030, 3, 31, 17, 0)
        created = task_service.create_task(
            ceo_user.id,
            title='Q1 Report',
            type='monthly',
            sector_id=sector.id,
            deadline=deadline,
            description='Quarterly numbers',
        )

        tasks = task_service.list_tasks(None)
        assert [t.id for t in tasks] == [created.id]
        stored = tasks[0]
        assert stored.title == 'Q1 Report'
        assert stored.type == TaskType.MONTHLY
        assert stored.urgency == TaskUrgency.NOT_URGENT
        assert stored.status == TaskStatus.PENDING
        assert stored.ceo_observation is None
        assert stored.deadline == deadline
        assert stored.sector.name == 'Coordination'

    def test_iso_deadline_with_offset_is_stored_as_utc(self, ceo_user, sector):
        task = task_service.create_task(
            ceo_user.id, 'Payroll', 'daily', sector.id, '2030-01-15T12:00:00+02:00'
        )
        assert task.deadline == datetime(2030, 1, 15, 10, 0)

    def test_tasks_listed_by_deadline(self, ceo_user, sector):
        now = utcnow()
        task_service.create_task(ceo_user.id, 'Later', 'daily', sector.id, now + timedelta(days=3))
        task_service.create_task(ceo_user.id, 'Sooner', 'daily', sector.id, now + timedelta(days=1))

        assert [t.title for t in task_service.list_tasks(None)] == ['Sooner', 'Later']

    def test_filter_by_sector_and_status(self, ceo_user, sector, task):
        other = task_service.create_sector(ceo_user.id, 'HR')
        task_service.create_task(ceo_user.id, 'Hiring plan', 'temporary', other.id, utcnow())
        task_service.update_task_status(ceo_user.id, task.id, 'delivered')

        by_sector = task_service.list_tasks(None, sector_id=str(other.id))
        assert [t.title for t in by_sector] == ['Hiring plan']

        delivered = task_service.list_tasks(None, status='delivered')
        assert [t.title for t in delivered] == ['Q1 Report']

    def test_invalid_status_filter(self, app):
        with pytest.raises(ValidationFailed):
            task_service.list_tasks(None, status='archived')

    @pytest.mark.parametrize('overrides, field', [
        ({'title': ''}, 'title'),
        ({'type': 'weekly'}, 'type'),
        ({'urgency': 'critical'}, 'urgency'),
        ({'deadline': None}, 'deadline'),
        ({'deadline': 'next tuesday'}, 'deadline'),
        ({'sector_id': None}, 'sector_id'),
    ])
    def test_create_task_validation(self, ceo_user, sector, overrides, field):
        fields = {
            'title': 'Q1 Report',
            'type': 'monthly',
            'sector_id': sector.id,
            'deadline': '2030-03-31T17:00:00',
            'urgency': 'urgent',
        }
        fields.update(overrides)

        with pytest.raises(ValidationFailed) as exc_info:
            task_service.create_task(ceo_user.id, **fields)
        assert field in exc_info.value.message

    def test_create_task_in_unknown_sector(self, ceo_user, sector):
        with pytest.raises(ValidationFailed):
            task_service.create_task(
                ceo_user.id, 'Orphan', 'daily', '00000000-0000-0000-0000-000000000000', utcnow()
            )
        assert task_service.list_tasks(None) == []

    def test_close_task_with_observation(self, ceo_user, task):
        closed = task_service.update_task_status(
            ceo_user.id, task.id, TaskStatus.DELIVERED, '  Delivered on time  '
        )
        assert closed.status == TaskStatus.DELIVERED
        assert closed.ceo_observation == 'Delivered on time'

        history = task_service.list_task_history(None, task.id)
        assert len(history) == 1
        assert history[0].observation == 'Delivered on time'

    def test_blank_observation_clears_it(self, ceo_user, task):
        task_service.update_task_status(ceo_user.id, task.id, 'delivered', 'Done')
        reopened = task_service.update_task_status(ceo_user.id, task.id, 'pending', '   ')
        assert reopened.ceo_observation is None

    def test_update_missing_task(self, ceo_user):
        with pytest.raises(NotFound):
            task_service.update_task_status(
                ceo_user.id, '00000000-0000-0000-0000-000000000000', 'delivered'
            )

    def test_delete_task(self, ceo_user, task):
        task_service.delete_task(ceo_user.id, task.id)
        with pytest.raises(NotFound):
            task_service.get_task(ceo_user.id, task.id)


class TestCollaboratorAccess:
    """Collaborators read everything and write nothing."""

    def test_reads_allowed(self, collaborator_user, task):
        assert [t.id for t in task_service.list_tasks(collaborator_user.id)] == [task.id]
        assert task_service.get_task(collaborator_user.id, task.id).title == 'Q1 Report'
        assert task_service.list_task_history(collaborator_user.id, task.id) == []

    def test_status_update_denied(self, collaborator_user, task):
        with pytest.raises(PermissionDenied):
            task_service.update_task_status(collaborator_user.id, task.id, 'delivered')
        assert task_service.get_task(collaborator_user.id, task.id).status == TaskStatus.PENDING

    def test_create_and_delete_denied(self, collaborator_user, sector, task):
        with pytest.raises(PermissionDenied):
            task_service.create_task(
                collaborator_user.id, 'Sneaky', 'daily', sector.id, utcnow()
            )
        with pytest.raises(PermissionDenied):
            task_service.delete_task(collaborator_user.id, task.id)
        with pytest.raises(PermissionDenied):
            task_service.delete_sector(collaborator_user.id, sector.id)

    def test_anonymous_writes_denied(self, sector):
        with pytest.raises(PermissionDenied):
            task_service.create_task(None, 'Anon', 'daily', sector.id, utcnow())


class TestProfiles:

    def test_fetch_own_profile(self, collaborator_user):
        profile = task_service.fetch_profile(collaborator_user.id, collaborator_user.id)
        assert profile.role == UserRole.COLLABORATOR

    def test_fetch_other_profile_denied(self, ceo_user, collaborator_user):
        with pytest.raises(PermissionDenied):
            task_service.fetch_profile(ceo_user.id, collaborator_user.id)

    def test_update_profile_changes_name_only(self, collaborator_user):
        profile = task_service.update_profile(collaborator_user.id, collaborator_user.id, 'Carla C.')
        assert profile.full_name == 'Carla C.'
        assert profile.role == UserRole.COLLABORATOR


class TestStoreFailures:

    def test_operational_error_maps_to_unavailable(self, ceo_user, sector, mocker):
        mocker.patch.object(
            db.session, 'commit', side_effect=OperationalError('COMMIT', {}, Exception('db down'))
        )
        with pytest.raises(StoreUnavailable) as exc_info:
            task_service.create_task(ceo_user.id, 'Q2 Report', 'monthly', sector.id, utcnow())
        assert exc_info.value.status_code == 503
