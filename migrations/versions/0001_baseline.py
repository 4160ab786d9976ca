"""Baseline schema: accounts, profiles, sectors, tasks and task history

Revision ID: dashboard_baseline_v1
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
import uuid
from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'dashboard_baseline_v1'
down_revision = None
branch_labels = None
depends_on = None


# Enum types are created once in upgrade(); metadata binding stops create_table from re-creating them.
enum_metadata = sa.MetaData()
task_type = sa.Enum('daily', 'monthly', 'temporary', name='task_type', metadata=enum_metadata)
task_urgency = sa.Enum('not_urgent', 'relatively_urgent', 'urgent', name='task_urgency', metadata=enum_metadata)
task_status = sa.Enum('pending', 'delivered', 'not_delivered', name='task_status', metadata=enum_metadata)
user_role = sa.Enum('ceo', 'collaborator', name='user_role', metadata=enum_metadata)

DEFAULT_SECTORS = ('Coordination', 'HR')


def upgrade():
    bind = op.get_bind()
    for enum_type in (task_type, task_urgency, task_status, user_role):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('user_metadata', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_sign_in_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('access_token', sa.String(length=128), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_auth_sessions_access_token', 'auth_sessions', ['access_token'], unique=True)
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    sectors = op.create_table(
        'sectors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', task_type, nullable=False),
        sa.Column('urgency', task_urgency, nullable=False),
        sa.Column('status', task_status, nullable=False),
        sa.Column('ceo_observation', sa.Text(), nullable=True),
        sa.Column('sector_id', sa.Uuid(), nullable=False),
        sa.Column('deadline', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['sector_id'], ['sectors.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tasks_sector_deadline', 'tasks', ['sector_id', 'deadline'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])

    op.create_table(
        'task_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('task_id', sa.Uuid(), nullable=False),
        sa.Column('old_status', task_status, nullable=True),
        sa.Column('new_status', task_status, nullable=False),
        sa.Column('observation', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_task_history_task_id', 'task_history', ['task_id'])

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    op.bulk_insert(sectors, [
        {'id': uuid.uuid4(), 'name': name, 'created_at': now}
        for name in DEFAULT_SECTORS
    ])


def downgrade():
    op.drop_index('ix_task_history_task_id', table_name='task_history')
    op.drop_table('task_history')

    op.drop_index('ix_tasks_status', table_name='tasks')
    op.drop_index('ix_tasks_sector_deadline', table_name='tasks')
    op.drop_table('tasks')

    op.drop_table('sectors')
    op.drop_table('profiles')

    op.drop_index('ix_auth_sessions_user_id', table_name='auth_sessions')
    op.drop_index('ix_auth_sessions_access_token', table_name='auth_sessions')
    op.drop_table('auth_sessions')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (task_status, task_urgency, task_type, user_role):
        enum_type.drop(bind, checkfirst=True)
