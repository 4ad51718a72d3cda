"""Initial migration

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names, matching SQLAlchemy's default for Enum(PyEnum)
content_type = sa.Enum('QURAN', 'HADITH', name='contenttype')
question_status = sa.Enum('PENDING', 'ANSWERED', name='questionstatus')
client_status = sa.Enum('LEAD', 'ACTIVE', 'PAST', name='clientstatus')
meeting_status = sa.Enum('SCHEDULED', 'COMPLETED', 'CANCELLED', name='meetingstatus')
task_priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='taskpriority')


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('language', sa.String(10), nullable=False, server_default='en'),
        sa.Column('theme', sa.String(20), nullable=False, server_default='light'),
        sa.Column('preferences', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'])

    # Create bookmarks table
    op.create_table(
        'bookmarks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', content_type, nullable=False),
        sa.Column('reference', sa.JSON(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_bookmarks_user_id', 'bookmarks', ['user_id'])

    # Create prayer_settings table (one row per user)
    op.create_table(
        'prayer_settings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('calculation_method', sa.String(20), nullable=False, server_default='MWL'),
        sa.Column('asr_method', sa.String(20), nullable=False, server_default='Standard'),
        sa.Column('adjustments', sa.JSON(), nullable=True),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_prayer_settings_user_id', 'prayer_settings', ['user_id'], unique=True)

    # Create reading_progress table
    op.create_table(
        'reading_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', content_type, nullable=False),
        sa.Column('last_read', sa.JSON(), nullable=False),
        sa.Column('completion_percentage', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_reading_progress_user_id', 'reading_progress', ['user_id'])

    # Create questions table
    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=True),
        sa.Column('status', question_status, nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_questions_user_id', 'questions', ['user_id'])
    op.create_index('ix_questions_status', 'questions', ['status'])

    # Create search_history table
    op.create_table(
        'search_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('query', sa.String(500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_search_history_user_id', 'search_history', ['user_id'])

    # Create clients table
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('status', client_status, nullable=False, server_default='LEAD'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_clients_user_id', 'clients', ['user_id'])

    # Create meetings table (client_id is not a foreign key)
    op.create_table(
        'meetings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('duration', sa.String(50), nullable=False, server_default='1 hour'),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('status', meeting_status, nullable=False, server_default='SCHEDULED'),
        sa.Column('send_reminder', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reminder_time', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_meetings_user_id', 'meetings', ['user_id'])
    op.create_index('ix_meetings_client_id', 'meetings', ['client_id'])

    # Create tasks table
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('priority', task_priority, nullable=False, server_default='MEDIUM'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_tasks_user_id', 'tasks', ['user_id'])
    op.create_index('ix_tasks_client_id', 'tasks', ['client_id'])


def downgrade() -> None:
    op.drop_table('tasks')
    op.drop_table('meetings')
    op.drop_table('clients')
    op.drop_table('search_history')
    op.drop_table('questions')
    op.drop_table('reading_progress')
    op.drop_table('prayer_settings')
    op.drop_table('bookmarks')
    op.drop_table('users')

    op.execute('DROP TYPE IF EXISTS taskpriority')
    op.execute('DROP TYPE IF EXISTS meetingstatus')
    op.execute('DROP TYPE IF EXISTS clientstatus')
    op.execute('DROP TYPE IF EXISTS questionstatus')
    op.execute('DROP TYPE IF EXISTS contenttype')
