"""Create portal tables.

Revision ID: 5f1c2a9d3e10
Revises:
Create Date: 2026-10-18 09:00:00.000000

Users, departments, chat rooms and messages, notifications, push
subscriptions and the activity log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5f1c2a9d3e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all portal tables."""
    op.create_table(
        'Users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('reg_number', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('department_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Users_username', 'Users', ['username'], unique=True)
    op.create_index('ix_Users_department_name', 'Users', ['department_name'], unique=False)

    op.create_table(
        'Departments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'Rooms',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('department_name', sa.String(length=100), nullable=True),
        sa.Column('created_by', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_Rooms_type', 'Rooms', ['type'], unique=False)

    op.create_table(
        'Messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('room_id', sa.Uuid(), nullable=False),
        sa.Column('sender', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('formatting', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('image_expiry', sa.DateTime(), nullable=True),
        sa.Column('reply_to', sa.Text(), nullable=True),
        sa.Column('edited', sa.Boolean(), nullable=False),
        sa.Column('reactions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['Rooms.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_Messages_room_id_created_at', 'Messages', ['room_id', 'created_at'], unique=False
    )
    op.create_index('ix_Messages_image_expiry', 'Messages', ['image_expiry'], unique=False)

    op.create_table(
        'Notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('scope', sa.String(length=20), nullable=False),
        sa.Column('classification', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('posted_by', sa.String(length=100), nullable=False),
        sa.Column('target_department_name', sa.String(length=100), nullable=True),
        sa.Column('reactions', sa.JSON(), nullable=False),
        sa.Column('comments', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_Notifications_target_department_name',
        'Notifications',
        ['target_department_name'],
        unique=False,
    )
    op.create_index('ix_Notifications_created_at', 'Notifications', ['created_at'], unique=False)

    op.create_table(
        'PushSubscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('endpoint', sa.Text(), nullable=False),
        sa.Column('p256dh', sa.String(length=255), nullable=False),
        sa.Column('auth', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['Users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('endpoint'),
    )
    op.create_index('ix_PushSubscriptions_user_id', 'PushSubscriptions', ['user_id'], unique=False)

    op.create_table(
        'ActivityLogs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ActivityLogs_user_id', 'ActivityLogs', ['user_id'], unique=False)
    op.create_index('ix_ActivityLogs_created_at', 'ActivityLogs', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop all portal tables."""
    op.drop_table('ActivityLogs')
    op.drop_table('PushSubscriptions')
    op.drop_table('Notifications')
    op.drop_table('Messages')
    op.drop_table('Rooms')
    op.drop_table('Departments')
    op.drop_table('Users')
