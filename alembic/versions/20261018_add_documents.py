"""Add shared documents.

Revision ID: 8b2e7c4a1f05
Revises: 5f1c2a9d3e10
Create Date: 2026-10-18 14:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8b2e7c4a1f05'
down_revision: Union[str, None] = '5f1c2a9d3e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the Documents table."""
    op.create_table(
        'Documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('object_key', sa.String(length=500), nullable=False),
        sa.Column('owner', sa.String(length=100), nullable=False),
        sa.Column('department_name', sa.String(length=100), nullable=True),
        sa.Column('file_type', sa.String(length=50), nullable=False),
        sa.Column('content_type', sa.String(length=100), nullable=False),
        sa.Column('size', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('object_key'),
    )
    op.create_index('ix_Documents_owner', 'Documents', ['owner'], unique=False)
    op.create_index('ix_Documents_department_name', 'Documents', ['department_name'], unique=False)
    op.create_index('ix_Documents_created_at', 'Documents', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop the Documents table."""
    op.drop_index('ix_Documents_created_at', table_name='Documents')
    op.drop_index('ix_Documents_department_name', table_name='Documents')
    op.drop_index('ix_Documents_owner', table_name='Documents')
    op.drop_table('Documents')
