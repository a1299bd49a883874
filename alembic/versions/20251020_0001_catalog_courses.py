"""catalog courses table

Revision ID: 20251020_0001
Revises:
Create Date: 2025-10-20
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20251020_0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'courses',
        sa.Column(
            'course_id', sa.Integer, primary_key=True, autoincrement=False
        ),
        sa.Column('course_name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created', sa.DateTime(), nullable=True),
        sa.Column('last_modified', sa.DateTime(), nullable=True),
        sa.Column(
            'available_to_all_organizations', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'available_instructor_led', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'available_self_paced', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'archived', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column(
            'is_file_updated', sa.Boolean(), nullable=False,
            server_default=sa.false()
        ),
        sa.Column('outline_objective', sa.Text(), nullable=True),
        sa.Column('outline_overview', sa.Text(), nullable=True),
        sa.Column('outline_target_audience', sa.Text(), nullable=True),
        sa.Column('outline_lessons', sa.Text(), nullable=True),
        sa.Column('organization_ids', sa.Text(), nullable=True),
    )
    op.create_index(
        'ix_courses_is_file_updated', 'courses', ['is_file_updated']
    )


def downgrade() -> None:
    op.drop_index('ix_courses_is_file_updated', table_name='courses')
    op.drop_table('courses')
