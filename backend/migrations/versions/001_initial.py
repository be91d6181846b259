"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2025-12-25

Creates all database tables for the Student Course Registry:
- identities: local mirror of the auth provider's users
- courses: Courses with unique uppercased codes
- students: Student records, optionally enrolled and optionally owned
- user_roles: Role assignments (app_role enum: admin | student)
- profiles: One profile per identity

Row-level access is enforced by the application's policy layer and the
updated_at / provisioning triggers by SQLAlchemy mapper events, so this
revision only creates the schema.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

app_role = sa.Enum('admin', 'student', name='app_role')


def upgrade() -> None:
    # ── Identities Table ──────────────────────────────────────
    op.create_table(
        'identities',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('raw_user_meta_data', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    # ── Courses Table ─────────────────────────────────────────
    op.create_table(
        'courses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('course_name', sa.String(255), nullable=False),
        sa.Column('course_code', sa.String(50), nullable=False, unique=True),
        sa.Column('course_duration', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('course_duration > 0', name='ck_courses_duration_positive'),
    )

    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('course_id', sa.String(36),
                  sa.ForeignKey('courses.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('identities.id', ondelete='CASCADE'),
                  nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_students_course_id', 'students', ['course_id'])

    # ── User Roles Table ──────────────────────────────────────
    op.create_table(
        'user_roles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('identities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', app_role, nullable=False, server_default='student'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_id_role'),
    )

    # ── Profiles Table ────────────────────────────────────────
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('identities.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('username', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('profiles')
    op.drop_table('user_roles')
    op.drop_index('ix_students_course_id', table_name='students')
    op.drop_table('students')
    op.drop_table('courses')
    op.drop_table('identities')
    app_role.drop(op.get_bind(), checkfirst=True)
