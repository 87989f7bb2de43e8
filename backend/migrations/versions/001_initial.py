"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2020-07-16

Creates the tables of the freshman service:
- students: pre-enrollment records, optionally bound to an identity (uid)
- identities: verified real-name credentials
- approvals: administrator sign-offs on identities

Also creates indexes for the account lookups (student_id, ticket, name)
and for the relationship queries.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('student_id', sa.Text(), primary_key=True),
        sa.Column('uid', sa.Integer(), nullable=True),
        sa.Column('ticket', sa.Text(), nullable=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('secret', sa.Text(), nullable=False),
        sa.Column('college', sa.Text(), nullable=False),
        sa.Column('major', sa.Text(), nullable=False),
        sa.Column('campus', sa.Text(), nullable=False),
        sa.Column('building', sa.Text(), nullable=False),
        sa.Column('room', sa.Integer(), nullable=False),
        sa.Column('bed', sa.Text(), nullable=False),
        sa.Column('counselor_name', sa.Text(), nullable=False),
        sa.Column('counselor_tel', sa.Text(), nullable=False),
        sa.Column('province', sa.Text(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('postcode', sa.Integer(), nullable=True),
        sa.Column('graduated_from', sa.Text(), nullable=True),
        sa.Column('class', sa.Text(), nullable=True),
        sa.Column('visible', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('contact', postgresql.JSONB(), nullable=True),
        sa.Column('last_seen', sa.DateTime(), nullable=True),
    )

    # Indexes backing account lookups and class queries
    op.create_index('ix_students_uid', 'students', ['uid'])
    op.create_index('ix_students_name', 'students', ['name'])
    op.create_index('ix_students_ticket', 'students', ['ticket'])
    op.create_index('ix_students_class', 'students', ['class'])

    # ── Identities Table ──────────────────────────────────────
    op.create_table(
        'identities',
        sa.Column('uid', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('student_id', sa.Text(), nullable=False),
        sa.Column('realname', sa.Text(), nullable=False),
        sa.Column('identity_number', sa.Text(), nullable=True),
        sa.Column('oa_certified', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_identities_student_id', 'identities', ['student_id'])

    # ── Approvals Table ───────────────────────────────────────
    op.create_table(
        'approvals',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('identity_number', sa.Text(), nullable=True),
        sa.Column('approved_time', sa.DateTime(), nullable=True,
                  server_default=sa.func.now()),
        sa.Column('college', sa.Text(), nullable=False),
        sa.Column('major', sa.Text(), nullable=True),
    )
    op.create_index('ix_approvals_student_id', 'approvals', ['student_id'])
    op.create_index('ix_approvals_approved_time', 'approvals', ['approved_time'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_approvals_approved_time', table_name='approvals')
    op.drop_index('ix_approvals_student_id', table_name='approvals')
    op.drop_table('approvals')
    op.drop_index('ix_identities_student_id', table_name='identities')
    op.drop_table('identities')
    op.drop_index('ix_students_class', table_name='students')
    op.drop_index('ix_students_ticket', table_name='students')
    op.drop_index('ix_students_name', table_name='students')
    op.drop_index('ix_students_uid', table_name='students')
    op.drop_table('students')
