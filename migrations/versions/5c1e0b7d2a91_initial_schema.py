"""initial schema: colleges, admins, students, events, registrations, feedbacks

Revision ID: 5c1e0b7d2a91
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5c1e0b7d2a91'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'colleges',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'admins',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('super_admin', 'college_admin', name='admin_role'), nullable=True),
        sa.Column('college_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('colleges.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_college_id', 'admins', ['college_id'])

    op.create_table(
        'students',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('college_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('colleges.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('student_id', sa.String(50), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_students_email', 'students', ['email'], unique=True)
    op.create_index('ix_students_college_id', 'students', ['college_id'])

    op.create_table(
        'events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('college_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('colleges.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column(
            'type',
            sa.Enum('academic', 'cultural', 'sports', 'technical', 'social', 'other', name='event_type'),
            nullable=False,
        ),
        sa.Column('host', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('poster_url', sa.String(1000), nullable=True),
        sa.Column('max_participants', sa.Integer(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('upcoming', 'ongoing', 'completed', 'cancelled', name='event_status'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_events_college_id', 'events', ['college_id'])
    op.create_index('ix_events_start_time', 'events', ['start_time'])

    op.create_table(
        'registrations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column(
            'status',
            sa.Enum('registered', 'attended', 'absent', name='registration_status'),
            nullable=True,
        ),
        sa.Column('registered_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('student_id', 'event_id', name='uq_registration_student_event'),
    )
    op.create_index('ix_registrations_student_id', 'registrations', ['student_id'])
    op.create_index('ix_registrations_event_id', 'registrations', ['event_id'])

    op.create_table(
        'feedbacks',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('students.id'), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('student_id', 'event_id', name='uq_feedback_student_event'),
    )
    op.create_index('ix_feedbacks_student_id', 'feedbacks', ['student_id'])
    op.create_index('ix_feedbacks_event_id', 'feedbacks', ['event_id'])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table('feedbacks')
    op.drop_table('registrations')
    op.drop_table('events')
    op.drop_table('students')
    op.drop_table('admins')
    op.drop_table('colleges')
    for enum_name in ('registration_status', 'event_status', 'event_type', 'admin_role'):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
