"""create rbac and availability tables

Revision ID: a41c7d2e9b10
Revises:
Create Date: 2026-10-18 10:12:44.512907

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a41c7d2e9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Offices
    op.create_table(
        'offices',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )

    # 2. Permission catalog and roles
    op.create_table(
        'permissions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_permissions_name', 'permissions', ['name'], unique=True)

    op.create_table(
        'roles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('office_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='CASCADE'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('name', 'office_id', name='uq_roles_name_office')
    )
    op.create_index('ix_roles_name', 'roles', ['name'])
    op.create_index(
        'uq_roles_global_name',
        'roles',
        [sa.text('lower(name)')],
        unique=True,
        postgresql_where=sa.text('office_id IS NULL')
    )

    op.create_table(
        'role_permissions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('role_id', 'permission_id', name='uq_role_permissions_pair')
    )
    op.create_index('ix_role_permissions_role_id', 'role_permissions', ['role_id'])

    # 3. Users and staff assignment
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('roles.id'), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_role_id', 'users', ['role_id'])

    op.create_table(
        'staff',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('office_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_staff_office_id', 'staff', ['office_id'])

    # 4. Availability (one row per office, upserted) and appointments
    op.create_table(
        'office_availability',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('office_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('default_schedule', sa.JSON, nullable=False),
        sa.Column('slot_duration', sa.Integer, nullable=False, server_default='30'),
        sa.Column('unavailable_date_ranges', sa.JSON, nullable=False),
        sa.Column('unavailable_dates', sa.JSON, nullable=False),
        sa.Column('date_overrides', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )

    op.create_table(
        'appointments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('office_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('offices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('request_id', sa.String(64), nullable=True),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('time', sa.String(5), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', sa.String, nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_appointments_office_id', 'appointments', ['office_id'])
    op.create_index('ix_appointments_date', 'appointments', ['date'])


def downgrade() -> None:
    """Downgrade schema."""

    # Drop tables in reverse order (due to foreign keys)
    op.drop_index('ix_appointments_date', 'appointments')
    op.drop_index('ix_appointments_office_id', 'appointments')
    op.drop_table('appointments')
    op.drop_table('office_availability')

    op.drop_index('ix_staff_office_id', 'staff')
    op.drop_table('staff')

    op.drop_index('ix_users_role_id', 'users')
    op.drop_index('ix_users_username', 'users')
    op.drop_table('users')

    op.drop_index('ix_role_permissions_role_id', 'role_permissions')
    op.drop_table('role_permissions')

    op.drop_index('uq_roles_global_name', 'roles')
    op.drop_index('ix_roles_name', 'roles')
    op.drop_table('roles')

    op.drop_index('ix_permissions_name', 'permissions')
    op.drop_table('permissions')

    op.drop_table('offices')
