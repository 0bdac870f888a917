"""Create lease and payment ledger tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

Creates users, units, manager_unit_assignments, leases,
lease_additional_tenants, service_requests and payments.

The two filtered unique indexes on leases allow at most one active lease
per tenant and per unit.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_ONLY = sa.text("status = 'active'")

USER_ROLES = (
    'manager', 'supervisor', 'restricted_manager', 'boarding_manager',
    'tenant', 'electrician', 'plumber', 'general_repair',
)
PROPERTY_TYPES = ('apartment', 'house', 'townhouse', 'condo', 'duplex', 'studio', 'other')
LEASE_STATUSES = ('pending', 'active', 'expired', 'terminated')
SERVICE_CATEGORIES = ('electrical', 'plumbing', 'general_repair', 'hvac', 'appliance', 'other')
SERVICE_PRIORITIES = ('low', 'medium', 'high', 'emergency')
SERVICE_REQUEST_STATUSES = ('pending', 'assigned', 'in_progress', 'completed', 'cancelled')
PAYMENT_TYPES = ('rent', 'service_fee', 'deposit', 'late_fee', 'other')
PAYMENT_METHODS = ('ach', 'credit_card', 'debit_card', 'cash', 'check')
PAYMENT_STATUSES = ('pending', 'processing', 'completed', 'failed', 'refunded')


def _enum(values, name):
    return sa.Enum(*values, name=name, create_constraint=True)


def upgrade() -> None:
    """Create all ledger tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', _enum(USER_ROLES, 'user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=False),
        sa.Column('street_address', sa.String(255), nullable=False),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(2), nullable=False),
        sa.Column('zip_code', sa.String(10), nullable=False),
        sa.Column('building', sa.String(100), nullable=True),
        sa.Column('property_type', _enum(PROPERTY_TYPES, 'property_type'), nullable=False),
        sa.Column('floor', sa.Integer(), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Numeric(precision=3, scale=1), nullable=False),
        sa.Column('square_feet', sa.Integer(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('amenities', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_units'),
        sa.UniqueConstraint('unit_number', name='uq_units_unit_number'),
    )

    op.create_table(
        'manager_unit_assignments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_manager_unit_assignments'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_manager_unit_assignments_user_id_users',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['unit_id'], ['units.id'],
            name='fk_manager_unit_assignments_unit_id_units',
            ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'unit_id', name='uq_manager_unit_assignments_user_id'),
    )
    op.create_index('ix_manager_unit_assignments_user_id', 'manager_unit_assignments', ['user_id'])
    op.create_index('ix_manager_unit_assignments_unit_id', 'manager_unit_assignments', ['unit_id'])

    op.create_table(
        'leases',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('security_deposit', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('rent_due_day', sa.Integer(), nullable=False),
        sa.Column('late_fee_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('grace_period_days', sa.Integer(), nullable=False),
        sa.Column('status', _enum(LEASE_STATUSES, 'lease_status'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('renewed_from_id', sa.Integer(), nullable=True),
        sa.Column('terminated_at', sa.DateTime(), nullable=True),
        sa.Column('terminated_by_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_leases'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_leases_tenant_id_users'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], name='fk_leases_unit_id_units'),
        sa.ForeignKeyConstraint(['renewed_from_id'], ['leases.id'], name='fk_leases_renewed_from_id_leases'),
        sa.ForeignKeyConstraint(['terminated_by_id'], ['users.id'], name='fk_leases_terminated_by_id_users'),
    )
    op.create_index(
        'uq_leases_active_tenant', 'leases', ['tenant_id'], unique=True,
        mssql_where=ACTIVE_ONLY, postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY,
    )
    op.create_index(
        'uq_leases_active_unit', 'leases', ['unit_id'], unique=True,
        mssql_where=ACTIVE_ONLY, postgresql_where=ACTIVE_ONLY, sqlite_where=ACTIVE_ONLY,
    )
    op.create_index('ix_leases_tenant_status', 'leases', ['tenant_id', 'status'])
    op.create_index('ix_leases_unit_status', 'leases', ['unit_id', 'status'])
    op.create_index('ix_leases_dates', 'leases', ['start_date', 'end_date'])
    op.create_index('ix_leases_renewed_from_id', 'leases', ['renewed_from_id'])

    op.create_table(
        'lease_additional_tenants',
        sa.Column('lease_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('lease_id', 'tenant_id', name='pk_lease_additional_tenants'),
        sa.ForeignKeyConstraint(
            ['lease_id'], ['leases.id'],
            name='fk_lease_additional_tenants_lease_id_leases',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['tenant_id'], ['users.id'],
            name='fk_lease_additional_tenants_tenant_id_users',
        ),
    )

    op.create_table(
        'service_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('category', _enum(SERVICE_CATEGORIES, 'service_category'), nullable=False),
        sa.Column('priority', _enum(SERVICE_PRIORITIES, 'service_priority'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', _enum(SERVICE_REQUEST_STATUSES, 'service_request_status'), nullable=False),
        sa.Column('assigned_to_id', sa.Integer(), nullable=True),
        sa.Column('fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_service_requests'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_service_requests_tenant_id_users'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], name='fk_service_requests_unit_id_units'),
        sa.ForeignKeyConstraint(
            ['assigned_to_id'], ['users.id'],
            name='fk_service_requests_assigned_to_id_users',
        ),
    )
    op.create_index('ix_service_requests_tenant_id', 'service_requests', ['tenant_id'])
    op.create_index('ix_service_requests_unit_id', 'service_requests', ['unit_id'])
    op.create_index('ix_service_requests_assigned_to_id', 'service_requests', ['assigned_to_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('lease_id', sa.Integer(), nullable=True),
        sa.Column('service_request_id', sa.Integer(), nullable=True),
        sa.Column('type', _enum(PAYMENT_TYPES, 'payment_type'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_method', _enum(PAYMENT_METHODS, 'payment_method'), nullable=False),
        sa.Column('status', _enum(PAYMENT_STATUSES, 'payment_status'), nullable=False),
        sa.Column('transaction_id', sa.String(255), nullable=False),
        sa.Column('month', sa.Integer(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_payments'),
        sa.ForeignKeyConstraint(['tenant_id'], ['users.id'], name='fk_payments_tenant_id_users'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], name='fk_payments_unit_id_units'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], name='fk_payments_lease_id_leases'),
        sa.ForeignKeyConstraint(
            ['service_request_id'], ['service_requests.id'],
            name='fk_payments_service_request_id_service_requests',
        ),
        sa.CheckConstraint('amount >= 0', name='amount_non_negative'),
    )
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'], unique=True)
    op.create_index('ix_payments_lease_id', 'payments', ['lease_id'])
    op.create_index('ix_payments_created_at', 'payments', ['created_at'])
    op.create_index('ix_payments_tenant_type_status', 'payments', ['tenant_id', 'type', 'status'])
    op.create_index('ix_payments_unit_period', 'payments', ['unit_id', 'month', 'year'])


def downgrade() -> None:
    """Drop all ledger tables."""
    op.drop_table('payments')
    op.drop_table('service_requests')
    op.drop_table('lease_additional_tenants')
    op.drop_index('uq_leases_active_unit', table_name='leases')
    op.drop_index('uq_leases_active_tenant', table_name='leases')
    op.drop_table('leases')
    op.drop_table('manager_unit_assignments')
    op.drop_table('units')
    op.drop_table('users')
