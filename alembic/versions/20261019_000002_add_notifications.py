"""Add notifications

Revision ID: 20261019_000002
Revises: 20261019_000001
Create Date: 2026-10-19

In-app notifications for payment receipts, payment failures and rent
due notices.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000002'
down_revision: Union[str, None] = '20261019_000001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOTIFICATION_TYPES = ('payment_due', 'payment_received', 'payment_failed')
NOTIFICATION_PRIORITIES = ('low', 'normal', 'high')


def upgrade() -> None:
    """Create notifications table."""
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column(
            'type',
            sa.Enum(*NOTIFICATION_TYPES, name='notification_type', create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            'priority',
            sa.Enum(*NOTIFICATION_PRIORITIES, name='notification_priority', create_constraint=True),
            nullable=False,
        ),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=True),
        sa.Column('lease_id', sa.Integer(), nullable=True),
        sa.Column('period_year', sa.Integer(), nullable=True),
        sa.Column('period_month', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], name='fk_notifications_recipient_id_users'),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id'], name='fk_notifications_payment_id_payments'),
        sa.ForeignKeyConstraint(['lease_id'], ['leases.id'], name='fk_notifications_lease_id_leases'),
    )
    op.create_index(
        'ix_notifications_recipient_read_created', 'notifications',
        ['recipient_id', 'is_read', 'created_at'],
    )
    op.create_index(
        'ix_notifications_lease_period', 'notifications',
        ['lease_id', 'period_year', 'period_month'],
    )


def downgrade() -> None:
    """Drop notifications table."""
    op.drop_index('ix_notifications_lease_period', table_name='notifications')
    op.drop_index('ix_notifications_recipient_read_created', table_name='notifications')
    op.drop_table('notifications')
