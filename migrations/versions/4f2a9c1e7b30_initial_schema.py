"""initial schema: users, subscriptions, notifications, workflow runs

Revision ID: 4f2a9c1e7b30
Revises: 
Create Date: 2026-10-19 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1e7b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('created_date', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_date', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tbl_users',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.String(length=5), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('last_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_audit_columns(),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    op.create_table(
        'tbl_subscriptions',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('tbl_users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('frequency', sa.String(length=7), nullable=False),
        sa.Column('category', sa.String(length=13), nullable=False),
        sa.Column('payment_method', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='active'),
        sa.Column('start_date', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('renewal_date', sa.TIMESTAMP(timezone=True), nullable=False),
        *_audit_columns(),
    )
    op.create_index('ix_subscriptions_user', 'tbl_subscriptions', ['user_id'])
    op.create_index('ix_subscriptions_status_renewal', 'tbl_subscriptions', ['status', 'renewal_date'])

    op.create_table(
        'tbl_notifications',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('tbl_users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('channel', sa.String(length=6), nullable=False, server_default='in_app'),
        sa.Column('recipient', sa.String(length=255), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('data', sa.Text(), nullable=True),
        sa.Column('read_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_audit_columns(),
    )
    op.create_index(
        'ix_notifications_user_unread',
        'tbl_notifications',
        ['user_id'],
        postgresql_where=sa.text('read_at IS NULL'),
    )

    op.create_table(
        'tbl_workflow_runs',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        sa.Column('workflow', sa.String(length=100), nullable=False),
        sa.Column('subscription_id', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=10), nullable=False, server_default='pending'),
        sa.Column('outcome', sa.String(length=32), nullable=True),
        sa.Column('payload', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('journal', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('result', sa.Text(), nullable=True),
        sa.Column('wake_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('wake_token', sa.String(length=64), nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index('ix_workflow_runs_subscription_status', 'tbl_workflow_runs', ['subscription_id', 'status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_workflow_runs_subscription_status', table_name='tbl_workflow_runs')
    op.drop_table('tbl_workflow_runs')
    op.drop_index('ix_notifications_user_unread', table_name='tbl_notifications')
    op.drop_table('tbl_notifications')
    op.drop_index('ix_subscriptions_status_renewal', table_name='tbl_subscriptions')
    op.drop_index('ix_subscriptions_user', table_name='tbl_subscriptions')
    op.drop_table('tbl_subscriptions')
    op.drop_table('tbl_users')
