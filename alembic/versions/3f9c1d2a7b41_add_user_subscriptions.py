"""add_user_subscriptions

Revision ID: 3f9c1d2a7b41
Revises:
Create Date: 2026-10-19 10:12:44.281305

Adds the per-user subscription table mirrored from the payment provider.

Tables:
- user_subscriptions: one row per user; identity, provider ids, and the
  entitlement state derived by the reconciliation engine
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1d2a7b41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create user_subscriptions with sweep indexes."""
    op.create_table(
        'user_subscriptions',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),

        # Identity
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),

        # Provider IDs (subscription_id is null until the first confirmed checkout)
        sa.Column('subscription_id', sa.String(255), nullable=True),
        sa.Column('session_id', sa.String(255), nullable=True),
        sa.Column('product_id', sa.String(255), nullable=True),

        # Derived state
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(50), nullable=False, server_default='free'),
        sa.Column('next_billing_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancel_at_billing_date', sa.Boolean(), nullable=False, server_default=sa.false()),

        # Standard timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),

        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index('ix_user_subscriptions_id', 'user_subscriptions', ['id'])
    op.create_index('ix_user_subscriptions_user_id', 'user_subscriptions', ['user_id'], unique=True)
    op.create_index('ix_user_subscriptions_email', 'user_subscriptions', ['email'])
    op.create_index('ix_user_subscriptions_subscription_id', 'user_subscriptions', ['subscription_id'], unique=True)
    op.create_index('ix_user_subscriptions_session_id', 'user_subscriptions', ['session_id'])
    op.create_index('ix_user_subscriptions_status', 'user_subscriptions', ['status'])

    # Sweep queries
    op.create_index(
        'idx_user_subscriptions_grace',
        'user_subscriptions',
        ['cancel_at_billing_date', 'is_premium', 'next_billing_date'],
    )
    op.create_index('idx_user_subscriptions_next_billing', 'user_subscriptions', ['next_billing_date'])


def downgrade() -> None:
    """Drop user_subscriptions."""
    op.drop_index('idx_user_subscriptions_next_billing', table_name='user_subscriptions')
    op.drop_index('idx_user_subscriptions_grace', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_status', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_session_id', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_subscription_id', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_email', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_user_id', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_id', table_name='user_subscriptions')
    op.drop_table('user_subscriptions')
