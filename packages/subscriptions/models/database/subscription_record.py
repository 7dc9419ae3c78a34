"""
Database entity for per-user subscription records.
"""

from sqlalchemy import Boolean, Column, Integer, String, Index
from sqlalchemy.sql import expression, func

from common.db.base import Base, UTCDateTime


class SubscriptionRecordEntity(Base):
    """
    User subscription database entity.

    One row per user, created as a bare identity row when a checkout starts and
    enriched once the provider confirms the subscription. Never hard-deleted.
    """

    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Identity
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(320), nullable=False, index=True)
    name = Column(String(255), nullable=True)

    # Provider IDs
    subscription_id = Column(String(255), nullable=True, unique=True, index=True)
    session_id = Column(String(255), nullable=True, index=True)  # checkout session
    product_id = Column(String(255), nullable=True)

    # Derived state
    is_premium = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    status = Column(
        String(50), nullable=False, default="free", server_default="free", index=True
    )  # free, active, cancelling, expired, payment_failed, ...
    next_billing_date = Column(UTCDateTime(), nullable=True)
    cancel_at_billing_date = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )

    # Standard timestamps
    created_at = Column(UTCDateTime(), server_default=func.now())
    updated_at = Column(UTCDateTime(), server_default=func.now())

    # Sweep queries filter on these
    __table_args__ = (
        Index(
            "idx_user_subscriptions_grace",
            "cancel_at_billing_date",
            "is_premium",
            "next_billing_date",
        ),
        Index("idx_user_subscriptions_next_billing", "next_billing_date"),
    )
