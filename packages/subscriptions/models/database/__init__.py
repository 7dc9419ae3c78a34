"""Database models for subscriptions."""

from packages.subscriptions.models.database.subscription_record import (
    SubscriptionRecordEntity,
)

__all__ = [
    "SubscriptionRecordEntity",
]
