"""Subscription repositories."""

from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)

__all__ = [
    "SubscriptionRecordRepository",
]
