"""Subscription services."""

from packages.subscriptions.services.subscription_service import SubscriptionService
from packages.subscriptions.services.sweep_service import SweepService

__all__ = [
    "SubscriptionService",
    "SweepService",
]
