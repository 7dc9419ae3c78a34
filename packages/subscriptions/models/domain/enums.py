"""
Subscription enums - strongly typed enumerations for provider and local states.
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Local subscription status lifecycle.

    Flow: free -> active -> cancelling -> expired, with renewals looping back
    to active. Non-entitling provider states are mirrored as-is.
    """

    FREE = "free"  # Identity row only, no confirmed subscription
    ACTIVE = "active"  # Paid and renewing
    CANCELLING = "cancelling"  # Cancellation requested, grace period running
    EXPIRED = "expired"  # Grace period over or cancelled immediately
    PAYMENT_FAILED = "payment_failed"  # Last charge failed, entitlement untouched

    # Mirrored provider states (never entitling)
    PENDING = "pending"
    ON_HOLD = "on_hold"
    PAUSED = "paused"
    FAILED = "failed"


class ProviderSubscriptionStatus(str, Enum):
    """Subscription status values reported by the payment provider."""

    PENDING = "pending"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    FAILED = "failed"
    EXPIRED = "expired"


class WebhookEventType(str, Enum):
    """Provider webhook event types."""

    SUBSCRIPTION_CREATED = "subscription.created"
    SUBSCRIPTION_ACTIVE = "subscription.active"
    SUBSCRIPTION_RENEWED = "subscription.renewed"
    SUBSCRIPTION_CANCELLED = "subscription.cancelled"
    SUBSCRIPTION_EXPIRED = "subscription.expired"
    SUBSCRIPTION_ON_HOLD = "subscription.on_hold"
    SUBSCRIPTION_FAILED = "subscription.failed"
    SUBSCRIPTION_UPDATED = "subscription.updated"
    SUBSCRIPTION_PLAN_CHANGED = "subscription.plan_changed"

    PAYMENT_SUCCEEDED = "payment.succeeded"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_PROCESSING = "payment.processing"
    PAYMENT_CANCELLED = "payment.cancelled"

    UNKNOWN = "unknown"  # Anything the provider adds later

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


class WebhookAction(str, Enum):
    """What a webhook event does to the local record."""

    ACTIVATE = "activate"
    CANCEL = "cancel"
    MARK_PAYMENT_FAILED = "mark_payment_failed"
    IGNORE = "ignore"


class IdentityKey(str, Enum):
    """Keys an inbound event can be matched on, in resolution order."""

    SUBSCRIPTION_ID = "subscription_id"
    EMAIL = "email"
    SESSION_ID = "session_id"
