"""Domain models for subscriptions."""

from packages.subscriptions.models.domain.enums import (
    SubscriptionStatus,
    ProviderSubscriptionStatus,
    WebhookEventType,
    WebhookAction,
    IdentityKey,
)
from packages.subscriptions.models.domain.subscription_record import (
    SubscriptionRecord,
    SubscriptionRecordCreateModel,
    SubscriptionRecordUpdateModel,
)
from packages.subscriptions.models.domain.provider import (
    ProviderCustomer,
    ProviderSubscription,
    CheckoutSession,
)
from packages.subscriptions.models.domain.reconciliation import (
    ReconciliationResult,
    Resolved,
    Unresolved,
    IdentityResolution,
    SweepReport,
    SyncOutcome,
    WebhookOutcome,
)
from packages.subscriptions.models.domain.webhooks import (
    WebhookEventData,
    WebhookPayload,
)

__all__ = [
    # Enums
    "SubscriptionStatus",
    "ProviderSubscriptionStatus",
    "WebhookEventType",
    "WebhookAction",
    "IdentityKey",
    # Records
    "SubscriptionRecord",
    "SubscriptionRecordCreateModel",
    "SubscriptionRecordUpdateModel",
    # Provider
    "ProviderCustomer",
    "ProviderSubscription",
    "CheckoutSession",
    # Reconciliation
    "ReconciliationResult",
    "Resolved",
    "Unresolved",
    "IdentityResolution",
    "SweepReport",
    "SyncOutcome",
    "WebhookOutcome",
    # Webhooks
    "WebhookEventData",
    "WebhookPayload",
]
