"""
Domain models produced by the reconciliation engine, identity resolver and sweeps.
"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from packages.subscriptions.models.domain.enums import (
    IdentityKey,
    SubscriptionStatus,
    WebhookAction,
    WebhookEventType,
)
from packages.subscriptions.models.domain.provider import ProviderSubscription
from packages.subscriptions.models.domain.subscription_record import SubscriptionRecord


class ReconciliationResult(BaseModel):
    """Canonical local state derived from provider state and the clock."""

    model_config = ConfigDict(frozen=True)

    is_premium: bool
    status: SubscriptionStatus


class Resolved(BaseModel):
    """An inbound event matched a stored record."""

    record: SubscriptionRecord
    matched_by: IdentityKey


class Unresolved(BaseModel):
    """No stored record matched any key the event carried."""

    attempted: list[IdentityKey] = Field(default_factory=list)


IdentityResolution = Union[Resolved, Unresolved]


class SweepReport(BaseModel):
    """Outcome counters for one sweep pass."""

    checked: int = 0
    updated: int = 0
    failed: int = 0

    def merge(self, other: "SweepReport") -> "SweepReport":
        return SweepReport(
            checked=self.checked + other.checked,
            updated=self.updated + other.updated,
            failed=self.failed + other.failed,
        )


class SyncOutcome(BaseModel):
    """Result of re-reconciling one record against a fresh provider fetch."""

    record: SubscriptionRecord
    subscription: ProviderSubscription
    updated: bool = False


class WebhookOutcome(BaseModel):
    """What applying one webhook event did to the store."""

    event_type: WebhookEventType
    action: WebhookAction
    resolved: bool = False
    updated: bool = False
    user_id: Optional[str] = None
    status: Optional[SubscriptionStatus] = None
