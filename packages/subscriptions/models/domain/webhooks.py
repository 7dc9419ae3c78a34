"""
Domain models for provider webhook payloads.

Envelope: {"type": ..., "timestamp": ..., "data": {...}}. Subscription events
carry the subscription object in `data`; payment events carry the payment,
which references the subscription and, for first payments, the checkout
session.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator

from packages.subscriptions.models.domain.enums import WebhookEventType
from packages.subscriptions.models.domain.provider import ProviderCustomer


class WebhookEventData(BaseModel):
    """Event data; every field is optional because payment and subscription events differ."""

    model_config = ConfigDict(extra="ignore")

    subscription_id: Optional[str] = None
    payment_id: Optional[str] = None
    checkout_session_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("checkout_session_id", "session_id")
    )
    customer: ProviderCustomer = Field(default_factory=ProviderCustomer)
    status: Optional[str] = None
    next_billing_date: Optional[datetime] = None
    cancel_at_next_billing_date: Optional[bool] = None

    @field_validator("next_billing_date")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class WebhookPayload(BaseModel):
    """Complete provider webhook payload."""

    model_config = ConfigDict(extra="ignore")

    type: WebhookEventType
    business_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    data: WebhookEventData = Field(default_factory=WebhookEventData)
