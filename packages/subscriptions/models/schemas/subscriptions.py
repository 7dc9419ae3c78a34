"""
API schemas for subscription operations.

Request bodies accept the camelCase keys the frontend sends; responses are
snake_case like the provider payloads they sit next to.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.subscriptions.models.domain.enums import SubscriptionStatus
from packages.subscriptions.models.domain.subscription_record import SubscriptionRecord


class _CamelRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ============================================================================
# Checkout Schemas
# ============================================================================


class CreateSubscriptionRequest(_CamelRequest):
    """Request to start a subscription checkout."""

    user_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: Optional[str] = None
    product_id: Optional[str] = Field(
        default=None, description="Falls back to DEFAULT_PRODUCT_ID when omitted"
    )


class CreateSubscriptionResponse(BaseModel):
    """Response with the provider checkout URL."""

    success: bool = True
    checkout_url: str = Field(..., description="Provider hosted checkout URL")
    session_id: str


# ============================================================================
# Subscription State Schemas
# ============================================================================


class SubscriptionStateResponse(BaseModel):
    """Stored entitlement state for one user."""

    user_id: str
    email: str
    subscription_id: Optional[str] = None
    is_premium: bool
    status: SubscriptionStatus
    next_billing_date: Optional[datetime] = None
    cancel_at_billing_date: bool = False

    @classmethod
    def from_record(cls, record: SubscriptionRecord) -> "SubscriptionStateResponse":
        return cls(
            user_id=record.user_id,
            email=record.email,
            subscription_id=record.subscription_id,
            is_premium=record.is_premium,
            status=record.status,
            next_billing_date=record.next_billing_date,
            cancel_at_billing_date=record.cancel_at_billing_date,
        )


class SubscriptionStatusResponse(SubscriptionStateResponse):
    """Entitlement plus the provider's subscription payload, when fetched."""

    subscription: Optional[dict[str, Any]] = None
    synced: bool = False
    message: str


# ============================================================================
# Cancellation Schemas
# ============================================================================


class CancelSubscriptionRequest(_CamelRequest):
    """Request to cancel at the end of the current billing period."""

    user_id: str = Field(..., min_length=1)
    subscription_id: str = Field(..., min_length=1)


class CancelSubscriptionResponse(BaseModel):
    """Response after requesting cancellation."""

    success: bool = True
    message: str
    record: SubscriptionStateResponse


# ============================================================================
# Sync & Sweep Schemas
# ============================================================================


class SyncSubscriptionRequest(_CamelRequest):
    """Manual provider sync for one subscription."""

    email: str = Field(..., min_length=3)


class SyncSubscriptionResponse(BaseModel):
    """Response after a manual sync."""

    success: bool = True
    message: str
    updated: bool
    record: SubscriptionStateResponse
    subscription: dict[str, Any]


class SweepResponse(BaseModel):
    """Counters for a forced sweep tick."""

    success: bool = True
    checked: int
    updated: int
    failed: int
