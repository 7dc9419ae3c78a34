"""
Domain models for payment provider responses.

Only the fields this service reads are modelled; everything else the provider
returns is kept on `raw` so the status endpoint can hand it back untouched.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderCustomer(BaseModel):
    """Customer block embedded in provider subscriptions and webhook data."""

    model_config = ConfigDict(extra="ignore")

    customer_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class ProviderSubscription(BaseModel):
    """Subscription as returned by GET/PATCH /subscriptions/{id}."""

    model_config = ConfigDict(extra="ignore")

    subscription_id: str
    status: Optional[str] = None  # Unrecognised values are kept verbatim
    cancel_at_next_billing_date: bool = False
    next_billing_date: Optional[datetime] = None
    customer: ProviderCustomer = Field(default_factory=ProviderCustomer)
    product_id: Optional[str] = None

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @field_validator("next_billing_date")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("cancel_at_next_billing_date", mode="before")
    @classmethod
    def none_is_false(cls, v):
        return bool(v)

    @classmethod
    def from_response(cls, payload: dict[str, Any]) -> "ProviderSubscription":
        subscription = cls.model_validate(payload)
        subscription.raw = payload
        return subscription


class CheckoutSession(BaseModel):
    """Checkout session created via POST /checkouts."""

    model_config = ConfigDict(extra="ignore")

    session_id: str
    checkout_url: str
