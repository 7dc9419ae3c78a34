"""
Domain models for subscription records.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from packages.subscriptions.models.domain.enums import SubscriptionStatus


class SubscriptionRecord(BaseModel):
    """
    Per-user subscription domain model.

    `is_premium` is the only field that gates features; `status` is derived by
    the reconciliation engine and never set ad hoc.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    email: str
    name: Optional[str] = None

    subscription_id: Optional[str] = None
    session_id: Optional[str] = None
    product_id: Optional[str] = None

    is_premium: bool = False
    status: SubscriptionStatus = SubscriptionStatus.FREE
    next_billing_date: Optional[datetime] = None
    cancel_at_billing_date: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def billing_date_passed(self, now: datetime) -> bool:
        """True when the stored billing date is at or before `now`."""
        return self.next_billing_date is not None and self.next_billing_date <= now


class SubscriptionRecordCreateModel(BaseModel):
    """Model for creating the bare identity row at checkout time."""

    user_id: str
    email: str
    name: Optional[str] = None
    session_id: Optional[str] = None
    product_id: Optional[str] = None
    status: str = SubscriptionStatus.FREE.value
    is_premium: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubscriptionRecordUpdateModel(BaseModel):
    """Model for updating a subscription record. Only set fields are written."""

    email: Optional[str] = None
    name: Optional[str] = None

    subscription_id: Optional[str] = None
    session_id: Optional[str] = None
    product_id: Optional[str] = None

    is_premium: Optional[bool] = None
    status: Optional[str] = None
    next_billing_date: Optional[datetime] = None
    cancel_at_billing_date: Optional[bool] = None

    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, SubscriptionStatus):
            return v.value
        return v
