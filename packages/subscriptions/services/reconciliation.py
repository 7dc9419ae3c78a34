"""
Subscription state reconciliation engine.

Maps the provider's subscription status vocabulary onto the local status model:

    provider status   cancel pending   billing date      -> is_premium, status
    ---------------   --------------   ---------------      -------------------
    active            no               any                  True,  active
    active            yes              > now                True,  cancelling
    active            yes              <= now / missing     False, expired
    cancelled         any              any                  False, expired
    paused, pending,  any              any                  False, <mirrored>
    on_hold, failed,
    expired
    missing           any              any                  False, free
    unrecognised      any              any                  False, free

A failed payment overlays `payment_failed` on top of whatever the record
currently holds without touching entitlement.

Every caller (status query, sweeps, webhook handling) goes through these
functions so the grace-period tie-break lives in exactly one place.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from common.core.telemetry import get_logger
from packages.subscriptions.models.domain.enums import (
    ProviderSubscriptionStatus,
    SubscriptionStatus,
)
from packages.subscriptions.models.domain.provider import ProviderSubscription
from packages.subscriptions.models.domain.reconciliation import ReconciliationResult
from packages.subscriptions.models.domain.subscription_record import (
    SubscriptionRecord,
    SubscriptionRecordUpdateModel,
)

logger = get_logger(__name__)

Clock = Callable[[], datetime]

# Provider states mirrored verbatim; none of them entitle
_MIRRORED_STATUSES = {
    ProviderSubscriptionStatus.PENDING: SubscriptionStatus.PENDING,
    ProviderSubscriptionStatus.ON_HOLD: SubscriptionStatus.ON_HOLD,
    ProviderSubscriptionStatus.PAUSED: SubscriptionStatus.PAUSED,
    ProviderSubscriptionStatus.FAILED: SubscriptionStatus.FAILED,
    ProviderSubscriptionStatus.EXPIRED: SubscriptionStatus.EXPIRED,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_grace_period_active(next_billing_date: Optional[datetime], now: datetime) -> bool:
    """
    Whether a pending cancellation still entitles the user.

    Strict comparison: a billing date equal to `now` has already expired.
    """
    return next_billing_date is not None and next_billing_date > now


def _parse_provider_status(
    provider_status: Optional[str],
) -> Optional[ProviderSubscriptionStatus]:
    if provider_status is None:
        return None
    try:
        return ProviderSubscriptionStatus(provider_status.strip().lower())
    except ValueError:
        return None


def reconcile(
    provider_status: Optional[str],
    cancel_pending: bool,
    next_billing_date: Optional[datetime],
    now: datetime,
) -> ReconciliationResult:
    """Compute canonical `(is_premium, status)` from provider state at instant `now`."""
    parsed = _parse_provider_status(provider_status)

    if parsed == ProviderSubscriptionStatus.ACTIVE:
        if not cancel_pending:
            return ReconciliationResult(
                is_premium=True, status=SubscriptionStatus.ACTIVE
            )
        if is_grace_period_active(next_billing_date, now):
            return ReconciliationResult(
                is_premium=True, status=SubscriptionStatus.CANCELLING
            )
        return ReconciliationResult(is_premium=False, status=SubscriptionStatus.EXPIRED)

    if parsed == ProviderSubscriptionStatus.CANCELLED:
        return ReconciliationResult(is_premium=False, status=SubscriptionStatus.EXPIRED)

    if parsed is not None:
        return ReconciliationResult(
            is_premium=False, status=_MIRRORED_STATUSES[parsed]
        )

    if provider_status:
        logger.warning(
            f"Unrecognised provider status '{provider_status}', treating as free",
            extra={"provider_status": provider_status},
        )
    return ReconciliationResult(is_premium=False, status=SubscriptionStatus.FREE)


def reconcile_provider_subscription(
    subscription: ProviderSubscription, now: datetime
) -> ReconciliationResult:
    return reconcile(
        subscription.status,
        subscription.cancel_at_next_billing_date,
        subscription.next_billing_date,
        now,
    )


def reconcile_cancellation(
    next_billing_date: Optional[datetime], now: datetime
) -> ReconciliationResult:
    """
    Outcome of a cancellation signal.

    With a known billing date the grace-period rule applies; without one the
    cancellation is immediate.
    """
    if next_billing_date is None:
        return reconcile(ProviderSubscriptionStatus.CANCELLED.value, True, None, now)
    return reconcile(
        ProviderSubscriptionStatus.ACTIVE.value, True, next_billing_date, now
    )


def reconcile_stored_record(
    record: SubscriptionRecord, now: datetime
) -> Optional[ReconciliationResult]:
    """
    Re-evaluate a stored record against the clock alone.

    Only pending cancellations change with time; every other record returns
    None (nothing to derive without fresh provider data).
    """
    if not record.cancel_at_billing_date:
        return None
    if record.status not in (SubscriptionStatus.CANCELLING, SubscriptionStatus.ACTIVE):
        return None
    return reconcile(
        ProviderSubscriptionStatus.ACTIVE.value, True, record.next_billing_date, now
    )


def apply_payment_failure(is_premium: bool) -> ReconciliationResult:
    """Failed charge: mark the status, keep entitlement as it was."""
    return ReconciliationResult(
        is_premium=is_premium, status=SubscriptionStatus.PAYMENT_FAILED
    )


def needs_update(
    record: SubscriptionRecord, changes: SubscriptionRecordUpdateModel
) -> bool:
    """
    Whether writing `changes` would alter the stored record.

    `updated_at` is ignored so a redelivered event is a no-op.
    """
    for field, value in changes.model_dump(exclude_unset=True).items():
        if field == "updated_at":
            continue
        current = getattr(record, field)
        if isinstance(current, SubscriptionStatus):
            current = current.value
        if current != value:
            return True
    return False


def build_update(
    result: ReconciliationResult,
    now: datetime,
    **fields,
) -> SubscriptionRecordUpdateModel:
    """
    Update model carrying a reconciliation result plus any extra record fields.

    Extra fields passed as None are left out so unknown values never blank
    out what is stored.
    """
    return SubscriptionRecordUpdateModel(
        is_premium=result.is_premium,
        status=result.status,
        updated_at=now,
        **{key: value for key, value in fields.items() if value is not None},
    )
