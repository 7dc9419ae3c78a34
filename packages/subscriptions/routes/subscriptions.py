"""
Subscription API routes.

Checkout, cancellation, status and admin sync endpoints. Domain errors from
the services are translated to HTTP errors here.
"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, status

from common.core.exceptions import (
    AppException,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from common.core.telemetry import get_logger
from common.providers.rate_limiter.limiter import limiter
from packages.subscriptions.dependencies import (
    get_subscription_service,
    get_sweep_service,
)
from packages.subscriptions.models.schemas.subscriptions import (
    CancelSubscriptionRequest,
    CancelSubscriptionResponse,
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    SubscriptionStateResponse,
    SubscriptionStatusResponse,
    SweepResponse,
    SyncSubscriptionRequest,
    SyncSubscriptionResponse,
)
from packages.subscriptions.services.subscription_service import SubscriptionService
from packages.subscriptions.services.sweep_service import SweepService

logger = get_logger(__name__)

router = APIRouter()


def _raise_http(e: AppException) -> NoReturn:
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ProviderError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    logger.error(f"Unhandled application error: {e}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error"
    )


# ============================================================================
# Checkout
# ============================================================================


@router.post("/create-subscription", response_model=CreateSubscriptionResponse)
@limiter.limit("20/minute")
async def create_subscription(
    request: Request,
    body: CreateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Start a provider checkout for a user.

    Upserts the user's identity row and returns the hosted checkout URL.
    """
    try:
        _, session = await service.create_subscription(
            user_id=body.user_id,
            email=body.email,
            name=body.name,
            product_id=body.product_id,
        )
    except AppException as e:
        _raise_http(e)

    return CreateSubscriptionResponse(
        checkout_url=session.checkout_url, session_id=session.session_id
    )


# ============================================================================
# Cancellation
# ============================================================================


@router.post("/cancel-subscription", response_model=CancelSubscriptionResponse)
async def cancel_subscription(
    body: CancelSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Cancel at the end of the current billing period."""
    try:
        record = await service.cancel_subscription(
            user_id=body.user_id, subscription_id=body.subscription_id
        )
    except AppException as e:
        _raise_http(e)

    return CancelSubscriptionResponse(
        message=f"Subscription {record.status.value}",
        record=SubscriptionStateResponse.from_record(record),
    )


# ============================================================================
# Status
# ============================================================================


@router.get("/user/{user_id}/status", response_model=SubscriptionStatusResponse)
async def get_user_status(
    user_id: str,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Current entitlement for a user.

    Syncs from the provider first when the stored billing date has passed.
    """
    try:
        record, subscription, synced = await service.get_status(user_id)
    except AppException as e:
        _raise_http(e)

    if not record.subscription_id:
        message = "No active subscription"
    elif synced:
        message = "Subscription synced from provider"
    elif subscription is None:
        message = "Provider unavailable, showing stored status"
    else:
        message = "Current subscription status"

    return SubscriptionStatusResponse(
        **SubscriptionStateResponse.from_record(record).model_dump(),
        subscription=subscription.raw if subscription else None,
        synced=synced,
        message=message,
    )


# ============================================================================
# Admin
# ============================================================================


@router.post("/check-expired-subscriptions", response_model=SweepResponse)
@limiter.limit("6/minute")
async def check_expired_subscriptions(
    request: Request,
    sweep_service: SweepService = Depends(get_sweep_service),
):
    """Run one sweep tick now."""
    report = await sweep_service.run_once()
    return SweepResponse(
        checked=report.checked, updated=report.updated, failed=report.failed
    )


@router.post(
    "/sync-subscription/{subscription_id}", response_model=SyncSubscriptionResponse
)
@limiter.limit("20/minute")
async def sync_subscription(
    request: Request,
    subscription_id: str,
    body: SyncSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Re-fetch one subscription from the provider and reconcile it."""
    logger.info(
        f"Manual sync requested for {subscription_id}",
        extra={"subscription_id": subscription_id},
    )
    try:
        outcome = await service.sync_from_provider(subscription_id, email=body.email)
    except AppException as e:
        _raise_http(e)

    return SyncSubscriptionResponse(
        message=f"Subscription synced: {outcome.record.status.value}",
        updated=outcome.updated,
        record=SubscriptionStateResponse.from_record(outcome.record),
        subscription=outcome.subscription.raw,
    )
