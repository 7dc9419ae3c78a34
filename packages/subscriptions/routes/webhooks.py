"""
Webhook endpoints for payment provider events.

Public endpoint (no auth required); the signature is validated internally.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from common.providers.rate_limiter.limiter import limiter
from packages.subscriptions.dependencies import get_subscription_service
from packages.subscriptions.services.subscription_service import SubscriptionService
from packages.subscriptions.webhooks.provider_webhook import handle_provider_webhook

router = APIRouter()


@router.post("/webhooks/provider")
@limiter.exempt
async def provider_webhook(
    request: Request,
    service: SubscriptionService = Depends(get_subscription_service),
) -> dict[str, Any]:
    """
    Receive webhook events from the payment provider.

    Always acknowledged once the signature checks out.
    """
    return await handle_provider_webhook(request, service)
