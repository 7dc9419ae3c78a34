"""
Checkout return redirect.

The provider sends the customer here after checkout; the subscription is
synced on a best-effort basis and the customer is forwarded to the frontend.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from common.core.config import settings
from packages.subscriptions.dependencies import get_subscription_service
from packages.subscriptions.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/success", include_in_schema=False)
async def checkout_success(
    subscription_id: Optional[str] = None,
    status: Optional[str] = None,
    service: SubscriptionService = Depends(get_subscription_service),
):
    await service.handle_success_redirect(subscription_id, status)

    query = urlencode(
        {"subscription_id": subscription_id or "", "status": status or ""}
    )
    return RedirectResponse(
        url=f"{settings.frontend_base_url}/success.html?{query}", status_code=302
    )
