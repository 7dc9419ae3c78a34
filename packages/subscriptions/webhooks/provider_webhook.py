"""
Payment provider webhook handler.

Deliveries are signed per the Standard Webhooks scheme (webhook-id,
webhook-timestamp and webhook-signature headers). Once a delivery is
authenticated it is always acknowledged with 200, even when the payload is
malformed, the customer cannot be matched or processing fails, so the
provider never enters a redelivery storm. Drift is corrected by the sweep.
"""

import base64
import binascii
import hashlib
import hmac
import time
from typing import Any, Mapping, Optional

from fastapi import HTTPException, Request, status
from pydantic import ValidationError

from common.core.config import settings
from common.core.constants import WEBHOOK_TIMESTAMP_TOLERANCE_SECONDS
from common.core.telemetry import get_logger
from packages.subscriptions.models.domain.webhooks import WebhookPayload
from packages.subscriptions.services.subscription_service import SubscriptionService

logger = get_logger(__name__)

_SECRET_PREFIX = "whsec_"


def _secret_key(secret: str) -> bytes:
    raw = secret.removeprefix(_SECRET_PREFIX)
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        return raw.encode("utf-8")


def sign_payload(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Base64 HMAC-SHA256 over `{id}.{timestamp}.{body}`."""
    signed = f"{msg_id}.{timestamp}.".encode("utf-8") + body
    digest = hmac.new(_secret_key(secret), signed, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(
    body: bytes,
    headers: Mapping[str, str],
    secret: Optional[str] = None,
    now: Optional[float] = None,
) -> None:
    """
    Validate a webhook delivery if a secret is configured.

    Raises:
        HTTPException: 401 when headers are missing, the timestamp is outside
            the tolerance window or no signature matches
    """
    secret = settings.provider_webhook_secret if secret is None else secret
    if not secret:
        return

    msg_id = headers.get("webhook-id")
    timestamp = headers.get("webhook-timestamp")
    signature_header = headers.get("webhook-signature")
    if not msg_id or not timestamp or not signature_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing webhook signature headers",
        )

    try:
        sent_at = int(timestamp)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook timestamp",
        )
    current = time.time() if now is None else now
    if abs(current - sent_at) > WEBHOOK_TIMESTAMP_TOLERANCE_SECONDS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Webhook timestamp outside tolerance",
        )

    expected = sign_payload(secret, msg_id, timestamp, body)
    # Header holds space-separated "v1,<signature>" entries
    for entry in signature_header.split():
        version, _, provided = entry.partition(",")
        if version == "v1" and hmac.compare_digest(provided, expected):
            return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature"
    )


async def handle_provider_webhook(
    request: Request, service: SubscriptionService
) -> dict[str, Any]:
    """Verify, parse and apply a provider webhook delivery."""
    body = await request.body()
    verify_signature(body, request.headers)

    try:
        payload = WebhookPayload.model_validate_json(body)
    except ValidationError as e:
        logger.error(
            "Invalid provider webhook payload",
            extra={"validation_errors": e.errors(include_url=False)},
        )
        return {"received": True, "processed": False}

    logger.info(
        f"Received provider webhook: {payload.type.value}",
        extra={
            "event_type": payload.type.value,
            "subscription_id": payload.data.subscription_id,
            "customer_email": payload.data.customer.email,
            "status": payload.data.status,
        },
    )

    try:
        outcome = await service.apply_webhook(payload)
    except Exception as e:
        logger.error(
            f"Failed to process provider webhook: {str(e)}",
            exc_info=True,
            extra={"event_type": payload.type.value, "error": str(e)},
        )
        return {"received": True, "processed": False}

    return {
        "received": True,
        "processed": outcome.resolved,
        "action": outcome.action.value,
        "updated": outcome.updated,
    }
