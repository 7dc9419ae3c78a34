"""
Webhook event classifier.

Maps each provider event type to the action it has on the local record. The
table must cover every WebhookEventType member; adding an event type without
deciding its action fails at import time.
"""

from packages.subscriptions.models.domain.enums import WebhookAction, WebhookEventType

EVENT_ACTIONS: dict[WebhookEventType, WebhookAction] = {
    WebhookEventType.SUBSCRIPTION_CREATED: WebhookAction.ACTIVATE,
    WebhookEventType.SUBSCRIPTION_ACTIVE: WebhookAction.ACTIVATE,
    WebhookEventType.SUBSCRIPTION_RENEWED: WebhookAction.ACTIVATE,
    WebhookEventType.PAYMENT_SUCCEEDED: WebhookAction.ACTIVATE,
    WebhookEventType.SUBSCRIPTION_CANCELLED: WebhookAction.CANCEL,
    WebhookEventType.SUBSCRIPTION_EXPIRED: WebhookAction.CANCEL,
    WebhookEventType.PAYMENT_FAILED: WebhookAction.MARK_PAYMENT_FAILED,
    # Informational for us; status changes arrive through the events above
    # or the drift sweep
    WebhookEventType.SUBSCRIPTION_ON_HOLD: WebhookAction.IGNORE,
    WebhookEventType.SUBSCRIPTION_FAILED: WebhookAction.IGNORE,
    WebhookEventType.SUBSCRIPTION_UPDATED: WebhookAction.IGNORE,
    WebhookEventType.SUBSCRIPTION_PLAN_CHANGED: WebhookAction.IGNORE,
    WebhookEventType.PAYMENT_PROCESSING: WebhookAction.IGNORE,
    WebhookEventType.PAYMENT_CANCELLED: WebhookAction.IGNORE,
    WebhookEventType.UNKNOWN: WebhookAction.IGNORE,
}

_unmapped = set(WebhookEventType) - set(EVENT_ACTIONS)
if _unmapped:
    raise RuntimeError(
        f"Webhook event types without an action: {sorted(e.value for e in _unmapped)}"
    )


def classify(event_type: WebhookEventType) -> WebhookAction:
    """Return the action for an event type."""
    return EVENT_ACTIONS[event_type]
