"""Unit tests for the webhook event classifier."""

import pytest

from packages.subscriptions.models.domain.enums import WebhookAction, WebhookEventType
from packages.subscriptions.services.webhook_classifier import EVENT_ACTIONS, classify


class TestWebhookClassifier:
    def test_every_event_type_has_an_action(self):
        assert set(EVENT_ACTIONS) == set(WebhookEventType)

    @pytest.mark.parametrize(
        "event_type",
        [
            "subscription.created",
            "subscription.active",
            "subscription.renewed",
            "payment.succeeded",
        ],
    )
    def test_activation_events(self, event_type):
        assert classify(WebhookEventType(event_type)) == WebhookAction.ACTIVATE

    @pytest.mark.parametrize(
        "event_type", ["subscription.cancelled", "subscription.expired"]
    )
    def test_cancellation_events(self, event_type):
        assert classify(WebhookEventType(event_type)) == WebhookAction.CANCEL

    def test_payment_failed(self):
        assert (
            classify(WebhookEventType.PAYMENT_FAILED)
            == WebhookAction.MARK_PAYMENT_FAILED
        )

    @pytest.mark.parametrize(
        "event_type",
        [
            "subscription.on_hold",
            "subscription.updated",
            "payment.processing",
            "refund.succeeded",
            "dispute.opened",
        ],
    )
    def test_other_events_are_ignored(self, event_type):
        assert classify(WebhookEventType(event_type)) == WebhookAction.IGNORE

    def test_unknown_event_type_parses_to_unknown(self):
        assert WebhookEventType("license_key.created") == WebhookEventType.UNKNOWN
