"""
Tests for provider webhook verification and the webhook endpoint.
"""

import base64
import json
import time

import pytest
from fastapi import HTTPException

from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)
from packages.subscriptions.webhooks.provider_webhook import (
    sign_payload,
    verify_signature,
)

SECRET = "whsec_" + base64.b64encode(b"super-secret-signing-key").decode()
SETTINGS_SECRET = "common.core.config.settings.provider_webhook_secret"


def _signed_headers(body: bytes, secret: str = SECRET, timestamp=None) -> dict:
    timestamp = str(int(time.time()) if timestamp is None else timestamp)
    signature = sign_payload(secret, "msg_1", timestamp, body)
    return {
        "webhook-id": "msg_1",
        "webhook-timestamp": timestamp,
        "webhook-signature": f"v1,{signature}",
        "content-type": "application/json",
    }


def _event(event_type: str, **data) -> bytes:
    return json.dumps(
        {"business_id": "biz_1", "type": event_type, "data": data}
    ).encode()


class TestVerifySignature:
    def test_valid_signature(self):
        body = b'{"type":"subscription.active"}'

        verify_signature(body, _signed_headers(body), secret=SECRET)

    def test_one_of_several_signatures_matches(self):
        body = b"{}"
        headers = _signed_headers(body)
        headers["webhook-signature"] = f"v1,bogus {headers['webhook-signature']}"

        verify_signature(body, headers, secret=SECRET)

    def test_tampered_body(self):
        headers = _signed_headers(b'{"a":1}')

        with pytest.raises(HTTPException) as exc_info:
            verify_signature(b'{"a":2}', headers, secret=SECRET)

        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        body = b"{}"
        other = "whsec_" + base64.b64encode(b"another-key").decode()

        with pytest.raises(HTTPException):
            verify_signature(body, _signed_headers(body, secret=other), secret=SECRET)

    def test_missing_headers(self):
        with pytest.raises(HTTPException) as exc_info:
            verify_signature(b"{}", {}, secret=SECRET)

        assert exc_info.value.status_code == 401

    def test_non_numeric_timestamp(self):
        headers = _signed_headers(b"{}")
        headers["webhook-timestamp"] = "yesterday"

        with pytest.raises(HTTPException):
            verify_signature(b"{}", headers, secret=SECRET)

    @pytest.mark.parametrize("skew", [-301, 301])
    def test_timestamp_outside_tolerance(self, skew):
        now = 1_800_000_000
        body = b"{}"
        headers = _signed_headers(body, timestamp=now + skew)

        with pytest.raises(HTTPException):
            verify_signature(body, headers, secret=SECRET, now=now)

    def test_timestamp_within_tolerance(self):
        now = 1_800_000_000
        body = b"{}"

        verify_signature(body, _signed_headers(body, timestamp=now - 299), SECRET, now)

    def test_no_secret_skips_verification(self):
        verify_signature(b"{}", {}, secret="")

    def test_raw_secret_without_prefix(self):
        body = b"{}"
        secret = "not base64!"

        verify_signature(body, _signed_headers(body, secret=secret), secret=secret)


@pytest.mark.asyncio
class TestProviderWebhookEndpoint:
    async def test_signed_event_is_applied(self, client, make_record, monkeypatch):
        monkeypatch.setattr(SETTINGS_SECRET, SECRET)
        await make_record(user_id="u1", email="a@b.com")
        body = _event(
            "subscription.active",
            subscription_id="sub_1",
            customer={"email": "a@b.com"},
            next_billing_date="2099-01-01T00:00:00Z",
            status="active",
        )

        response = await client.post(
            "/api/webhooks/provider", content=body, headers=_signed_headers(body)
        )

        assert response.status_code == 200
        assert response.json() == {
            "received": True,
            "processed": True,
            "action": "activate",
            "updated": True,
        }
        record = await SubscriptionRecordRepository().get_by_user_id("u1")
        assert record.is_premium is True
        assert record.subscription_id == "sub_1"

    async def test_bad_signature_is_rejected(self, client, make_record, monkeypatch):
        monkeypatch.setattr(SETTINGS_SECRET, SECRET)
        await make_record(user_id="u1", email="a@b.com")
        body = _event("subscription.active", customer={"email": "a@b.com"})
        headers = _signed_headers(body)
        headers["webhook-signature"] = "v1,AAAA"

        response = await client.post(
            "/api/webhooks/provider", content=body, headers=headers
        )

        assert response.status_code == 401
        record = await SubscriptionRecordRepository().get_by_user_id("u1")
        assert record.is_premium is False

    async def test_unsigned_event_accepted_without_secret(
        self, client, make_record, monkeypatch
    ):
        monkeypatch.setattr(SETTINGS_SECRET, "")
        await make_record(
            user_id="u1", subscription_id="sub_1", is_premium=True, status="active"
        )

        response = await client.post(
            "/api/webhooks/provider",
            content=_event("payment.failed", subscription_id="sub_1"),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["action"] == "mark_payment_failed"
        record = await SubscriptionRecordRepository().get_by_user_id("u1")
        assert record.status == "payment_failed"
        assert record.is_premium is True

    async def test_malformed_payload_is_acknowledged(self, client, monkeypatch):
        monkeypatch.setattr(SETTINGS_SECRET, "")

        response = await client.post(
            "/api/webhooks/provider",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True, "processed": False}

    async def test_unknown_customer_is_acknowledged(self, client, monkeypatch):
        monkeypatch.setattr(SETTINGS_SECRET, "")

        response = await client.post(
            "/api/webhooks/provider",
            content=_event(
                "subscription.cancelled",
                subscription_id="sub_x",
                customer={"email": "stranger@b.com"},
            ),
        )

        assert response.status_code == 200
        assert response.json()["processed"] is False

    async def test_unknown_event_type_is_ignored(self, client, monkeypatch):
        monkeypatch.setattr(SETTINGS_SECRET, "")

        response = await client.post(
            "/api/webhooks/provider",
            content=_event("dispute.opened", payment_id="pay_1"),
        )

        assert response.status_code == 200
        assert response.json()["action"] == "ignore"
