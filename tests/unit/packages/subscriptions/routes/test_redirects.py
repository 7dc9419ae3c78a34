"""
Tests for the checkout success redirect.
"""

import pytest
from datetime import datetime, timedelta, timezone

from common.core.config import settings
from common.core.exceptions import ProviderError
from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)


@pytest.mark.asyncio
class TestSuccessRedirect:
    async def test_active_checkout_is_synced_and_redirected(
        self, client, make_record, mock_payment, provider_subscription
    ):
        await make_record(user_id="u1", email="a@b.com")
        mock_payment.get_subscription.return_value = provider_subscription(
            subscription_id="sub_1",
            next_billing_date=datetime.now(timezone.utc) + timedelta(days=30),
        )

        response = await client.get(
            "/success", params={"subscription_id": "sub_1", "status": "active"}
        )

        assert response.status_code == 302
        assert response.headers["location"] == (
            f"{settings.frontend_base_url}/success.html"
            "?subscription_id=sub_1&status=active"
        )
        record = await SubscriptionRecordRepository().get_by_user_id("u1")
        assert record.is_premium is True
        assert record.subscription_id == "sub_1"

    async def test_failed_checkout_is_only_redirected(self, client, mock_payment):
        response = await client.get(
            "/success", params={"subscription_id": "sub_1", "status": "failed"}
        )

        assert response.status_code == 302
        assert response.headers["location"].endswith(
            "?subscription_id=sub_1&status=failed"
        )
        mock_payment.get_subscription.assert_not_awaited()

    async def test_provider_error_still_redirects(self, client, mock_payment):
        mock_payment.get_subscription.side_effect = ProviderError("timed out")

        response = await client.get(
            "/success", params={"subscription_id": "sub_1", "status": "active"}
        )

        assert response.status_code == 302

    async def test_missing_params(self, client):
        response = await client.get("/success")

        assert response.status_code == 302
        assert response.headers["location"].endswith("?subscription_id=&status=")
