"""
Dodo Payments implementation of payment provider.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Optional, TypeVar
import httpx
from pydantic import ValidationError

from common.core.config import settings
from common.core.exceptions import ProviderError
from common.core.telemetry import trace_span, get_logger
from packages.subscriptions.models.domain.provider import (
    CheckoutSession,
    ProviderSubscription,
)
from packages.subscriptions.providers.payment.interface import PaymentProviderInterface

logger = get_logger(__name__)

T = TypeVar("T")


class DodoPaymentProvider(PaymentProviderInterface):
    """Dodo Payments REST API over httpx."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Bearer token (default: PROVIDER_API_KEY)
            base_url: API root, test or live (default: PROVIDER_BASE_URL)
            timeout: Per-request timeout in seconds
            client: Shared client; a short-lived one is opened per call otherwise
        """
        self.api_key = api_key if api_key is not None else settings.provider_api_key
        self.base_url = (base_url or settings.provider_base_url).rstrip("/")
        self.timeout = timeout or settings.provider_timeout_seconds
        self._client = client

    @asynccontextmanager
    async def _get_client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient() as client:
                yield client

    async def _request(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        try:
            async with self._get_client() as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=json,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Provider returned {e.response.status_code} for {method} {path}",
                extra={
                    "status_code": e.response.status_code,
                    "body": e.response.text[:500],
                },
            )
            raise ProviderError(
                f"Provider request failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Provider request timed out: {method} {path}")
            raise ProviderError("Provider request timed out") from e
        except httpx.HTTPError as e:
            logger.error(
                f"Provider request failed: {method} {path}: {str(e)}",
                extra={"error": str(e)},
            )
            raise ProviderError(f"Provider request failed: {str(e)}") from e
        except ValueError as e:
            raise ProviderError("Provider returned a non-JSON response") from e

    @staticmethod
    def _parse(parse: Callable[[Any], T], data: Any, what: str) -> T:
        try:
            return parse(data)
        except ValidationError as e:
            logger.error(
                f"Unexpected provider response for {what}",
                extra={"validation_errors": e.errors(include_url=False)},
            )
            raise ProviderError("Provider returned an unexpected response") from e

    @trace_span
    async def create_checkout_session(
        self,
        product_id: str,
        customer_email: str,
        return_url: str,
        customer_name: Optional[str] = None,
    ) -> CheckoutSession:
        data = await self._request(
            "POST",
            "/checkouts",
            json={
                "product_cart": [{"product_id": product_id, "quantity": 1}],
                "customer": {"name": customer_name, "email": customer_email},
                "return_url": return_url,
            },
        )
        session = self._parse(CheckoutSession.model_validate, data, "checkout")

        logger.info(
            "Created checkout session",
            extra={"session_id": session.session_id, "product_id": product_id},
        )
        return session

    @trace_span
    async def get_subscription(self, subscription_id: str) -> ProviderSubscription:
        data = await self._request("GET", f"/subscriptions/{subscription_id}")
        return self._parse(ProviderSubscription.from_response, data, "subscription")

    @trace_span
    async def cancel_subscription(self, subscription_id: str) -> ProviderSubscription:
        data = await self._request(
            "PATCH",
            f"/subscriptions/{subscription_id}",
            json={"cancel_at_next_billing_date": True},
        )

        logger.info(
            "Requested cancellation at next billing date",
            extra={"subscription_id": subscription_id},
        )
        return self._parse(ProviderSubscription.from_response, data, "subscription")

    @trace_span
    async def health_check(self) -> bool:
        """Check provider reachability and API key."""
        try:
            await self._request("GET", "/subscriptions?page_size=1")
            return True
        except ProviderError as e:
            logger.error(f"Payment health check failed: {e}")
            return False
