"""
Interface for payment providers.

Abstracts checkout creation and subscription lookups away from a specific
platform. The provider is authoritative for subscription status.
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.subscriptions.models.domain.provider import (
    CheckoutSession,
    ProviderSubscription,
)


class PaymentProviderInterface(ABC):
    """Abstract interface for payment providers."""

    @abstractmethod
    async def create_checkout_session(
        self,
        product_id: str,
        customer_email: str,
        return_url: str,
        customer_name: Optional[str] = None,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session for a subscription product.

        Args:
            product_id: Provider product to subscribe to
            customer_email: Customer email
            return_url: URL the provider redirects to after checkout
            customer_name: Customer display name

        Returns:
            CheckoutSession with the session id and redirect URL
        """
        pass

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> ProviderSubscription:
        """
        Fetch the current state of a subscription.

        Args:
            subscription_id: Provider subscription ID
        """
        pass

    @abstractmethod
    async def cancel_subscription(self, subscription_id: str) -> ProviderSubscription:
        """
        Request cancellation at the end of the current billing period.

        Args:
            subscription_id: Provider subscription ID

        Returns:
            The subscription as updated by the provider
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the payment backend is reachable with our credentials.

        Returns:
            True if healthy, False otherwise
        """
        pass
