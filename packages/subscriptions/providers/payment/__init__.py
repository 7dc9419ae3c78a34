"""Payment providers - checkout sessions and subscription state."""

from packages.subscriptions.providers.payment.interface import PaymentProviderInterface
from packages.subscriptions.providers.payment.factory import get_payment_provider

__all__ = [
    "PaymentProviderInterface",
    "get_payment_provider",
]
