"""
Factory for getting payment provider instance.
"""

from packages.subscriptions.providers.payment.interface import PaymentProviderInterface
from packages.subscriptions.providers.payment.dodo_payment import DodoPaymentProvider


def get_payment_provider() -> PaymentProviderInterface:
    """
    Get payment provider instance based on configuration.

    Only Dodo Payments is supported today; the interface keeps services
    independent of it.

    Returns:
        PaymentProviderInterface: Configured payment provider
    """
    return DodoPaymentProvider()
