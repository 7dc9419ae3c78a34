"""
FastAPI dependencies for the subscriptions package.

Services are built per request around lazily-scoped repositories, so no
database connection is held while a request awaits the payment provider.
"""

from fastapi import Depends

from packages.subscriptions.providers.payment.factory import get_payment_provider
from packages.subscriptions.providers.payment.interface import PaymentProviderInterface
from packages.subscriptions.services.subscription_service import SubscriptionService
from packages.subscriptions.services.sweep_service import SweepService


def get_payment() -> PaymentProviderInterface:
    return get_payment_provider()


def get_subscription_service(
    payment: PaymentProviderInterface = Depends(get_payment),
) -> SubscriptionService:
    return SubscriptionService(payment=payment)


def get_sweep_service(
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> SweepService:
    return SweepService(
        repo=subscription_service.repo,
        subscription_service=subscription_service,
        clock=subscription_service.clock,
    )
