"""
Service for managing user subscriptions.

Every state change goes through the reconciliation engine; this service only
gathers its inputs (provider fetches, webhook data, the stored record) and
writes the result back when it differs from what is stored.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from common.core.config import settings
from common.core.exceptions import (
    NotFoundError,
    ProviderError,
    StoreError,
    ValidationError,
)
from common.core.telemetry import trace_span, get_logger
from packages.subscriptions.models.domain.enums import (
    IdentityKey,
    ProviderSubscriptionStatus,
    SubscriptionStatus,
    WebhookAction,
    WebhookEventType,
)
from packages.subscriptions.models.domain.provider import (
    CheckoutSession,
    ProviderSubscription,
)
from packages.subscriptions.models.domain.reconciliation import (
    ReconciliationResult,
    Resolved,
    SyncOutcome,
    WebhookOutcome,
)
from packages.subscriptions.models.domain.subscription_record import (
    SubscriptionRecord,
    SubscriptionRecordCreateModel,
    SubscriptionRecordUpdateModel,
)
from packages.subscriptions.models.domain.webhooks import WebhookPayload
from packages.subscriptions.providers.payment.factory import get_payment_provider
from packages.subscriptions.providers.payment.interface import PaymentProviderInterface
from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)
from packages.subscriptions.services.identity_resolver import IdentityResolver
from packages.subscriptions.services.reconciliation import (
    Clock,
    apply_payment_failure,
    build_update,
    needs_update,
    reconcile,
    reconcile_cancellation,
    reconcile_provider_subscription,
    reconcile_stored_record,
    utc_now,
)
from packages.subscriptions.services.webhook_classifier import classify

logger = get_logger(__name__)

_CANCEL_PENDING_STATUSES = (SubscriptionStatus.CANCELLING, SubscriptionStatus.EXPIRED)


class SubscriptionService:
    """Service for subscription checkout, cancellation, status and sync."""

    def __init__(
        self,
        repo: Optional[SubscriptionRecordRepository] = None,
        payment: Optional[PaymentProviderInterface] = None,
        clock: Clock = utc_now,
    ):
        self.repo = repo or SubscriptionRecordRepository()
        self.payment = payment or get_payment_provider()
        self.resolver = IdentityResolver(self.repo)
        self.clock = clock

    async def _write(
        self, record: SubscriptionRecord, changes: SubscriptionRecordUpdateModel
    ) -> tuple[SubscriptionRecord, bool]:
        """Persist `changes` unless they match what is stored."""
        if not needs_update(record, changes):
            logger.debug(
                f"Record {record.id} already up to date",
                extra={"user_id": record.user_id},
            )
            return record, False

        try:
            updated = await self.repo.update(record.id, changes)
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to write subscription record {record.id}: {e}"
            ) from e
        if updated is None:
            raise NotFoundError(f"Subscription record {record.id} disappeared")

        if updated.status != record.status or updated.is_premium != record.is_premium:
            logger.info(
                f"Subscription {record.status.value} -> {updated.status.value}",
                extra={
                    "user_id": record.user_id,
                    "subscription_id": updated.subscription_id,
                    "previous_status": record.status.value,
                    "status": updated.status.value,
                    "is_premium": updated.is_premium,
                },
            )
        return updated, True

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @trace_span
    async def create_subscription(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> tuple[SubscriptionRecord, CheckoutSession]:
        """
        Start a provider checkout and upsert the user's identity row.

        The row stays free and without a subscription id until the provider
        confirms the subscription through a webhook or the success redirect.
        """
        product_id = product_id or settings.default_product_id
        if not product_id:
            raise ValidationError("Product ID is required")

        session = await self.payment.create_checkout_session(
            product_id=product_id,
            customer_email=email,
            customer_name=name,
            return_url=f"{settings.frontend_base_url}/success",
        )

        now = self.clock()
        record = await self.repo.upsert_checkout(
            SubscriptionRecordCreateModel(
                user_id=user_id,
                email=email,
                name=name,
                session_id=session.session_id,
                product_id=product_id,
                created_at=now,
                updated_at=now,
            )
        )

        logger.info(
            f"Checkout started for user {user_id}",
            extra={
                "user_id": user_id,
                "session_id": session.session_id,
                "product_id": product_id,
            },
        )
        return record, session

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    @trace_span
    async def cancel_subscription(
        self, user_id: str, subscription_id: str
    ) -> SubscriptionRecord:
        """Request cancellation at period end and record the grace period."""
        record = await self.repo.get_by_user_id(user_id)
        if record is None:
            raise NotFoundError(f"No subscription record for user {user_id}")
        if record.subscription_id != subscription_id:
            raise ValidationError("Subscription does not belong to this user")

        subscription = await self.payment.cancel_subscription(subscription_id)

        now = self.clock()
        result = reconcile_provider_subscription(subscription, now)
        record, _ = await self._write(
            record, self._update_from_provider(result, subscription, now)
        )
        return record

    # ------------------------------------------------------------------
    # Status & sync
    # ------------------------------------------------------------------

    @staticmethod
    def _update_from_provider(
        result: ReconciliationResult,
        subscription: ProviderSubscription,
        now: datetime,
    ) -> SubscriptionRecordUpdateModel:
        return build_update(
            result,
            now,
            subscription_id=subscription.subscription_id,
            next_billing_date=subscription.next_billing_date,
            # A pending cancellation only exists alongside cancelling/expired
            cancel_at_billing_date=(
                subscription.cancel_at_next_billing_date
                and result.status in _CANCEL_PENDING_STATUSES
            ),
        )

    @trace_span
    async def sync_from_provider(
        self,
        subscription_id: str,
        email: Optional[str] = None,
        record: Optional[SubscriptionRecord] = None,
    ) -> SyncOutcome:
        """
        Re-fetch a subscription from the provider and reconcile the local record.

        The record is located by subscription id, then by `email` or the
        customer email the provider reports.
        """
        subscription = await self.payment.get_subscription(subscription_id)

        if record is None:
            resolution = await self.resolver.resolve(
                subscription_id=subscription_id,
                email=email or subscription.customer.email,
            )
            if not isinstance(resolution, Resolved):
                raise NotFoundError(
                    f"No subscription record matches subscription {subscription_id}"
                )
            record = resolution.record

        now = self.clock()
        result = reconcile_provider_subscription(subscription, now)
        record, updated = await self._write(
            record, self._update_from_provider(result, subscription, now)
        )
        return SyncOutcome(record=record, subscription=subscription, updated=updated)

    @trace_span
    async def get_status(
        self, user_id: str
    ) -> tuple[SubscriptionRecord, Optional[ProviderSubscription], bool]:
        """
        Current entitlement for a user.

        Returns (record, provider subscription or None, synced). Once the
        stored billing date has passed the record is re-synced from the
        provider; if the provider is unreachable the stored record is
        re-evaluated against the clock instead.
        """
        record = await self.repo.get_by_user_id(user_id)
        if record is None:
            raise NotFoundError(f"No subscription record for user {user_id}")
        if not record.subscription_id:
            return record, None, False

        now = self.clock()
        if record.billing_date_passed(now):
            logger.info(
                f"Billing date passed for user {user_id}, syncing",
                extra={"user_id": user_id, "subscription_id": record.subscription_id},
            )
            try:
                outcome = await self.sync_from_provider(
                    record.subscription_id, record=record
                )
                return outcome.record, outcome.subscription, True
            except ProviderError as e:
                logger.warning(
                    f"Provider sync failed, re-evaluating stored record: {e}",
                    extra={"user_id": user_id},
                )
                result = reconcile_stored_record(record, now)
                if result is not None:
                    record, _ = await self._write(record, build_update(result, now))
                return record, None, False

        subscription = await self.payment.get_subscription(record.subscription_id)
        return record, subscription, False

    @trace_span
    async def handle_success_redirect(
        self, subscription_id: Optional[str], status: Optional[str]
    ) -> bool:
        """
        Best-effort activation from the checkout return redirect.

        Never raises; the user is redirected regardless.
        """
        if not subscription_id or status != "active":
            return False
        try:
            outcome = await self.sync_from_provider(subscription_id)
        except (ProviderError, NotFoundError) as e:
            logger.warning(
                f"Could not sync subscription on success redirect: {e}",
                extra={"subscription_id": subscription_id},
            )
            return False

        logger.info(
            "Subscription synced via success redirect",
            extra={
                "subscription_id": subscription_id,
                "user_id": outcome.record.user_id,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    @staticmethod
    def _is_superseded(resolution: Resolved, subscription_id: Optional[str]) -> bool:
        """
        Whether an event names a subscription other than the one on file.

        Only a fallback match (email or session id) can land here; a
        subscription id match already agrees with the record.
        """
        current = resolution.record.subscription_id
        return (
            resolution.matched_by != IdentityKey.SUBSCRIPTION_ID
            and bool(subscription_id)
            and bool(current)
            and current != subscription_id
        )

    @trace_span
    async def apply_webhook(self, payload: WebhookPayload) -> WebhookOutcome:
        """Classify a webhook event, resolve its record and apply the action."""
        action = classify(payload.type)
        outcome = WebhookOutcome(event_type=payload.type, action=action)

        if action == WebhookAction.IGNORE:
            logger.info(f"Ignoring webhook event {payload.type.value}")
            return outcome

        data = payload.data
        resolution = await self.resolver.resolve(
            subscription_id=data.subscription_id,
            email=data.customer.email,
            session_id=data.checkout_session_id,
        )
        if not isinstance(resolution, Resolved):
            logger.warning(
                f"Unresolved webhook event {payload.type.value}",
                extra={
                    "event_type": payload.type.value,
                    "subscription_id": data.subscription_id,
                    "attempted": [key.value for key in resolution.attempted],
                },
            )
            return outcome

        record = resolution.record
        if action != WebhookAction.ACTIVATE and self._is_superseded(
            resolution, data.subscription_id
        ):
            logger.warning(
                f"Ignoring {payload.type.value} for superseded subscription",
                extra={
                    "event_type": payload.type.value,
                    "subscription_id": data.subscription_id,
                    "current_subscription_id": record.subscription_id,
                    "user_id": record.user_id,
                },
            )
            return outcome

        now = self.clock()

        if action == WebhookAction.ACTIVATE:
            result = reconcile(
                ProviderSubscriptionStatus.ACTIVE.value,
                False,
                data.next_billing_date,
                now,
            )
            changes = build_update(
                result,
                now,
                subscription_id=data.subscription_id,
                next_billing_date=data.next_billing_date,
                cancel_at_billing_date=False,
            )
        elif action == WebhookAction.CANCEL:
            # Expiry is terminal; a cancellation keeps its grace period
            if payload.type == WebhookEventType.SUBSCRIPTION_EXPIRED:
                result = reconcile_cancellation(None, now)
            else:
                result = reconcile_cancellation(data.next_billing_date, now)
            changes = build_update(
                result,
                now,
                subscription_id=data.subscription_id,
                next_billing_date=data.next_billing_date,
                cancel_at_billing_date=True,
            )
        else:
            result = apply_payment_failure(record.is_premium)
            changes = build_update(result, now, subscription_id=data.subscription_id)

        record, updated = await self._write(record, changes)

        logger.info(
            f"Applied webhook {payload.type.value}",
            extra={
                "event_type": payload.type.value,
                "action": action.value,
                "user_id": record.user_id,
                "matched_by": resolution.matched_by.value,
                "updated": updated,
            },
        )
        return outcome.model_copy(
            update={
                "resolved": True,
                "updated": updated,
                "user_id": record.user_id,
                "status": record.status,
            }
        )
