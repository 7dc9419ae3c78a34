"""
Periodic sweeps over stored subscription records.

Two passes, both driven by the clock rather than by inbound events:

- grace-period expiry: pending cancellations whose billing date has passed
  are demoted without asking the provider;
- drift correction: every provider subscription whose billing date has passed
  is re-fetched and re-reconciled, one request at a time.

Records are processed independently. A failing record is logged and counted
and the pass moves on.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from common.core.config import settings
from common.core.telemetry import trace_span, get_logger
from packages.subscriptions.models.domain.reconciliation import SweepReport
from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)
from packages.subscriptions.services.reconciliation import (
    Clock,
    build_update,
    needs_update,
    reconcile_stored_record,
    utc_now,
)
from packages.subscriptions.services.subscription_service import SubscriptionService

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class SweepService:
    """Runs the grace-period expiry and drift-correction sweeps."""

    def __init__(
        self,
        repo: Optional[SubscriptionRecordRepository] = None,
        subscription_service: Optional[SubscriptionService] = None,
        request_delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = utc_now,
    ):
        self.repo = repo or SubscriptionRecordRepository()
        self.subscription_service = subscription_service or SubscriptionService(
            repo=self.repo, clock=clock
        )
        self.request_delay = (
            request_delay
            if request_delay is not None
            else settings.sweep_request_delay_seconds
        )
        self.sleep = sleep
        self.clock = clock

    @trace_span
    async def expire_elapsed_grace_periods(self) -> SweepReport:
        """Demote premium records whose pending cancellation has run out."""
        now = self.clock()
        records = await self.repo.get_grace_period_elapsed(now)
        report = SweepReport(checked=len(records))

        for record in records:
            try:
                result = reconcile_stored_record(record, now)
                if result is None:
                    continue
                changes = build_update(result, now)
                if not needs_update(record, changes):
                    continue
                await self.repo.update(record.id, changes)
                report.updated += 1
                logger.info(
                    f"Grace period elapsed for user {record.user_id}",
                    extra={
                        "user_id": record.user_id,
                        "subscription_id": record.subscription_id,
                        "status": result.status.value,
                    },
                )
            except Exception as e:
                report.failed += 1
                logger.error(
                    f"Failed to expire record {record.id}: {str(e)}",
                    extra={"user_id": record.user_id, "error": str(e)},
                )

        return report

    @trace_span
    async def resync_billing_date_passed(self) -> SweepReport:
        """Re-fetch every subscription past its billing date from the provider."""
        records = await self.repo.get_billing_date_passed(self.clock())
        report = SweepReport(checked=len(records))
        if records:
            logger.info(f"Found {len(records)} subscriptions past billing date")

        for index, record in enumerate(records):
            if index > 0 and self.request_delay > 0:
                await self.sleep(self.request_delay)
            try:
                outcome = await self.subscription_service.sync_from_provider(
                    record.subscription_id, record=record
                )
                if outcome.updated:
                    report.updated += 1
            except Exception as e:
                report.failed += 1
                logger.error(
                    f"Failed to sync subscription {record.subscription_id}: {str(e)}",
                    extra={
                        "user_id": record.user_id,
                        "subscription_id": record.subscription_id,
                        "error": str(e),
                    },
                )

        return report

    @trace_span
    async def run_once(self) -> SweepReport:
        """One sweep tick: expiry first, then drift correction."""
        expired = await self.expire_elapsed_grace_periods()
        resynced = await self.resync_billing_date_passed()
        report = expired.merge(resynced)
        logger.info(
            "Subscription sweep finished",
            extra={
                "checked": report.checked,
                "updated": report.updated,
                "failed": report.failed,
            },
        )
        return report
