"""
Repository for per-user subscription records.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.telemetry import trace_span
from common.db.scoped import transaction
from common.repositories.base import BaseRepository
from packages.subscriptions.models.database.subscription_record import (
    SubscriptionRecordEntity,
)
from packages.subscriptions.models.domain.subscription_record import (
    SubscriptionRecord,
    SubscriptionRecordCreateModel,
    SubscriptionRecordUpdateModel,
)


class SubscriptionRecordRepository(
    BaseRepository[SubscriptionRecordEntity, SubscriptionRecord]
):
    """Repository for the user_subscriptions table."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        super().__init__(SubscriptionRecordEntity, SubscriptionRecord, db_session)

    @trace_span
    async def get_by_user_id(self, user_id: str) -> Optional[SubscriptionRecord]:
        return await self._first(
            select(SubscriptionRecordEntity).where(
                SubscriptionRecordEntity.user_id == user_id
            )
        )

    @trace_span
    async def get_by_subscription_id(
        self, subscription_id: str
    ) -> Optional[SubscriptionRecord]:
        return await self._first(
            select(SubscriptionRecordEntity).where(
                SubscriptionRecordEntity.subscription_id == subscription_id
            )
        )

    @trace_span
    async def get_by_email(self, email: str) -> Optional[SubscriptionRecord]:
        """Case-insensitive email match; most recently updated row wins."""
        return await self._first(
            select(SubscriptionRecordEntity)
            .where(func.lower(SubscriptionRecordEntity.email) == email.lower())
            .order_by(
                SubscriptionRecordEntity.updated_at.desc(),
                SubscriptionRecordEntity.id.desc(),
            )
        )

    @trace_span
    async def get_by_session_id(self, session_id: str) -> Optional[SubscriptionRecord]:
        return await self._first(
            select(SubscriptionRecordEntity).where(
                SubscriptionRecordEntity.session_id == session_id
            )
        )

    @trace_span
    async def upsert_checkout(
        self, create_model: SubscriptionRecordCreateModel
    ) -> SubscriptionRecord:
        """
        Create the identity row for a checkout, or refresh an existing one.

        Only identity and checkout fields are touched on an existing row;
        entitlement and status stay as they are. Lookup and write share one
        transaction.
        """
        async with transaction():
            existing = await self.get_by_user_id(create_model.user_id)
            if existing is None:
                return await self.create(create_model)

            update_data = SubscriptionRecordUpdateModel(
                email=create_model.email,
                updated_at=create_model.updated_at,
            )
            for field in ("name", "session_id", "product_id"):
                value = getattr(create_model, field)
                if value is not None:
                    setattr(update_data, field, value)
            return await self.update(existing.id, update_data)

    @trace_span
    async def get_grace_period_elapsed(self, now: datetime) -> list[SubscriptionRecord]:
        """Premium records with a pending cancellation whose billing date has passed."""
        return await self._all(
            select(SubscriptionRecordEntity)
            .where(
                SubscriptionRecordEntity.cancel_at_billing_date.is_(True),
                SubscriptionRecordEntity.is_premium.is_(True),
                SubscriptionRecordEntity.next_billing_date <= now,
            )
            .order_by(SubscriptionRecordEntity.id)
        )

    @trace_span
    async def get_billing_date_passed(self, now: datetime) -> list[SubscriptionRecord]:
        """Records with a provider subscription whose billing date has passed."""
        return await self._all(
            select(SubscriptionRecordEntity)
            .where(
                SubscriptionRecordEntity.subscription_id.is_not(None),
                SubscriptionRecordEntity.next_billing_date <= now,
            )
            .order_by(SubscriptionRecordEntity.id)
        )
