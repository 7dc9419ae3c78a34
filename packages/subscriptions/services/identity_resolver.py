"""
Identity resolution for inbound provider events.

Events do not carry our user id, so the target record is found by trying the
keys the event does carry in a fixed order: the provider subscription id
(once on file), the customer email, then the checkout session id captured
when the checkout was created. The first match wins.
"""

from typing import Awaitable, Callable, Optional

from common.core.telemetry import get_logger, trace_span
from packages.subscriptions.models.domain.enums import IdentityKey
from packages.subscriptions.models.domain.reconciliation import (
    IdentityResolution,
    Resolved,
    Unresolved,
)
from packages.subscriptions.models.domain.subscription_record import SubscriptionRecord
from packages.subscriptions.repositories.subscription_record_repository import (
    SubscriptionRecordRepository,
)

logger = get_logger(__name__)

Lookup = Callable[[str], Awaitable[Optional[SubscriptionRecord]]]


class IdentityResolver:
    """Ordered lookup strategy over the subscription record store."""

    def __init__(self, repo: SubscriptionRecordRepository):
        self.repo = repo
        self._strategies: list[tuple[IdentityKey, Lookup]] = [
            (IdentityKey.SUBSCRIPTION_ID, repo.get_by_subscription_id),
            (IdentityKey.EMAIL, repo.get_by_email),
            (IdentityKey.SESSION_ID, repo.get_by_session_id),
        ]

    @trace_span
    async def resolve(
        self,
        subscription_id: Optional[str] = None,
        email: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> IdentityResolution:
        keys = {
            IdentityKey.SUBSCRIPTION_ID: subscription_id,
            IdentityKey.EMAIL: email,
            IdentityKey.SESSION_ID: session_id,
        }

        attempted: list[IdentityKey] = []
        for key, lookup in self._strategies:
            value = keys[key]
            if not value:
                continue
            attempted.append(key)
            record = await lookup(value)
            if record is not None:
                logger.debug(
                    f"Resolved record {record.id} by {key.value}",
                    extra={"user_id": record.user_id, "matched_by": key.value},
                )
                return Resolved(record=record, matched_by=key)

        return Unresolved(attempted=attempted)
