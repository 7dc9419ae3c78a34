"""
Operation-scoped database sessions.

Sessions are acquired lazily and released right after each operation, so no
connection is held while awaiting the payment provider.

Usage:
    # Single operation - acquires, commits and releases immediately
    async with get_session() as session:
        result = await session.get(Model, id)

    # Several operations in one transaction - share one session
    async with transaction():
        await repo.update(...)
        await repo.update(...)
"""

import time
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from common.core.telemetry import get_logger
from common.db.session import AsyncSessionLocal

logger = get_logger(__name__)

# Holds the session of the enclosing transaction(), if any
_current_session: ContextVar[Optional[AsyncSession]] = ContextVar(
    "db_current_session", default=None
)


@asynccontextmanager
async def transaction() -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit transaction boundary.

    All DB operations inside share one session. Commits on success, rolls
    back and re-raises on exception.
    """
    start = time.perf_counter()
    async with AsyncSessionLocal() as session:
        logger.debug(
            f"Transaction session acquire: {(time.perf_counter() - start) * 1000:.2f}ms"
        )
        token = _current_session.set(session)
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Transaction rollback due to: {e}")
            await session.rollback()
            raise
        finally:
            _current_session.reset(token)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a session for a single DB operation.

    Reuses the enclosing transaction() session if there is one (and leaves the
    commit to it); otherwise acquires a new session, commits and releases.
    """
    existing = _current_session.get()
    if existing is not None:
        yield existing
        return

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Operation rollback due to: {e}")
            await session.rollback()
            raise
