from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from common.core.config import settings
from common.db.session import get_db
from common.core.telemetry import get_logger
from common.providers.rate_limiter.limiter import limiter
from packages.subscriptions.dependencies import get_payment
from packages.subscriptions.providers.payment.interface import PaymentProviderInterface

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check(request: Request):
    # No rate limiting or logging - probes hit this every 5-10s
    return {"status": "healthy", "service": settings.app_name}


@router.get("/db")
@limiter.limit("100/minute")
async def db_check(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "database": "disconnected"}


@router.get("/provider")
@limiter.limit("20/minute")
async def provider_check(
    request: Request, payment: PaymentProviderInterface = Depends(get_payment)
):
    if await payment.health_check():
        return {"status": "healthy", "provider": "reachable"}
    return {"status": "unhealthy", "provider": "unreachable"}
