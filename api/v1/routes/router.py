from fastapi import APIRouter

from api.v1.routes import (
    health,
)
from packages.subscriptions.routes import subscriptions, webhooks

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Webhooks (no auth - signature verified internally)
api_router.include_router(webhooks.router, tags=["webhooks"])

# Checkout, cancellation, status and admin sync
api_router.include_router(subscriptions.router, tags=["subscriptions"])
