from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from common.core.config import settings
from api.v1.routes.router import api_router
from internal.routes.router import internal_router
from common.db.session import init_db, dispose_db
from common.providers.rate_limiter.limiter import limiter
from packages.subscriptions.routes import redirects
from packages.subscriptions.services.sweep_service import SweepService
from packages.subscriptions.workers.sweep_scheduler import SweepScheduler

# Initialize OpenTelemetry (must be first)
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from common.core.telemetry import (
    _initialize_telemetry,
    get_logger,
)  # noqa


_initialize_telemetry()

# Get logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting application...")
    await init_db()
    logger.info("Database initialized")

    scheduler = None
    if settings.sweep_enabled:
        scheduler = SweepScheduler(SweepService().run_once)
        scheduler.start()
    app.state.sweep_scheduler = scheduler

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if scheduler is not None:
        await scheduler.stop()
    await dispose_db()


# Only expose OpenAPI docs in local development
docs_url = "/docs" if settings.environment == "local" else None
redoc_url = "/redoc" if settings.environment == "local" else None
openapi_url = "/openapi.json" if settings.environment == "local" else None

app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_url=openapi_url,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

# Add gzip compression middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")

# Checkout return redirect (provider sends customers to /success)
app.include_router(redirects.router, tags=["redirects"])

# Probes at root level - not under /api to keep them off the ingress
app.include_router(internal_router)
