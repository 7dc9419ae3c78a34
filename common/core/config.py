from typing import Optional, List, Dict
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import (
    Environment,
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    DEFAULT_SWEEP_STARTUP_DELAY_SECONDS,
    DEFAULT_SWEEP_REQUEST_DELAY_SECONDS,
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "subscription-sync"
    api_version: str = "0.1.0"
    debug: bool = False

    # Database Components (hosted Postgres)
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "postgres"
    db_use_nullpool: bool = False  # True for the standalone sweep worker
    db_pool_size: int = 10
    db_pool_overflow: int = 5
    db_connect_timeout_seconds: float = 10.0
    db_command_timeout_seconds: float = 30.0

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Payment provider (Dodo Payments)
    provider_api_key: str = ""
    provider_base_url: str = "https://test.dodopayments.com"
    provider_webhook_secret: str = ""  # Verification skipped when empty
    provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    default_product_id: Optional[str] = None

    # Frontend (checkout return URL, CORS)
    frontend_url: Optional[str] = None

    # Periodic sweep
    sweep_enabled: bool = True
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    sweep_startup_delay_seconds: float = DEFAULT_SWEEP_STARTUP_DELAY_SECONDS
    sweep_request_delay_seconds: float = DEFAULT_SWEEP_REQUEST_DELAY_SECONDS

    # Rate limiting (slowapi); use a redis:// URI when running several replicas
    rate_limit_storage_uri: str = "memory://"

    # OpenTelemetry
    otel_service_name: str = "subscription-sync"
    otel_service_version: str = "0.1.0"
    otel_exporter_otlp_endpoint: Optional[str] = None  # e.g. https://api.axiom.co
    otel_exporter_otlp_headers: Dict[str, str] = {}

    @property
    def frontend_base_url(self) -> str:
        """Frontend URL used for checkout return and success redirects."""
        return self.frontend_url or "http://localhost:3001"

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        origins = []
        if self.environment == Environment.LOCAL:
            origins.append("http://localhost:3001")
        if self.frontend_url:
            origins.append(self.frontend_url)
        return origins


settings = Settings()
