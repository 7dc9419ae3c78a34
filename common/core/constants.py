from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


# Provider request pacing and grace handling defaults
DEFAULT_SWEEP_INTERVAL_SECONDS = 15 * 60
DEFAULT_SWEEP_STARTUP_DELAY_SECONDS = 5.0
DEFAULT_SWEEP_REQUEST_DELAY_SECONDS = 0.5
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 10.0
WEBHOOK_TIMESTAMP_TOLERANCE_SECONDS = 5 * 60
