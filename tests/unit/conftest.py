import pytest
from unittest.mock import AsyncMock, MagicMock, patch


@pytest.fixture(autouse=True)
def no_provider_network(mock_payment):
    """Route every factory-built payment provider to the mock for unit tests."""
    with patch(
        "packages.subscriptions.services.subscription_service.get_payment_provider",
        return_value=mock_payment,
    ), patch(
        "packages.subscriptions.dependencies.get_payment_provider",
        return_value=mock_payment,
    ):
        yield


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    span.__aenter__ = AsyncMock(return_value=span)
    span.__aexit__ = AsyncMock(return_value=None)
    return span


@pytest.fixture
def mock_start_span(mock_span):
    """Patch the tracer so spans opened by trace_span can be inspected."""
    with patch(
        "common.core.telemetry._get_tracer",
        return_value=MagicMock(start_as_current_span=MagicMock(return_value=mock_span)),
    ) as mock:
        yield mock
