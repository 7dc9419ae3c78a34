import pytest

from common.core.telemetry import get_logger, trace_span


class SampleRepository:
    @trace_span
    async def fetch(self, value):
        return value

    @trace_span
    def count(self):
        return 3


@trace_span
def standalone():
    return "ok"


class TestTraceSpan:
    """Span naming for the trace_span decorator."""

    @pytest.mark.asyncio
    async def test_async_method_span_includes_class(self, mock_start_span, mock_span):
        assert await SampleRepository().fetch(7) == 7

        tracer = mock_start_span.return_value
        tracer.start_as_current_span.assert_called_once_with("SampleRepository.fetch")
        mock_span.__enter__.assert_called_once()

    def test_sync_method_span_includes_class(self, mock_start_span):
        assert SampleRepository().count() == 3

        tracer = mock_start_span.return_value
        tracer.start_as_current_span.assert_called_once_with("SampleRepository.count")

    def test_function_span_uses_function_name(self, mock_start_span):
        assert standalone() == "ok"

        tracer = mock_start_span.return_value
        tracer.start_as_current_span.assert_called_once_with("standalone")

    def test_wrapped_function_keeps_metadata(self):
        assert SampleRepository.fetch.__name__ == "fetch"


class TestGetLogger:
    def test_returns_named_logger(self):
        assert get_logger("subscriptions.test").name == "subscriptions.test"
