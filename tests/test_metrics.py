"""Tests for the completion-call metrics client."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from handyman_assistant.services.completion_client import CompletionClient
from handyman_assistant.services.metrics import NAMESPACE, MetricsClient


def _enabled_client() -> MetricsClient:
    """An enabled client without the background flush thread."""
    with patch.object(MetricsClient, "_start_flush_thread"):
        return MetricsClient(enabled=True)


def _names(client: MetricsClient) -> set[str]:
    return {m["MetricName"] for m in client._buffer}


class TestMetricsRecording:
    def test_success_buffers_count_and_latency(self):
        client = _enabled_client()
        client.record_success("openai", "POST /chat/completions", latency_ms=850.0)
        assert _names(client) == {"CompletionAPI/RequestCount", "CompletionAPI/Latency"}

    def test_failure_without_latency(self):
        client = _enabled_client()
        client.record_failure("openai", "POST /chat/completions", error_type="ConnectError")
        assert _names(client) == {"CompletionAPI/RequestCount", "CompletionAPI/ErrorCount"}

    def test_failure_with_latency(self):
        client = _enabled_client()
        client.record_failure(
            "openai", "POST /chat/completions", error_type="http_500", latency_ms=120.0,
        )
        assert len(client._buffer) == 3

    def test_status_and_error_dimensions(self):
        client = _enabled_client()
        client.record_failure("openai", "POST /chat/completions", error_type="http_429")
        count = next(m for m in client._buffer if m["MetricName"] == "CompletionAPI/RequestCount")
        error = next(m for m in client._buffer if m["MetricName"] == "CompletionAPI/ErrorCount")
        assert {d["Name"]: d["Value"] for d in count["Dimensions"]} == {
            "Service": "openai", "Status": "failure",
        }
        assert {d["Name"]: d["Value"] for d in error["Dimensions"]}["ErrorType"] == "http_429"


class TestDisabledMetrics:
    def test_disabled_client_never_buffers(self):
        client = MetricsClient(enabled=False)
        for _ in range(100):
            client.record_success("openai", "op", latency_ms=5.0)
            client.record_failure("openai", "op", error_type="http_500", latency_ms=5.0)
        assert client._buffer == []
        assert client.flush() == 0

    def test_default_completion_client_does_not_accumulate(self, mock_http_response):
        client = CompletionClient("sk-test")
        response = mock_http_response({"choices": [{"message": {"content": "ok"}}]})

        with patch.object(client._client, "post", new=AsyncMock(return_value=response)):
            for _ in range(50):
                asyncio.run(client.complete("s", "u", 0.3))
        assert client._metrics._buffer == []

    def test_enabled_reads_environment(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            assert MetricsClient().enabled is False


class TestMetricsFlush:
    def test_enabled_flush_publishes(self):
        client = _enabled_client()
        cw = MagicMock()
        client._cw_client = cw
        client.record_success("openai", "op", latency_ms=1.0)

        assert client.flush() == 2
        cw.put_metric_data.assert_called_once()
        assert cw.put_metric_data.call_args.kwargs["Namespace"] == NAMESPACE
        assert client._buffer == []

    def test_flush_error_is_logged_not_raised(self):
        client = _enabled_client()
        client._cw_client = MagicMock()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")
        client.record_success("openai", "op", latency_ms=1.0)
        assert client.flush() == 0
