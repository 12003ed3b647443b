"""CloudWatch metrics for outbound completion calls.

Each call to the completion API records a request count plus either a
latency sample (success) or an error count keyed by error type (failure).
When ``METRICS_ENABLED=true`` data points are buffered in memory and
a daemon thread publishes them with ``put_metric_data``; otherwise they
are only logged at DEBUG and never buffered.
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "HandymanAssistant"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # PutMetricData limit


class MetricsClient:
    """Buffered metrics publisher."""

    def __init__(self, enabled: bool | None = None) -> None:
        if enabled is None:
            enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._enabled = enabled
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        self._record(service, operation, status="success", latency_ms=latency_ms)
        logger.debug("Metric: %s %s ok in %.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        self._record(
            service, operation, status="failure",
            latency_ms=latency_ms, error_type=error_type,
        )
        logger.debug(
            "Metric: %s %s failed (%s) after %.1fms",
            service, operation, error_type, latency_ms,
        )

    def flush(self) -> int:
        """Publish buffered data points.  Returns how many were sent."""
        with self._lock:
            batch, self._buffer = self._buffer, []

        if not batch:
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for start in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[start : start + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
            logger.info("Flushed %d metrics to CloudWatch", sent)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    def _record(
        self,
        service: str,
        operation: str,
        *,
        status: str,
        latency_ms: float,
        error_type: str | None = None,
    ) -> None:
        if not self._enabled:
            return
        now = datetime.now(UTC)
        service_dim = {"Name": "Service", "Value": service}
        points = [
            {
                "MetricName": "CompletionAPI/RequestCount",
                "Dimensions": [service_dim, {"Name": "Status", "Value": status}],
                "Timestamp": now,
                "Value": 1,
                "Unit": "Count",
            }
        ]
        if error_type is not None:
            points.append(
                {
                    "MetricName": "CompletionAPI/ErrorCount",
                    "Dimensions": [service_dim, {"Name": "ErrorType", "Value": error_type}],
                    "Timestamp": now,
                    "Value": 1,
                    "Unit": "Count",
                }
            )
        if latency_ms > 0:
            points.append(
                {
                    "MetricName": "CompletionAPI/Latency",
                    "Dimensions": [service_dim, {"Name": "Operation", "Value": operation}],
                    "Timestamp": now,
                    "Value": latency_ms,
                    "Unit": "Milliseconds",
                }
            )
        with self._lock:
            self._buffer.extend(points)

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                try:
                    self.flush()
                except Exception:
                    logger.exception("Metrics flush thread error")

        threading.Thread(target=_loop, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)
        logger.info("Metrics flush thread started (interval=%ds)", FLUSH_INTERVAL_SECONDS)
