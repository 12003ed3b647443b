"""Async HTTP client for the OpenAI Chat Completions API.

One request per question: a ``[system, user]`` message pair, a fixed model
and a per-channel temperature.  There is no retry and no timeout beyond the
httpx default; failures surface as :class:`UpstreamError` so the channel
handlers can answer with a generic apology.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from handyman_assistant.config import DEFAULT_MODEL_NAME, DEFAULT_OPENAI_BASE_URL
from handyman_assistant.services.metrics import MetricsClient

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.3
PHONE_TEMPERATURE = 0.4

FALLBACK_ANSWER = (
    "I'm not sure how to answer that, but a handyman can call you back "
    "with more details."
)

_METRICS_SERVICE = "openai"
_METRICS_OPERATION = "POST /chat/completions"


class UpstreamError(Exception):
    """Raised when the completion API call fails.

    ``status_code`` is ``None`` for transport-level failures (DNS, refused
    connection, timeout); ``body`` holds the raw response text or the
    transport error message.
    """

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"OpenAI API error {status_code}: {body}")


def extract_answer(data: Any) -> str:
    """Return ``choices[0].message.content`` or the fallback sentence."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return FALLBACK_ANSWER
    if not isinstance(content, str) or not content.strip():
        return FALLBACK_ANSWER
    return content.strip()


class CompletionClient:
    """Thin wrapper around ``POST /chat/completions``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL_NAME,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        metrics: MetricsClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._model = model
        self._metrics = metrics or MetricsClient(enabled=False)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        system_prompt: str,
        user_content: str,
        temperature: float,
    ) -> str:
        """Ask the model and return the first choice's text."""
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": temperature,
        }

        started = time.perf_counter()
        try:
            response = await self._client.post("/chat/completions", json=body)
        except httpx.HTTPError as exc:
            self._record_failure(type(exc).__name__, started)
            raise UpstreamError(None, str(exc)) from exc

        if not 200 <= response.status_code < 300:
            self._record_failure(f"http_{response.status_code}", started)
            raise UpstreamError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as exc:
            self._record_failure("invalid_json", started)
            raise UpstreamError(response.status_code, response.text) from exc

        self._metrics.record_success(
            _METRICS_SERVICE, _METRICS_OPERATION, latency_ms=_elapsed_ms(started),
        )
        return extract_answer(data)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _record_failure(self, error_type: str, started: float) -> None:
        self._metrics.record_failure(
            _METRICS_SERVICE, _METRICS_OPERATION,
            error_type=error_type, latency_ms=_elapsed_ms(started),
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
