"""Shared test fixtures for the Handyman assistant test suite."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from handyman_assistant.config import Settings
from handyman_assistant.context import AppContext
from handyman_assistant.knowledge import FaqEntry, KnowledgeRecord


def pytest_configure(config):
    """Make the environment hermetic BEFORE collection starts.

    ``handyman_assistant.server`` reads settings at import time, so a real
    OpenAI key in the developer's shell must not leak into the tests.
    """
    for name in ("OPENAI_API_KEY", "KNOWLEDGE_BASE_PATH", "AWS_EXECUTION_ENV"):
        os.environ.pop(name, None)
    os.environ["METRICS_ENABLED"] = "false"


@pytest.fixture
def knowledge() -> KnowledgeRecord:
    return KnowledgeRecord(
        business_name="Handyman of Fairfax",
        location="Fairfax, Virginia",
        summary="Small home repairs and installations.",
        service_area=["Fairfax", "Vienna", "Springfield"],
        hours="Mon-Fri 8am-6pm",
        services=["Drywall patching", "Faucet repair"],
        pricing_notes=["$95 per hour", "Materials at cost"],
        booking_process=["Take details", "Call back within a day"],
        faqs=[FaqEntry(question="Do you do roofs?", answer="No, we don't do roofing.")],
        contact_phone="(703) 555-0142",
    )


@pytest.fixture
def completion_client():
    """A stand-in CompletionClient whose ``complete`` is an AsyncMock."""
    client = MagicMock()
    client.complete = AsyncMock(return_value="Yes, we serve Springfield.")
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def configured_context(knowledge, completion_client) -> AppContext:
    return AppContext(
        settings=Settings(openai_api_key="test-openai-key"),
        knowledge=knowledge,
        completion_client=completion_client,
    )


@pytest.fixture
def unconfigured_context(knowledge) -> AppContext:
    return AppContext(settings=Settings(), knowledge=knowledge, completion_client=None)


@pytest.fixture
def mock_http_response():
    """Factory fixture for creating mock httpx responses."""

    def _make(data, status_code: int = 200):
        mock = MagicMock()
        mock.status_code = status_code
        mock.json.return_value = data
        mock.text = str(data)
        return mock

    return _make
