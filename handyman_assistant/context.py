"""Per-process application context shared by every channel handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from handyman_assistant.config import Settings
from handyman_assistant.knowledge import KnowledgeRecord, load_knowledge
from handyman_assistant.services.completion_client import CompletionClient
from handyman_assistant.services.metrics import MetricsClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Settings, knowledge record and completion client, built once at startup.

    ``completion_client`` is ``None`` when no OpenAI key is configured; the
    handlers then answer with the canned contact-phone fallback.
    """

    settings: Settings
    knowledge: KnowledgeRecord
    completion_client: CompletionClient | None = None

    @property
    def contact_phone(self) -> str:
        return self.knowledge.contact_phone or "(phone not set)"

    async def aclose(self) -> None:
        if self.completion_client is not None:
            await self.completion_client.aclose()


def build_context(settings: Settings) -> AppContext:
    knowledge = load_knowledge(settings.knowledge_base_path)

    client = None
    if settings.openai_api_key:
        client = CompletionClient(
            settings.openai_api_key,
            model=settings.model_name,
            base_url=settings.openai_base_url,
            metrics=MetricsClient(enabled=settings.metrics_enabled),
        )
        logger.info("Completion client ready (model=%s)", settings.model_name)

    return AppContext(settings=settings, knowledge=knowledge, completion_client=client)
