"""Chat channel: one JSON question in, one JSON answer (or error) out."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from handyman_assistant.api.schemas import (
    AnswerMessage,
    ChatRequest,
    ChatResponse,
    ErrorMessage,
    InfoMessage,
)
from handyman_assistant.context import AppContext
from handyman_assistant.prompts import Channel, build_system_prompt
from handyman_assistant.services.completion_client import CHAT_TEMPERATURE, UpstreamError

logger = logging.getLogger(__name__)

INVALID_JSON_MESSAGE = "Invalid JSON"
MISSING_QUESTION_MESSAGE = 'Missing "question" field in payload.'
UPSTREAM_ERROR_MESSAGE = (
    "There was a problem talking to the AI. Please try again, "
    "or call the handyman directly."
)


class ChatHandler:
    """Handles chat frames independently; holds no per-connection state."""

    def __init__(self, context: AppContext):
        self._context = context

    def welcome(self) -> InfoMessage:
        name = self._context.knowledge.business_name or "the handyman"
        return InfoMessage(
            message=(
                f"Connected to {name} AI assistant. "
                'Send { "question": "..." } as JSON.'
            )
        )

    async def handle(self, raw: str) -> ChatResponse:
        """Answer a single raw text frame."""
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError):
            return ErrorMessage(message=INVALID_JSON_MESSAGE)
        if not isinstance(payload, dict):
            return ErrorMessage(message=INVALID_JSON_MESSAGE)

        try:
            question = ChatRequest.model_validate(payload).question.strip()
        except ValidationError:
            question = ""
        if not question:
            return ErrorMessage(message=MISSING_QUESTION_MESSAGE)

        logger.info("Question received: %s", question)

        client = self._context.completion_client
        if client is None:
            name = self._context.knowledge.business_name or "the handyman"
            return AnswerMessage(
                answer=(
                    "The AI backend isn't fully configured yet (no API key). "
                    f"Please contact {name} directly at "
                    f"{self._context.contact_phone}."
                )
            )

        system_prompt = build_system_prompt(self._context.knowledge, Channel.CHAT)
        try:
            answer = await client.complete(system_prompt, question, CHAT_TEMPERATURE)
        except UpstreamError as exc:
            logger.error(
                "Completion API failed for chat question (status=%s): %s",
                exc.status_code, exc.body,
            )
            return ErrorMessage(message=UPSTREAM_ERROR_MESSAGE)

        return AnswerMessage(answer=answer)
