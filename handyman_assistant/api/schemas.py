"""Pydantic schemas for the HTTP and WebSocket endpoints."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Incoming WebSocket frame from a chat client."""

    question: str = Field(..., description="The caller's question")


class InfoMessage(BaseModel):
    type: Literal["info"] = "info"
    message: str


class AnswerMessage(BaseModel):
    type: Literal["answer"] = "answer"
    answer: str


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str


ChatResponse = Annotated[
    Union[InfoMessage, AnswerMessage, ErrorMessage],
    Field(discriminator="type"),
]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "handyman-ai-phone-assistant"
