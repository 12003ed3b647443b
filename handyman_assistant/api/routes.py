"""Route definitions: health check, chat WebSocket and Twilio voice webhook."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response, WebSocket, status

from handyman_assistant.api.schemas import HealthResponse
from handyman_assistant.chat import ChatHandler
from handyman_assistant.context import AppContext
from handyman_assistant.voice import WEBHOOK_PATH, VoiceHandler, VoiceTurn

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_context(request: Request) -> AppContext:
    """Retrieve the AppContext that the lifespan stored on app state."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=503,
            detail="The assistant is still starting up. Please try again in a moment.",
        )
    return context


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket):
    """Question/answer chat over a WebSocket.

    Every text frame is answered on its own; a bad frame gets an error
    frame back and the socket stays open.
    """
    context = getattr(websocket.app.state, "context", None)
    if context is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    await websocket.accept()
    logger.info("Client connected to /ws")
    handler = ChatHandler(context)
    await websocket.send_text(handler.welcome().model_dump_json())

    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            break
        raw = message.get("text")
        if raw is None:
            raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
        reply = await handler.handle(raw)
        await websocket.send_text(reply.model_dump_json())

    logger.info("Client disconnected from /ws")


@router.api_route(WEBHOOK_PATH, methods=["GET", "POST"])
async def twilio_voice(request: Request) -> Response:
    """Twilio voice webhook.  Twilio sends form fields on POST and query
    parameters on GET; both carry ``From`` and (on the second turn)
    ``SpeechResult``.
    """
    context = _get_context(request)
    if request.method == "POST":
        fields = await request.form()
    else:
        fields = request.query_params

    turn = VoiceTurn.from_form(fields)
    twiml = await VoiceHandler(context).respond(turn)
    return Response(content=twiml, media_type="text/xml")
