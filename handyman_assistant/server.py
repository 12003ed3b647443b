"""ASGI app serving ``/health``, the ``/ws`` chat socket and the
``/twilio-voice`` webhook.

Run with:
    uvicorn handyman_assistant.server:app --host 0.0.0.0 --port 3000

or ``python -m handyman_assistant.server``, which honours ``HOST``/``PORT``.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from handyman_assistant import __version__
from handyman_assistant.api.routes import router
from handyman_assistant.config import load_settings
from handyman_assistant.context import build_context

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

settings = load_settings()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Read knowledge-base.json and open the OpenAI client for this process.

    Without ``OPENAI_API_KEY`` the context carries no client and both
    channels answer with the contact-phone fallback.
    """
    context = build_context(settings)
    application.state.context = context
    logger.info(
        "Serving %s (completion client %s)",
        context.knowledge.business_name or "<unnamed business>",
        "enabled" if context.completion_client else "disabled",
    )
    yield
    await context.aclose()


app = FastAPI(
    title="Handyman AI Phone Assistant",
    description=(
        "Answers customer questions about a local handyman service over a "
        "WebSocket chat channel and a Twilio voice webhook."
    ),
    version=__version__,
    lifespan=lifespan,
)

# Browser chat widgets open /ws from the business website.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Tag each HTTP request (webhook turns included) with ``X-Request-ID``.

    WebSocket frames bypass HTTP middleware and are logged by the chat route.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router)


@app.get("/")
async def root():
    """List the assistant's endpoints."""
    return {
        "service": "Handyman AI Phone Assistant",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "chat": "/ws",
        "voice": "/twilio-voice",
    }


if __name__ == "__main__":
    logger.info("Starting assistant on %s:%d", settings.server_host, settings.server_port)
    uvicorn.run(
        "handyman_assistant.server:app",
        host=settings.server_host,
        port=settings.server_port,
    )
