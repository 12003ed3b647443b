"""Handyman AI phone assistant — answers customer questions about a local
handyman business over chat and phone.

Architecture Overview
=====================

There is no conversation state.  Every inbound question takes the same path:

    channel handler → build_system_prompt(kb, channel) → CompletionClient.complete
                    → channel encoder (JSON frame or TwiML)

1. **Chat** (``/ws``) — a WebSocket that takes ``{"question": "..."}``
   frames and replies with ``{"type": "answer" | "error", ...}`` frames.

2. **Voice** (``/twilio-voice``) — a Twilio webhook.  The first call greets
   the caller and ``<Gather>``s speech; Twilio re-posts the transcript to the
   same URL, which answers and hangs up.

Key Design Decisions
--------------------
- **LLM**: OpenAI Chat Completions over plain ``httpx``; one request per
  question, no retries.  Chat uses temperature 0.3, phone 0.4.
- **Knowledge base**: ``knowledge-base.json`` is loaded once at startup and
  injected into the system prompt; a built-in record is used if it is missing.
- **No API key**: both channels still answer, pointing at the business phone.
- **Dependency injection**: settings, knowledge and the completion client live
  in one ``AppContext`` on ``app.state``, built by the FastAPI lifespan.

Package Structure
-----------------
- ``config.py`` — Settings from environment variables (and SSM on AWS)
- ``knowledge.py`` — Knowledge record model and loader
- ``prompts.py`` — Channel-specific system prompt
- ``context.py`` — AppContext construction
- ``chat.py`` / ``voice.py`` — channel handlers
- ``services/`` — completion API client and metrics
- ``api/`` — FastAPI routes and Pydantic schemas
- ``server.py`` — FastAPI application
- ``main.py`` — CLI chat interface
"""

__version__ = "1.0.0"
