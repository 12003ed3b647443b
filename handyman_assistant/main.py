"""CLI entry point for the Handyman AI assistant.

A terminal chat loop that runs questions through the same handler as the
``/ws`` channel.  For production, use the FastAPI server
(handyman_assistant/server.py).

Usage:
    python -m handyman_assistant.main            # normal mode (quiet)
    python -m handyman_assistant.main --debug    # debug mode (shows API calls)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from handyman_assistant.api.schemas import AnswerMessage
from handyman_assistant.chat import ChatHandler
from handyman_assistant.config import load_settings
from handyman_assistant.context import build_context

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("handyman_assistant").setLevel(logging.DEBUG if debug else logging.INFO)


async def _chat_loop() -> None:
    context = build_context(load_settings())
    handler = ChatHandler(context)
    print(handler.welcome().message)
    print("Type a question and press Enter ('quit' to exit).\n")

    try:
        while True:
            try:
                question = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if not question:
                continue
            if question.lower() in ("exit", "quit", "q"):
                print("\nGoodbye!")
                break

            reply = await handler.handle(json.dumps({"question": question}))
            if isinstance(reply, AnswerMessage):
                print(f"\nAssistant: {reply.answer}\n")
            else:
                print(f"\n[error] {reply.message}\n")
    finally:
        await context.aclose()


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Handyman AI assistant CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args()

    _configure_logging(debug=args.debug)
    asyncio.run(_chat_loop())


if __name__ == "__main__":
    main()
