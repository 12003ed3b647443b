"""Centralized configuration for the Handyman AI phone assistant.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/handyman-assistant/<VARIABLE_NAME>``.

Unlike a typical service, a missing OpenAI key is *not* fatal: every channel
has a canned fallback answer that points the caller at the business phone.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SSM_PREFIX = "/handyman-assistant"

DEFAULT_MODEL_NAME = "gpt-4.1-mini"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_PORT = 3000
DEFAULT_KNOWLEDGE_BASE_PATH = (
    Path(__file__).resolve().parent.parent / "knowledge-base.json"
)


def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 — lazy import, only needed on AWS

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"{SSM_PREFIX}/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _optional_secret(name: str) -> str | None:
    """Return a secret from env-var or SSM, or ``None`` when unset."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if os.getenv("AWS_EXECUTION_ENV"):
        return _get_ssm_parameter(name)

    return None


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    openai_api_key: str | None = None
    model_name: str = DEFAULT_MODEL_NAME
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    server_host: str = "0.0.0.0"
    server_port: int = DEFAULT_PORT
    knowledge_base_path: Path = DEFAULT_KNOWLEDGE_BASE_PATH
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    metrics_enabled: bool = False

    @property
    def has_credential(self) -> bool:
        return bool(self.openai_api_key)


def load_settings() -> Settings:
    """Read configuration from ``.env`` / the environment (and SSM on AWS)."""
    load_dotenv()

    settings = Settings(
        openai_api_key=_optional_secret("OPENAI_API_KEY"),
        model_name=os.getenv("OPENAI_MODEL", DEFAULT_MODEL_NAME),
        openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
        server_host=os.getenv("HOST", "0.0.0.0"),
        server_port=int(os.getenv("PORT", str(DEFAULT_PORT))),
        knowledge_base_path=Path(
            os.getenv("KNOWLEDGE_BASE_PATH", str(DEFAULT_KNOWLEDGE_BASE_PATH))
        ),
        cors_origins=[
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ],
        metrics_enabled=os.getenv("METRICS_ENABLED", "false").lower() == "true",
    )

    if not settings.has_credential:
        logger.warning(
            "OPENAI_API_KEY is not set. The assistant will answer with the "
            "fallback contact message instead of calling OpenAI."
        )
    return settings
