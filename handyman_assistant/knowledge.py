"""Business knowledge base.

The knowledge base is a small JSON document describing the handyman business
(services, service area, hours, pricing notes, FAQ pairs, ...).  It is read
once at startup and injected into every system prompt.

If the file is missing or malformed the assistant keeps running on
``DEFAULT_KNOWLEDGE`` so callers still get a useful (if generic) answer.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

logger = logging.getLogger(__name__)


class FaqEntry(BaseModel):
    """A single example question/answer pair.

    The JSON file may use ``question``/``answer`` or the short ``q``/``a``.
    """

    model_config = ConfigDict(frozen=True)

    question: str = Field(default="", validation_alias=AliasChoices("question", "q"))
    answer: str = Field(default="", validation_alias=AliasChoices("answer", "a"))

    @field_validator("question", "answer", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class KnowledgeRecord(BaseModel):
    """Structured facts about the business, read-only after load."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    business_name: str = ""
    location: str = ""
    summary: str = ""
    service_area: tuple[str, ...] = ()
    hours: str = ""
    services: tuple[str, ...] = ()
    pricing_notes: tuple[str, ...] = ()
    booking_process: tuple[str, ...] = ()
    faqs: tuple[FaqEntry, ...] = ()
    contact_phone: str = ""

    @field_validator(
        "business_name", "location", "summary", "hours", "contact_phone",
        mode="before",
    )
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(
        "service_area", "services", "pricing_notes", "booking_process", "faqs",
        mode="before",
    )
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return () if value is None else value


DEFAULT_KNOWLEDGE = KnowledgeRecord(
    business_name="Handyman of Fairfax",
    location="Fairfax, Virginia",
    summary=(
        "Local handyman service for small home repairs, installations "
        "and maintenance jobs."
    ),
    service_area=["Fairfax", "Fairfax City", "Vienna", "Burke", "Annandale"],
    hours="Monday to Friday, 8am to 6pm. Saturday by appointment.",
    services=[
        "Minor plumbing repairs",
        "Drywall patching",
        "Fixture and ceiling fan installation",
        "Furniture assembly",
    ],
    pricing_notes=["Pricing depends on the job; a handyman confirms every estimate."],
    booking_process=["Share your name, phone, address and job description; we call back to schedule."],
    contact_phone="(703) 555-0100",
)


def load_knowledge(path: Path | str) -> KnowledgeRecord:
    """Read the knowledge base JSON at *path*.

    Falls back to ``DEFAULT_KNOWLEDGE`` (with a warning) when the file is
    missing, is not valid JSON, or does not describe a knowledge record.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Knowledge base not found at %s; using built-in defaults", path)
        return DEFAULT_KNOWLEDGE
    except (OSError, ValueError, RecursionError) as exc:
        logger.warning("Could not read knowledge base %s (%s); using built-in defaults", path, exc)
        return DEFAULT_KNOWLEDGE

    if not isinstance(raw, dict):
        logger.warning("Knowledge base %s is not a JSON object; using built-in defaults", path)
        return DEFAULT_KNOWLEDGE

    try:
        record = KnowledgeRecord.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Knowledge base %s is malformed (%s); using built-in defaults", path, exc)
        return DEFAULT_KNOWLEDGE

    logger.info(
        "Loaded knowledge base for %s (%d services, %d FAQs)",
        record.business_name or "<unnamed business>",
        len(record.services),
        len(record.faqs),
    )
    return record
