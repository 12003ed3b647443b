"""System prompts for the Handyman AI assistant."""

from __future__ import annotations

from enum import Enum

from handyman_assistant.knowledge import KnowledgeRecord


class Channel(str, Enum):
    """Where the answer will be delivered; controls the style rules."""

    CHAT = "chat"
    PHONE = "phone"


_PHONE_STYLE = """- You are speaking to a caller on the phone. Your answer will be read aloud.
- Be conversational, warm and brief: two to four short sentences.
- Do NOT use bullet points, numbered lists, markdown, emojis or URLs.
- Say prices, times and phone numbers the way a person would say them out loud."""

_CHAT_STYLE = """- Be concise and friendly.
- Prefer short paragraphs and bullet points."""

_COMMON_RULES = """- If the job is outside the service area or outside the services listed below, politely say so and suggest the caller look for another provider or call the office to double-check.
- Never promise an exact price or appointment time. Always remind the caller that a human handyman will follow up to confirm the details and scheduling.
- Try to end by offering to take the caller's name, phone number, address and a short description of the job so a handyman can follow up."""

SYSTEM_PROMPT_TEMPLATE = """
You are the phone intake and Q&A assistant for a local handyman service called "{business_name}" in {location}.

You answer questions about:
- Services provided
- Service areas
- Hours
- Typical pricing ranges
- How booking and scheduling works

You must:
{style_rules}
{common_rules}

Here is structured knowledge about the business:

SUMMARY:
{summary}

SERVICE AREA:
{service_area}

HOURS:
{hours}

SERVICES:
{services}

PRICING NOTES:
{pricing_notes}

BOOKING PROCESS:
{booking_process}

EXAMPLE FAQ ANSWERS:
{faqs}

CONTACT PHONE:
{contact_phone}
"""


def _format_faqs(kb: KnowledgeRecord) -> str:
    return "\n\n".join(f"Q: {faq.question}\nA: {faq.answer}" for faq in kb.faqs)


def build_system_prompt(kb: KnowledgeRecord, channel: Channel) -> str:
    """Render the system prompt for *channel* from the knowledge record."""
    style_rules = _PHONE_STYLE if channel is Channel.PHONE else _CHAT_STYLE
    return SYSTEM_PROMPT_TEMPLATE.format(
        business_name=kb.business_name,
        location=kb.location,
        style_rules=style_rules,
        common_rules=_COMMON_RULES,
        summary=kb.summary,
        service_area=", ".join(kb.service_area),
        hours=kb.hours,
        services="; ".join(kb.services),
        pricing_notes="; ".join(kb.pricing_notes),
        booking_process="; ".join(kb.booking_process),
        faqs=_format_faqs(kb),
        contact_phone=kb.contact_phone,
    ).strip()
