"""Twilio voice webhook: a two-turn call flow rendered as TwiML.

Twilio POSTs to the webhook once when the call connects and once more after
``<Gather>`` has captured the caller's speech.  The server keeps no session
between the two requests: the only thing that tells them apart is whether
``SpeechResult`` carries a transcript.

    GREETING  (no SpeechResult)  -> greet, <Gather action=WEBHOOK_PATH>
    ANSWER    (SpeechResult set) -> answer, promise a follow-up, <Hangup/>

The Gather's ``action`` points back at the same path, so Twilio re-enters
the webhook in the ANSWER state.  If the Gather times out, Twilio falls
through to the verbs that follow it instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from twilio.twiml.voice_response import Gather, VoiceResponse

from handyman_assistant.context import AppContext
from handyman_assistant.prompts import Channel, build_system_prompt
from handyman_assistant.services.completion_client import PHONE_TEMPERATURE, UpstreamError

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/twilio-voice"

GATHER_PROMPT = (
    "How can I help you today? For example, you can say: "
    "I have a leaky faucet, do you serve Vienna, or how much do you charge "
    "to mount a TV."
)
NO_SPEECH_MESSAGE = "Sorry, I didn't catch that. Please call back and tell us about your job."
CLOSING_MESSAGE = (
    "A member of our team will follow up to confirm the details and "
    "schedule your job. Thanks for calling, goodbye."
)
UPSTREAM_APOLOGY = (
    "I'm sorry, I'm having trouble answering right now. "
    "Please call again later. Goodbye."
)


class CallState(str, Enum):
    GREETING = "greeting"
    ANSWER = "answer"


@dataclass(frozen=True)
class VoiceTurn:
    """One webhook invocation, reduced to the two fields the flow reads."""

    caller_number: str = ""
    speech_result: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> VoiceTurn:
        return cls(
            caller_number=(form.get("From") or "").strip(),
            speech_result=(form.get("SpeechResult") or "").strip(),
        )

    @property
    def state(self) -> CallState:
        return CallState.ANSWER if self.speech_result else CallState.GREETING


def caller_content(turn: VoiceTurn) -> str:
    """User message sent to the model for a transcribed phone request."""
    return (
        f"Caller phone number: {turn.caller_number or 'unknown'}\n"
        f"Caller said: {turn.speech_result}"
    )


class VoiceHandler:
    def __init__(self, context: AppContext):
        self._context = context

    async def respond(self, turn: VoiceTurn) -> str:
        """Return the TwiML document for *turn*."""
        if turn.state is CallState.GREETING:
            return str(self._greeting())
        return str(await self._answer(turn))

    def _greeting(self) -> VoiceResponse:
        name = self._context.knowledge.business_name or "our handyman service"
        vr = VoiceResponse()
        vr.say(f"Hi, thanks for calling {name}. I'm the virtual assistant.")
        vr.pause(length=1)
        gather = Gather(
            input="speech",
            action=WEBHOOK_PATH,
            method="POST",
            speech_timeout="auto",
        )
        gather.say(GATHER_PROMPT)
        vr.append(gather)
        vr.say(NO_SPEECH_MESSAGE)
        return vr

    async def _answer(self, turn: VoiceTurn) -> VoiceResponse:
        logger.info("Caller %s said: %s", turn.caller_number or "unknown", turn.speech_result)
        vr = VoiceResponse()

        client = self._context.completion_client
        if client is None:
            vr.say(
                "I'm sorry, our assistant isn't available right now. "
                f"Please call us directly at {self._context.contact_phone}. Goodbye."
            )
            vr.hangup()
            return vr

        system_prompt = build_system_prompt(self._context.knowledge, Channel.PHONE)
        try:
            answer = await client.complete(system_prompt, caller_content(turn), PHONE_TEMPERATURE)
        except UpstreamError as exc:
            logger.error(
                "Completion API failed for caller %s (status=%s): %s",
                turn.caller_number or "unknown", exc.status_code, exc.body,
            )
            vr.say(UPSTREAM_APOLOGY)
            vr.hangup()
            return vr

        vr.say(answer)
        vr.pause(length=1)
        vr.say(CLOSING_MESSAGE)
        vr.hangup()
        return vr
