"""Voice session controller: one per mounted page.

States:
    IDLE ──activate──▶ LISTENING ──deactivate / adapter end──▶ IDLE

Each transition speaks exactly one confirmation. While LISTENING every
final transcript is interpreted once and dispatched to the page; final
transcripts are handled one at a time under a lock. Interim transcripts
only update ``interim_transcript``. close() (page unmount) forces IDLE,
stops recognition and cancels speech without saying anything.

Usage:
    async with VoiceSessionController(page, speech, speech) as voice:
        voice.activate()
        ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

from voxmail.client.errors import CapabilityUnavailable
from voxmail.models import DEFAULT_VOICE_SPEED
from voxmail.voice.models import (
    CommandResult,
    FocusContext,
    Intent,
    IntentType,
    PageName,
    VoiceState,
)
from voxmail.voice.parser.command_tables import LISTENING
from voxmail.voice.parser.intent_parser import CommandTable, Utterance, dictate, interpret
from voxmail.voice.recognition.base import RecognitionHandlers, SpeechInput, SpeechOutput

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Cancelled"


class VoiceHost(Protocol):
    """What the controller needs from the page it serves."""

    page: PageName
    deactivation_message: str

    @property
    def command_table(self) -> CommandTable: ...

    def activation_message(self, focus: FocusContext) -> str: ...

    def focus_announcement(self, target: FocusContext) -> str | None: ...

    async def handle_intent(self, intent: Intent) -> CommandResult | None: ...


class VoiceSessionController:
    """Owns listening state, the speech channel and intent dispatch for one page."""

    def __init__(
        self,
        host: VoiceHost,
        speech_input: SpeechInput,
        speech_output: SpeechOutput,
        *,
        focus: FocusContext | None = None,
        rate_provider: Callable[[], float] | None = None,
    ):
        self._host = host
        self._input = speech_input
        self._output = speech_output
        self._rate_provider = rate_provider or (lambda: DEFAULT_VOICE_SPEED)
        self._lock = asyncio.Lock()
        self._closed = False

        self.state = VoiceState.IDLE
        self.focus = FocusContext(focus) if focus is not None else host.page.focus
        self.interim_transcript = ""
        self.last_transcript = ""
        self.last_intent: Intent | None = None
        self.pending_confirmation: str | None = None
        self.capability_unavailable = False

    @property
    def listening(self) -> bool:
        return self.state == VoiceState.LISTENING

    @property
    def closed(self) -> bool:
        return self._closed

    # --- state transitions ---

    def activate(self, required: bool = False) -> bool:
        """IDLE → LISTENING. Returns False when recognition is unavailable.

        Raises:
            CapabilityUnavailable: if ``required`` and recognition is missing.
        """
        if self._closed:
            return False
        if self.listening:
            return True

        handlers = RecognitionHandlers(
            on_interim=self._on_interim,
            on_final=self.handle_final,
            on_end=self._on_end,
        )
        if not self._input.start(handlers):
            self.capability_unavailable = True
            logger.info(f"Speech recognition unavailable ({self._input.name}) on {self._host.page.value}")
            if required:
                raise CapabilityUnavailable("Speech recognition is not available")
            return False

        self.state = VoiceState.LISTENING
        self._speak(self._host.activation_message(self.focus))
        return True

    def deactivate(self) -> bool:
        """LISTENING → IDLE. Returns False when already idle."""
        if not self.listening:
            return False
        self._input.stop()
        self._to_idle()
        self._speak(self._host.deactivation_message)
        return True

    def toggle(self) -> bool:
        """Flip listening. Returns the new listening state."""
        if self.listening:
            self.deactivate()
        else:
            self.activate()
        return self.listening

    def close(self) -> None:
        """Page unmount: force IDLE, stop recognition, cancel speech, say nothing."""
        if self._closed:
            return
        self._closed = True
        if self.listening:
            self._input.stop()
        self._to_idle()
        self._output.cancel()

    def _to_idle(self) -> None:
        self.state = VoiceState.IDLE
        self.interim_transcript = ""
        self.pending_confirmation = None

    async def __aenter__(self) -> VoiceSessionController:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- focus and speech ---

    def set_focus(self, target: FocusContext) -> None:
        """Focus moved by the UI (click, tab). Nothing is spoken."""
        self.focus = FocusContext(target)

    def say(self, text: str | None, rate: float | None = None, force: bool = False) -> bool:
        """Speak on behalf of the page.

        Only while listening unless ``force`` (explicit buttons like
        "test voice"). Never after close().
        """
        if not force and not self.listening:
            return False
        return self._speak(text, rate)

    def stop_speaking(self) -> None:
        self._output.cancel()

    def _speak(self, text: str | None, rate: float | None = None) -> bool:
        if self._closed or not text:
            return False
        if rate is None:
            rate = self._rate_provider()
        return self._output.speak(text, rate)

    # --- recognition callbacks ---

    async def _on_interim(self, transcript: str) -> None:
        if self.listening:
            self.interim_transcript = transcript

    async def _on_end(self) -> None:
        if self._closed or not self.listening:
            return
        logger.info(f"Recognition ended by platform on {self._host.page.value}")
        self._to_idle()
        self._speak(self._host.deactivation_message)

    async def handle_final(self, transcript: str) -> CommandResult | None:
        """Interpret and dispatch one final transcript. Ignored while IDLE."""
        if not self.listening:
            return None
        async with self._lock:
            if not self.listening:
                return None
            self.interim_transcript = ""
            self.last_transcript = transcript
            intent = interpret(transcript, self.focus, self._host.command_table)
            self.last_intent = intent
            logger.debug(
                f"Voice '{intent.redacted().transcript}' → {intent.type.value} on {self._host.page.value}"
            )
            return await self._dispatch(intent)

    async def _dispatch(self, intent: Intent) -> CommandResult | None:
        # A confirmation prompt only covers the very next utterance
        pending, self.pending_confirmation = self.pending_confirmation, None

        if intent.type == IntentType.FOCUS and intent.field is not None:
            self.focus = intent.field
            announcement = self._host.focus_announcement(intent.field)
            self._speak(announcement)
            return CommandResult(success=True, message=announcement, intent=IntentType.FOCUS)

        if intent.type == IntentType.TOGGLE_STATE and intent.name == LISTENING:
            if intent.state is not True:
                self.deactivate()
            return CommandResult(success=True, intent=IntentType.TOGGLE_STATE)

        if intent.type == IntentType.SPEAK:
            self.pending_confirmation = intent.name
            self._speak(intent.text)
            return CommandResult(success=True, message=intent.text, intent=IntentType.SPEAK)

        if intent.type == IntentType.CONFIRM:
            if pending is None:
                # Nothing to confirm: "yes" is just words for the focused field
                intent = dictate(
                    Utterance.of(intent.transcript), self.focus, self._host.command_table
                ).with_transcript(intent.transcript)
            elif intent.state:
                intent = Intent.action(pending).with_transcript(intent.transcript)
            else:
                self._speak(CANCELLED_MESSAGE)
                return CommandResult(success=True, message=CANCELLED_MESSAGE, intent=IntentType.CONFIRM)

        if intent.type == IntentType.NONE:
            return None

        result = await self._host.handle_intent(intent)
        if result is not None and result.message:
            self._speak(result.message)
        return result


__all__ = ["VoiceHost", "VoiceSessionController"]
