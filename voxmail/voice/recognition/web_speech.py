"""Bridge between a browser running the Web Speech API and the voice layer.

Recognition results arrive from the browser (a websocket or polling
front end) and are pushed in with push_result(). Synthesis has no queue:
speak() replaces the pending utterance and the front end pulls the
latest one with pull_utterance().
"""

from __future__ import annotations

import logging
from typing import Any

from voxmail.voice.recognition.base import SpeechOutput, SpokenUtterance, StreamingSpeechInput
from voxmail.voice.recognition.web_speech_config import WebSpeechConfig, process_web_speech_result

logger = logging.getLogger(__name__)


class WebSpeechBridge(StreamingSpeechInput, SpeechOutput):
    """Speech I/O backed by the browser's SpeechRecognition and speechSynthesis."""

    def __init__(
        self,
        config: WebSpeechConfig | None = None,
        recognition_supported: bool = True,
        synthesis_supported: bool = True,
    ):
        super().__init__()
        self.config = config or WebSpeechConfig()
        self.recognition_supported = recognition_supported
        self.synthesis_supported = synthesis_supported
        self._pending: SpokenUtterance | None = None
        self.interrupted = 0

    @property
    def name(self) -> str:
        return "web_speech"

    @property
    def is_available(self) -> bool:
        return self.recognition_supported

    async def report_capabilities(self, recognition: bool, synthesis: bool) -> None:
        """Record what the browser said it supports.

        Losing recognition while listening ends the session the same way
        a platform end does, so the controller returns to idle.
        """
        self.recognition_supported = recognition
        self.synthesis_supported = synthesis
        logger.info(f"Browser speech support: recognition={recognition} synthesis={synthesis}")
        if not recognition and self.listening:
            await self.end()

    async def push_result(self, result: dict[str, Any]) -> bool:
        """Forward one browser recognition result."""
        return await self.deliver(process_web_speech_result(result))

    # --- output ---

    def speak(self, text: str, rate: float = 1.0) -> bool:
        if not self.synthesis_supported:
            return False
        if self._pending is not None:
            self.interrupted += 1
        self._pending = SpokenUtterance(text, rate)
        return True

    def cancel(self) -> None:
        self._pending = None

    @property
    def pending_utterance(self) -> SpokenUtterance | None:
        return self._pending

    def pull_utterance(self) -> SpokenUtterance | None:
        """Hand the latest utterance to the browser. Each is pulled once."""
        utterance, self._pending = self._pending, None
        return utterance
