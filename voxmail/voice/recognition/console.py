"""Terminal speech adapter: typed lines stand in for final transcripts,
utterances are printed."""

from __future__ import annotations

from typing import Callable

from voxmail.voice.models import TranscriptionResult
from voxmail.voice.recognition.base import SpeechOutput, SpokenUtterance, StreamingSpeechInput


class ConsoleSpeech(StreamingSpeechInput, SpeechOutput):
    """Reads commands from the console, prints what would be spoken."""

    def __init__(self, write: Callable[[str], None] = print):
        super().__init__()
        self._write = write
        self.last_utterance: SpokenUtterance | None = None

    @property
    def name(self) -> str:
        return "console"

    @property
    def is_available(self) -> bool:
        return True

    async def feed(self, line: str) -> bool:
        return await self.deliver(
            TranscriptionResult(transcript=line.strip(), confidence=1.0, source="console")
        )

    def speak(self, text: str, rate: float = 1.0) -> bool:
        self.last_utterance = SpokenUtterance(text, rate)
        suffix = f" (x{rate:g})" if rate != 1.0 else ""
        self._write(f"[voice{suffix}] {text}")
        return True

    def cancel(self) -> None:
        self.last_utterance = None
