"""Narrow speech interfaces the voice layer depends on.

SpeechInput: continuous recognition. start() registers the handlers and
returns False when the platform cannot recognise speech. After stop()
returns no handler is called again.

SpeechOutput: one utterance channel, no queue. Each speak() interrupts
whatever is being said. speak() returns False when synthesis is missing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable

from voxmail.voice.models import TranscriptionResult

TranscriptHandler = Callable[[str], Awaitable[None]]
EndHandler = Callable[[], Awaitable[None]]


@dataclass
class RecognitionHandlers:
    """Callbacks a recognition session reports to."""

    on_interim: TranscriptHandler
    on_final: TranscriptHandler
    on_end: EndHandler


@dataclass(frozen=True)
class SpokenUtterance:
    """One synthesis request."""

    text: str
    rate: float = 1.0


class SpeechInput(ABC):
    """Abstract base for speech recognition adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier (e.g. 'web_speech', 'console')."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether recognition can run on this platform."""

    @property
    @abstractmethod
    def listening(self) -> bool:
        """Whether a recognition session is active."""

    @abstractmethod
    def start(self, handlers: RecognitionHandlers) -> bool:
        """Begin continuous recognition. False means capability unavailable."""

    @abstractmethod
    def stop(self) -> None:
        """Halt recognition. No handler is called after this returns."""


class SpeechOutput(ABC):
    """Abstract base for speech synthesis adapters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether synthesis can run on this platform."""

    @abstractmethod
    def speak(self, text: str, rate: float = 1.0) -> bool:
        """Say ``text``, replacing any in-flight utterance."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop any in-flight utterance."""


class StreamingSpeechInput(SpeechInput):
    """SpeechInput fed with results from outside (a browser, a terminal).

    The owner of the platform connection calls deliver() for every
    recognition result and end() when the platform ends the session.
    """

    def __init__(self) -> None:
        self._handlers: RecognitionHandlers | None = None

    @property
    def listening(self) -> bool:
        return self._handlers is not None

    def start(self, handlers: RecognitionHandlers) -> bool:
        if not self.is_available:
            return False
        self._handlers = handlers
        return True

    def stop(self) -> None:
        self._handlers = None

    async def deliver(self, result: TranscriptionResult) -> bool:
        """Forward one result. Returns False when nothing is listening."""
        handlers = self._handlers
        if handlers is None or not result.transcript:
            return False
        if result.is_final:
            await handlers.on_final(result.transcript)
        else:
            await handlers.on_interim(result.transcript)
        return True

    async def end(self) -> None:
        """The platform ended the session (permission revoked, timeout)."""
        handlers, self._handlers = self._handlers, None
        if handlers is not None:
            await handlers.on_end()
