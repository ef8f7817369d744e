"""Adapter for platforms without speech support. Every call is a no-op."""

from __future__ import annotations

from voxmail.voice.recognition.base import RecognitionHandlers, SpeechInput, SpeechOutput


class UnavailableSpeech(SpeechInput, SpeechOutput):
    """Reports the capability as missing instead of raising."""

    @property
    def name(self) -> str:
        return "unavailable"

    @property
    def is_available(self) -> bool:
        return False

    @property
    def listening(self) -> bool:
        return False

    def start(self, handlers: RecognitionHandlers) -> bool:
        return False

    def stop(self) -> None:
        pass

    def speak(self, text: str, rate: float = 1.0) -> bool:
        return False

    def cancel(self) -> None:
        pass
