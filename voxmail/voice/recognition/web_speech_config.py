"""Web Speech API configuration and result processing.

The actual Web Speech API runs in the browser (JavaScript).
This module defines the config sent to the frontend and processes
the results sent back from the browser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from voxmail.voice.models import TranscriptionResult


@dataclass
class WebSpeechConfig:
    """Configuration for the browser-side SpeechRecognition object."""

    language: str = "en-US"
    continuous: bool = True
    interim_results: bool = True
    max_alternatives: int = 1

    @classmethod
    def from_config(cls, voice: dict[str, Any]) -> WebSpeechConfig:
        """Build from the ``voice`` section of args/voxmail.yaml."""
        defaults = cls()
        return cls(
            language=str(voice.get("language", defaults.language)),
            continuous=bool(voice.get("continuous", defaults.continuous)),
            interim_results=bool(voice.get("interim_results", defaults.interim_results)),
            max_alternatives=int(voice.get("max_alternatives", defaults.max_alternatives)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "lang": self.language,
            "continuous": self.continuous,
            "interimResults": self.interim_results,
            "maxAlternatives": self.max_alternatives,
        }


def process_web_speech_result(result: dict[str, Any]) -> TranscriptionResult:
    """Convert a Web Speech API result dict into a TranscriptionResult.

    Expected format from the browser:
    {
        "transcript": "go to subject",
        "confidence": 0.92,
        "isFinal": true,
        "alternatives": ["go to subjects"],
        "language": "en-US"
    }
    """
    alternatives = result.get("alternatives") or []
    return TranscriptionResult(
        transcript=str(result.get("transcript") or "").strip(),
        confidence=float(result.get("confidence") or 0.0),
        source="web_speech",
        language=result.get("language", "en-US"),
        is_final=bool(result.get("isFinal", True)),
        alternatives=[str(a) for a in alternatives],
    )
