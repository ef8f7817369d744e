"""Speech I/O adapters: Web Speech bridge, console, unavailable."""

from voxmail.voice.recognition.base import (
    RecognitionHandlers,
    SpeechInput,
    SpeechOutput,
    SpokenUtterance,
    StreamingSpeechInput,
)
from voxmail.voice.recognition.console import ConsoleSpeech
from voxmail.voice.recognition.unavailable import UnavailableSpeech
from voxmail.voice.recognition.web_speech import WebSpeechBridge
from voxmail.voice.recognition.web_speech_config import WebSpeechConfig, process_web_speech_result

__all__ = [
    "ConsoleSpeech",
    "RecognitionHandlers",
    "SpeechInput",
    "SpeechOutput",
    "SpokenUtterance",
    "StreamingSpeechInput",
    "UnavailableSpeech",
    "WebSpeechBridge",
    "WebSpeechConfig",
    "process_web_speech_result",
]
