"""Tests for the speech I/O adapters."""
import pytest

from voxmail.voice.models import FocusContext, Intent, VoiceState
from voxmail.voice.recognition import (
    ConsoleSpeech,
    UnavailableSpeech,
    WebSpeechBridge,
    WebSpeechConfig,
    process_web_speech_result,
)
from voxmail.voice.session_controller import VoiceSessionController


# =============================================================================
# Web Speech
# =============================================================================


class TestWebSpeechConfig:
    """Browser recognizer settings."""

    def test_defaults(self):
        assert WebSpeechConfig().to_dict() == {
            "lang": "en-US",
            "continuous": True,
            "interimResults": True,
            "maxAlternatives": 1,
        }

    def test_from_config(self):
        config = WebSpeechConfig.from_config({"language": "en-GB", "interim_results": False})
        assert config.language == "en-GB"
        assert config.interim_results is False
        assert config.continuous is True


class TestProcessResult:
    """Browser result dicts."""

    def test_final_result(self):
        result = process_web_speech_result({
            "transcript": "  go to subject ",
            "confidence": 0.92,
            "isFinal": True,
            "alternatives": ["go to subjects"],
        })
        assert result.transcript == "go to subject"
        assert result.confidence == 0.92
        assert result.is_final
        assert result.alternatives == ["go to subjects"]
        assert result.source == "web_speech"

    def test_missing_fields(self):
        result = process_web_speech_result({})
        assert result.transcript == ""
        assert result.confidence == 0.0
        assert result.is_final


class TestWebSpeechBridge:
    """Recognition pushed in, synthesis pulled out."""

    @pytest.mark.asyncio
    async def test_push_result_reaches_controller(self, host_factory):
        bridge = WebSpeechBridge()
        host = host_factory()
        voice = VoiceSessionController(host, bridge, bridge, focus=FocusContext.BODY)
        voice.activate()

        assert await bridge.push_result({"transcript": "send", "isFinal": True})
        assert host.intents == [Intent.submit()]

    @pytest.mark.asyncio
    async def test_interim_result(self, host_factory):
        bridge = WebSpeechBridge()
        voice = VoiceSessionController(host_factory(), bridge, bridge)
        voice.activate()

        await bridge.push_result({"transcript": "go to", "isFinal": False})
        assert voice.interim_transcript == "go to"

    @pytest.mark.asyncio
    async def test_push_without_listener(self):
        bridge = WebSpeechBridge()
        assert await bridge.push_result({"transcript": "send"}) is False

    def test_speak_replaces_pending(self):
        bridge = WebSpeechBridge()
        bridge.speak("first")
        bridge.speak("second", rate=1.4)
        assert bridge.interrupted == 1
        utterance = bridge.pull_utterance()
        assert utterance.text == "second"
        assert utterance.rate == 1.4
        assert bridge.pull_utterance() is None

    def test_cancel(self):
        bridge = WebSpeechBridge()
        bridge.speak("hello")
        bridge.cancel()
        assert bridge.pending_utterance is None

    def test_no_synthesis(self):
        bridge = WebSpeechBridge(synthesis_supported=False)
        assert bridge.speak("hello") is False
        assert bridge.pending_utterance is None

    def test_no_recognition(self, host_factory):
        bridge = WebSpeechBridge(recognition_supported=False)
        voice = VoiceSessionController(host_factory(), bridge, bridge)
        assert voice.activate() is False
        assert voice.capability_unavailable

    @pytest.mark.asyncio
    async def test_recognition_revoked_returns_to_idle(self, host_factory):
        bridge = WebSpeechBridge()
        host = host_factory()
        voice = VoiceSessionController(host, bridge, bridge)
        voice.activate()
        bridge.pull_utterance()

        await bridge.report_capabilities(recognition=False, synthesis=True)

        assert not bridge.listening
        assert not bridge.is_available
        assert voice.state == VoiceState.IDLE
        assert bridge.pull_utterance().text == host.deactivation_message
        assert bridge.interrupted == 0
        assert bridge.pull_utterance() is None

    @pytest.mark.asyncio
    async def test_capabilities_reported_while_idle(self, host_factory):
        bridge = WebSpeechBridge()
        voice = VoiceSessionController(host_factory(), bridge, bridge)

        await bridge.report_capabilities(recognition=False, synthesis=True)

        assert voice.state == VoiceState.IDLE
        assert bridge.pending_utterance is None
        assert voice.activate() is False


# =============================================================================
# Console and Unavailable
# =============================================================================


class TestConsoleSpeech:
    """Typed lines as speech."""

    def test_speak_writes(self):
        lines: list[str] = []
        console = ConsoleSpeech(write=lines.append)
        console.speak("Email starred")
        console.speak("Slower", rate=0.8)
        assert lines == ["[voice] Email starred", "[voice (x0.8)] Slower"]

    @pytest.mark.asyncio
    async def test_feed(self, host_factory):
        console = ConsoleSpeech(write=lambda line: None)
        host = host_factory()
        voice = VoiceSessionController(host, console, console, focus=FocusContext.BODY)
        voice.activate()

        assert await console.feed("  send  ")
        assert host.intents == [Intent.submit()]

    @pytest.mark.asyncio
    async def test_blank_line_ignored(self, host_factory):
        console = ConsoleSpeech(write=lambda line: None)
        voice = VoiceSessionController(host_factory(), console, console)
        voice.activate()
        assert await console.feed("   ") is False


class TestUnavailableSpeech:
    """Platforms without speech support."""

    def test_everything_is_a_no_op(self):
        speech = UnavailableSpeech()
        assert not speech.is_available
        assert speech.speak("hello") is False
        speech.cancel()
        speech.stop()
        assert not speech.listening
