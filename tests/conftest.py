"""Shared test fixtures for VoxMail tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- A recording speech adapter standing in for the browser
- Cheap password hashing

Usage:
    def test_something(isolated_db):
        # every database call in the test goes to a throwaway file
        ...
"""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from voxmail.voice.models import TranscriptionResult
from voxmail.voice.recognition.base import SpeechOutput, SpokenUtterance, StreamingSpeechInput


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def isolated_db(temp_db: Path) -> Generator[Path, None, None]:
    """Point the backend's database module at the temporary file."""
    with patch("voxmail.server.database.DB_PATH", temp_db):
        yield temp_db


@pytest.fixture
def fast_kdf() -> Generator[None, None, None]:
    """Hash passwords with few iterations so tests stay quick."""
    with patch("voxmail.server.passwords.KDF_ITERATIONS", 1000):
        yield


# ─────────────────────────────────────────────────────────────────────────────
# Speech Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class RecordingSpeech(StreamingSpeechInput, SpeechOutput):
    """Speech adapter that records every utterance instead of playing it."""

    def __init__(self, recognition: bool = True, synthesis: bool = True):
        super().__init__()
        self.recognition = recognition
        self.synthesis = synthesis
        self.spoken: list[SpokenUtterance] = []
        self.cancelled = 0

    @property
    def name(self) -> str:
        return "recording"

    @property
    def is_available(self) -> bool:
        return self.recognition

    @property
    def texts(self) -> list[str]:
        return [utterance.text for utterance in self.spoken]

    @property
    def last(self) -> str | None:
        return self.spoken[-1].text if self.spoken else None

    async def hear(self, transcript: str, final: bool = True) -> bool:
        """Deliver a recognition result as if the user had spoken."""
        return await self.deliver(
            TranscriptionResult(transcript=transcript, confidence=0.95, is_final=final)
        )

    def speak(self, text: str, rate: float = 1.0) -> bool:
        if not self.synthesis:
            return False
        self.spoken.append(SpokenUtterance(text, rate))
        return True

    def cancel(self) -> None:
        self.cancelled += 1

    def reset(self) -> None:
        self.spoken.clear()
        self.cancelled = 0


@pytest.fixture
def speech() -> RecordingSpeech:
    """Speech adapter with recognition and synthesis available."""
    return RecordingSpeech()


@pytest.fixture
def no_speech() -> RecordingSpeech:
    """Speech adapter on a platform without recognition."""
    return RecordingSpeech(recognition=False, synthesis=False)
