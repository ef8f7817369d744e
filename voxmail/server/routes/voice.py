"""
Voice API Routes

Provides endpoints for the voice interface:
- GET  /api/voice/config     - Browser SpeechRecognition settings
- GET  /api/voice/commands   - Documented commands, per page
- POST /api/voice/interpret  - Interpret a transcript against a page's command table
- GET  /api/voice/history    - Recently interpreted transcripts of the current user
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from voxmail.config import get_section
from voxmail.models import UserProfile
from voxmail.server import database
from voxmail.server.dependencies import get_current_user
from voxmail.voice.models import FocusContext, PageName
from voxmail.voice.parser import build_table, interpret
from voxmail.voice.recognition.web_speech_config import WebSpeechConfig

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================


class InterpretRequest(BaseModel):
    """A final transcript plus where it was spoken."""

    transcript: str = Field(..., min_length=1, max_length=2000)
    page: PageName
    focus: Optional[FocusContext] = None


class InterpretResponse(BaseModel):
    page: PageName
    focus: FocusContext
    intent: dict[str, Any]


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/config")
async def get_voice_config() -> dict[str, Any]:
    """Settings for the browser-side recognizer."""
    return WebSpeechConfig.from_config(get_section("voice")).to_dict()


@router.get("/commands")
async def list_voice_commands(
    page: Optional[PageName] = Query(None, description="Limit to one page"),
) -> dict[str, Any]:
    """List documented voice commands."""
    pages = [page] if page is not None else list(PageName)
    commands = {p.value: build_table(p).commands() for p in pages}
    return {"pages": commands, "total": sum(len(c) for c in commands.values())}


@router.post("/interpret", response_model=InterpretResponse)
async def interpret_transcript(
    request: InterpretRequest, user: UserProfile = Depends(get_current_user)
):
    """
    Interpret one transcript.

    Without ``focus`` the page's own focus is assumed. The result is the
    same intent the client would compute locally.
    """
    focus = request.focus or request.page.focus
    intent = interpret(request.transcript, focus, build_table(request.page))
    result = intent.to_dict()

    # Spoken passwords stay out of the log and the stored history
    safe = intent.redacted()
    database.log_voice_command(user.id, request.page.value, safe.transcript, safe.to_dict())
    logger.debug(f"Interpreted '{safe.transcript}' on {request.page.value} → {intent.type.value}")

    return InterpretResponse(page=request.page, focus=focus, intent=result)


@router.get("/history")
async def get_voice_history(
    limit: int = Query(50, ge=1, le=500), user: UserProfile = Depends(get_current_user)
) -> dict[str, Any]:
    history = database.get_voice_history(user.id, limit)
    return {"history": history, "count": len(history)}
