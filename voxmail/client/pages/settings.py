"""
Settings page: accessibility preferences.

Edits apply to a draft so the display variables preview immediately;
nothing reaches the server until save(). The test voice button speaks at
the draft rate so the user can hear a speed before keeping it.
"""

from __future__ import annotations

import logging

from voxmail.client.display import display_variables
from voxmail.client.errors import VoxmailError
from voxmail.client.pages.base import Page
from voxmail.models import (
    DEFAULT_VOICE_SPEED,
    MAX_VOICE_SPEED,
    MIN_VOICE_SPEED,
    FontSize,
    UserPreferences,
)
from voxmail.voice.models import CommandResult, FocusContext, Intent, IntentType, PageName
from voxmail.voice.parser.command_tables import HIGH_CONTRAST

logger = logging.getLogger(__name__)

VOICE_SPEED_STEP = 0.2

TEST_SENTENCE = (
    "This is a test of the voice speed setting. "
    "You can adjust the slider to make the voice faster or slower."
)

SAVED_MESSAGE = "Your accessibility settings have been saved"
SAVE_FAILED = "Failed to save settings. Please try again."


def clamp_speed(value: float) -> float:
    """Clamp to the allowed range and round to one decimal."""
    return round(min(MAX_VOICE_SPEED, max(MIN_VOICE_SPEED, value)), 1)


class SettingsPage(Page):
    page = PageName.SETTINGS
    deactivation_message = "Voice commands disabled"

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.draft: UserPreferences = context.auth.preferences.model_copy()
        self.saving = False

    def activation_message(self, focus: FocusContext) -> str:
        return (
            "Voice recognition enabled. You can say commands like "
            '"set font size to large" or "enable high contrast".'
        )

    async def load(self) -> None:
        self.draft = self.context.auth.preferences.model_copy()

    @property
    def display(self) -> dict[str, str]:
        """CSS variables for the draft, for a live preview."""
        return display_variables(self.draft)

    @property
    def dirty(self) -> bool:
        return self.draft != self.context.auth.preferences

    # =========================================================================
    # Controls
    # =========================================================================

    def set_font_size(self, size: FontSize | str) -> str:
        size = FontSize(size)
        self.draft = self.draft.model_copy(update={"font_size": size})
        return f"Font size set to {size.value}"

    def set_high_contrast(self, enabled: bool | None = None) -> str:
        """Set the flag, or flip it when ``enabled`` is None."""
        if enabled is None:
            enabled = not self.draft.high_contrast
        self.draft = self.draft.model_copy(update={"high_contrast": enabled})
        return f"High contrast mode {'enabled' if enabled else 'disabled'}"

    def set_voice_speed(self, value: float) -> float:
        speed = clamp_speed(value)
        self.draft = self.draft.model_copy(update={"voice_speed": speed})
        return speed

    def test_voice(self) -> bool:
        return self.voice.say(TEST_SENTENCE, rate=self.draft.voice_speed, force=True)

    async def save(self) -> bool:
        if self.saving:
            return False
        self.saving = True
        try:
            saved = await self.context.auth.update_preferences(self.draft)
        except VoxmailError as e:
            logger.warning(f"Saving preferences failed: {e}")
            if self.mounted:
                self.show_error(SAVE_FAILED)
            return False
        finally:
            self.saving = False
        if not self.mounted:
            return True
        self.draft = saved.model_copy()
        self.show_success(SAVED_MESSAGE)
        return True

    async def submit(self) -> CommandResult:
        saved = await self.save()
        return CommandResult(success=saved, error=None if saved else "save_failed")

    # =========================================================================
    # Voice handlers
    # =========================================================================

    def register_handlers(self) -> None:
        self.router.register(IntentType.ACTION, self._on_font_size, name="font_size")
        self.router.register(IntentType.TOGGLE_STATE, self._on_contrast, name=HIGH_CONTRAST)
        self.router.register(IntentType.ACTION, self._on_voice_speed, name="voice_speed")
        self.router.register(IntentType.ACTION, self._on_test_voice, name="test_voice")

    async def _on_font_size(self, intent: Intent) -> CommandResult:
        return CommandResult(success=True, message=self.set_font_size(intent.value or "medium"))

    async def _on_contrast(self, intent: Intent) -> CommandResult:
        return CommandResult(success=True, message=self.set_high_contrast(intent.state))

    async def _on_voice_speed(self, intent: Intent) -> CommandResult:
        current = self.draft.voice_speed
        if intent.value == "slower":
            self.set_voice_speed(current - VOICE_SPEED_STEP)
            message = "Voice speed decreased"
        elif intent.value == "faster":
            self.set_voice_speed(current + VOICE_SPEED_STEP)
            message = "Voice speed increased"
        else:
            self.set_voice_speed(DEFAULT_VOICE_SPEED)
            message = "Voice speed set to normal"
        return CommandResult(success=True, message=message)

    async def _on_test_voice(self, intent: Intent) -> CommandResult:
        self.test_voice()
        return CommandResult(success=True)
