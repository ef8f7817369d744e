"""
Base page controller.

A page is the headless equivalent of one client screen: it owns its form
values, error/success banners and a VoiceSessionController. Everything a
page needs comes in through PageContext; nothing is global.

Buttons and voice share one code path: a voice Submit calls the same
submit() a button does, with the same validation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from voxmail.client.auth import AuthController
from voxmail.client.email_store import EmailStore
from voxmail.client.navigation import Navigator
from voxmail.voice.models import CommandResult, FocusContext, Intent, IntentType, PageName
from voxmail.voice.parser.command_router import IntentRouter
from voxmail.voice.parser.command_tables import LOGOUT, build_table
from voxmail.voice.parser.intent_parser import CommandTable, append_text
from voxmail.voice.recognition.base import SpeechInput, SpeechOutput
from voxmail.voice.session_controller import VoiceSessionController

logger = logging.getLogger(__name__)

FOCUS_ANNOUNCEMENTS: dict[FocusContext, str] = {
    FocusContext.RECIPIENT: "Now focused on recipient field",
    FocusContext.SUBJECT: "Now focused on subject field",
    FocusContext.BODY: "Now focused on message body",
    FocusContext.SEARCH: "Now focused on search",
    FocusContext.NAME: "Now focused on name field",
    FocusContext.EMAIL: "Now focused on email field",
    FocusContext.PASSWORD: "Now focused on password field",
}

CLEAR_MESSAGES: dict[FocusContext, str] = {
    FocusContext.RECIPIENT: "Recipient field cleared",
    FocusContext.SUBJECT: "Subject field cleared",
    FocusContext.BODY: "Message body cleared",
    FocusContext.SEARCH: "Search cleared",
    FocusContext.NAME: "Name field cleared",
    FocusContext.EMAIL: "Email field cleared",
    FocusContext.PASSWORD: "Password field cleared",
}

ALL_CLEARED = "All fields cleared"


@dataclass
class PageContext:
    """Collaborators injected into every page."""

    auth: AuthController
    store: EmailStore
    navigator: Navigator
    speech_input: SpeechInput
    speech_output: SpeechOutput
    redirect_delay: float = 2.0


class Page:
    """Base for all page controllers."""

    page: PageName = PageName.INBOX
    fields: tuple[FocusContext, ...] = ()
    default_focus: FocusContext | None = None
    deactivation_message = "Voice commands deactivated"

    def __init__(self, context: PageContext, route: str, params: dict[str, Any] | None = None):
        self.context = context
        self.route = route
        self.params = dict(params or {})
        self.mounted = False
        self.error: str | None = None
        self.success: str | None = None
        self.values: dict[FocusContext, str] = {name: "" for name in self.fields}

        self.router = IntentRouter()
        self.voice = VoiceSessionController(
            self,
            context.speech_input,
            context.speech_output,
            focus=self.default_focus or self.page.focus,
            rate_provider=lambda: context.auth.voice_speed,
        )
        self._register_common_handlers()
        self.register_handlers()

    # =========================================================================
    # VoiceHost
    # =========================================================================

    @property
    def command_table(self) -> CommandTable:
        route = self.route if self.page != PageName.EMAIL_VIEW else None
        return build_table(self.page, route)

    def activation_message(self, focus: FocusContext) -> str:
        return "Voice commands activated"

    def focus_announcement(self, target: FocusContext) -> str | None:
        return FOCUS_ANNOUNCEMENTS.get(target)

    async def handle_intent(self, intent: Intent) -> CommandResult | None:
        if not self.mounted:
            return None
        return await self.router.route(intent)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def mount(self) -> None:
        self.mounted = True
        await self.load()

    async def load(self) -> None:
        """Fetch what the page shows. Override."""

    def unmount(self) -> None:
        """Leave the page: results of outstanding calls are ignored from now on."""
        self.mounted = False
        self.voice.close()

    # =========================================================================
    # Banners and speech
    # =========================================================================

    def announce(self, text: str | None) -> bool:
        """Speak when voice mode is active."""
        return self.voice.say(text)

    def show_error(self, message: str, spoken: str | None = None) -> None:
        self.error = message
        self.success = None
        self.announce(spoken or message)

    def show_success(self, message: str, spoken: str | None = None) -> None:
        self.success = message
        self.error = None
        self.announce(spoken or message)

    def dismiss_error(self) -> None:
        self.error = None

    def dismiss_success(self) -> None:
        self.success = None

    async def navigate(self, route: str, state: dict[str, Any] | None = None) -> None:
        await self.context.navigator.navigate(route, state)

    # =========================================================================
    # Form values
    # =========================================================================

    def get_value(self, target: FocusContext) -> str:
        return self.values.get(target, "")

    def set_value(self, target: FocusContext, value: str) -> None:
        if target not in self.values:
            raise ValueError(f"{self.page.value} has no {target.value} field")
        self.values[target] = value

    def clear_value(self, target: FocusContext) -> None:
        self.set_value(target, "")

    def clear_all(self) -> None:
        for target in self.values:
            self.values[target] = ""

    def assignment_message(self, target: FocusContext, value: str) -> str | None:
        """What to say after a voice assignment. None says nothing."""
        return None

    async def submit(self) -> CommandResult | None:
        """Button and voice submission. Override."""
        return None

    # =========================================================================
    # Intent handlers
    # =========================================================================

    def register_handlers(self) -> None:
        """Register page-specific intent handlers. Override."""

    def _register_common_handlers(self) -> None:
        self.router.register(IntentType.NAVIGATE, self._on_navigate)
        self.router.register(IntentType.SET_FIELD, self._on_set_field)
        self.router.register(IntentType.APPEND_FIELD, self._on_append_field)
        self.router.register(IntentType.CLEAR_FIELD, self._on_clear_field)
        self.router.register(IntentType.SUBMIT, self._on_submit)
        self.router.register(IntentType.ACTION, self._on_logout, name=LOGOUT)

    async def _on_navigate(self, intent: Intent) -> CommandResult:
        await self.navigate(intent.route or "/")
        return CommandResult(success=True)

    async def _on_set_field(self, intent: Intent) -> CommandResult:
        messages = []
        for target, value in intent.assignments:
            self.set_value(target, value)
            message = self.assignment_message(target, value)
            if message:
                messages.append(message)
        return CommandResult(success=True, message=". ".join(messages) or None)

    async def _on_append_field(self, intent: Intent) -> CommandResult:
        if intent.field is None:
            return CommandResult(success=False, error="no_field")
        self.set_value(intent.field, append_text(self.get_value(intent.field), intent.value or ""))
        return CommandResult(success=True)

    async def _on_clear_field(self, intent: Intent) -> CommandResult:
        if intent.clears_all:
            self.clear_all()
            return CommandResult(success=True, message=ALL_CLEARED)
        self.clear_value(intent.field)
        return CommandResult(success=True, message=CLEAR_MESSAGES.get(intent.field))

    async def _on_submit(self, intent: Intent) -> CommandResult | None:
        return await self.submit()

    async def _on_logout(self, intent: Intent) -> CommandResult:
        await self.context.auth.logout()
        return CommandResult(success=True)


__all__ = ["ALL_CLEARED", "CLEAR_MESSAGES", "FOCUS_ANNOUNCEMENTS", "Page", "PageContext"]
