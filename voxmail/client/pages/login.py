"""Login page."""

from __future__ import annotations

import logging

from voxmail.client.errors import ValidationFailure, VoxmailError
from voxmail.client.pages.base import Page
from voxmail.voice.models import CommandResult, FocusContext, FieldKind, PageName, Route

logger = logging.getLogger(__name__)

LOGIN_FAILED_SPOKEN = "Login failed. Please check your credentials and try again."


def assignment_feedback(target: FocusContext, value: str) -> str | None:
    """Spoken confirmation for a voice-filled credential field. Passwords are never read back."""
    if target == FocusContext.PASSWORD:
        return "Password has been set"
    if target == FocusContext.NAME:
        return f"Name set to {value}"
    if target.kind == FieldKind.EMAIL_ADDRESS:
        return f"Email set to {value}"
    return None


class LoginPage(Page):
    page = PageName.LOGIN
    fields = (FocusContext.EMAIL, FocusContext.PASSWORD)
    default_focus = FocusContext.EMAIL

    def __init__(self, context, route, params=None):
        super().__init__(context, route, params)
        self.submitting = False

    def activation_message(self, focus: FocusContext) -> str:
        return 'Voice commands activated. Say "email is" followed by your address, then "password is".'

    def assignment_message(self, target: FocusContext, value: str) -> str | None:
        return assignment_feedback(target, value)

    @property
    def email(self) -> str:
        return self.get_value(FocusContext.EMAIL)

    @property
    def password(self) -> str:
        return self.get_value(FocusContext.PASSWORD)

    async def submit(self) -> CommandResult:
        if self.submitting:
            return CommandResult(success=False, error="already_submitting")
        if not self.email.strip() or not self.password:
            self.show_error("Email and password are required")
            return CommandResult(success=False, error=ValidationFailure.code)

        self.submitting = True
        try:
            await self.context.auth.login(self.email.strip(), self.password)
        except VoxmailError as e:
            if self.mounted:
                self.show_error(self.context.auth.error or e.message, LOGIN_FAILED_SPOKEN)
            return CommandResult(success=False, error=e.code)
        finally:
            self.submitting = False

        if self.mounted:
            await self.navigate(Route.INBOX.value)
        return CommandResult(success=True)
